"""
Bounded retry policy for external calls.

The policy is an object injected into the stage that needs it, so the
attempt count and delay can be tested without a real network call.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

from .log import get_logger

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """
    Retry an async operation a fixed number of times.

    Attributes:
        max_attempts: Total attempts including the first one
        delay: Seconds to wait before each retry
        backoff: Multiplier applied to the delay after each retry (1.0 = fixed)
        retry_on: Exception types that trigger a retry
        sleep: Awaitable sleep function, replaceable in tests
    """
    max_attempts: int = 2
    delay: float = 1.0
    backoff: float = 1.0
    retry_on: Tuple[Type[BaseException], ...] = (Exception,)
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep, repr=False)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay < 0:
            raise ValueError("delay must not be negative")

    @classmethod
    def no_retry(cls) -> "RetryPolicy":
        """Policy that makes exactly one attempt."""
        return cls(max_attempts=1, delay=0.0)

    def delays(self):
        """Yield the pause taken before each retry."""
        current = self.delay
        for _ in range(self.max_attempts - 1):
            yield current
            current *= self.backoff

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        description: str = "operation"
    ) -> T:
        """
        Run an operation, retrying on the configured exceptions.

        Args:
            operation: Zero-argument coroutine factory
            description: Label used in log messages

        Returns:
            The operation's result

        Raises:
            The last exception when every attempt failed
        """
        logger = get_logger("retry")
        pauses = list(self.delays())
        last_error: Optional[BaseException] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation()
            except self.retry_on as e:
                last_error = e
                if attempt >= self.max_attempts:
                    break
                pause = pauses[attempt - 1]
                logger.warning(
                    f"{description} failed (attempt {attempt}/{self.max_attempts}): {e}; "
                    f"retrying in {pause:.1f}s"
                )
                await self.sleep(pause)

        logger.warning(f"{description} failed after {self.max_attempts} attempt(s): {last_error}")
        raise last_error
