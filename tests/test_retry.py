import asyncio

import pytest

from fakes import RecordingSleep
from heuristic_auditor.exceptions import ModelCallError, SchemaValidationError
from heuristic_auditor.utils.retry import RetryPolicy


class Flaky:
    """Fails a fixed number of times, then returns a value."""

    def __init__(self, failures, error=ModelCallError("boom")):
        self.failures = failures
        self.error = error
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "done"


def test_success_after_one_retry(fake_sleep):
    policy = RetryPolicy(max_attempts=2, delay=1.0, sleep=fake_sleep)
    operation = Flaky(failures=1)

    assert asyncio.run(policy.run(operation)) == "done"
    assert operation.calls == 2
    assert fake_sleep.delays == [1.0]


def test_last_error_raised_when_exhausted(fake_sleep):
    policy = RetryPolicy(max_attempts=3, delay=0.5, backoff=2.0, sleep=fake_sleep)
    operation = Flaky(failures=5)

    with pytest.raises(ModelCallError):
        asyncio.run(policy.run(operation))
    assert operation.calls == 3
    assert fake_sleep.delays == [0.5, 1.0]


def test_no_retry_makes_one_attempt(fake_sleep):
    policy = RetryPolicy.no_retry()
    policy.sleep = fake_sleep
    operation = Flaky(failures=1)

    with pytest.raises(ModelCallError):
        asyncio.run(policy.run(operation))
    assert operation.calls == 1
    assert fake_sleep.delays == []


def test_unlisted_errors_are_not_retried(fake_sleep):
    policy = RetryPolicy(max_attempts=3, retry_on=(SchemaValidationError,), sleep=fake_sleep)
    operation = Flaky(failures=1, error=ModelCallError("transport"))

    with pytest.raises(ModelCallError):
        asyncio.run(policy.run(operation))
    assert operation.calls == 1


def test_delays_schedule():
    assert list(RetryPolicy(max_attempts=4, delay=1.0, backoff=3.0).delays()) == [1.0, 3.0, 9.0]
    assert list(RetryPolicy(max_attempts=1).delays()) == []


@pytest.mark.parametrize("kwargs", [{"max_attempts": 0}, {"delay": -1}])
def test_invalid_policy(kwargs):
    with pytest.raises(ValueError):
        RetryPolicy(**kwargs)


def test_recording_sleep_is_awaitable():
    sleep = RecordingSleep()
    asyncio.run(sleep(0.25))
    assert sleep.delays == [0.25]
