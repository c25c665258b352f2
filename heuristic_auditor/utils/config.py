"""
Runtime configuration for the heuristic auditor.

Settings are read from environment variables, optionally seeded from a
.env file through python-dotenv.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from ..exceptions import InvalidInputError
from .constants import (
    DEFAULT_BASE_URL,
    DEFAULT_VISION_MODEL,
    DEFAULT_TEXT_MODEL,
    DEFAULT_TEMPERATURE,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_VISUAL_RETRY_ATTEMPTS,
    DEFAULT_VISUAL_RETRY_DELAY,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_PIPELINE_TIMEOUT,
    DEFAULT_CAPTURE_TIMEOUT,
)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    """Resolved configuration values."""
    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    vision_model: str = DEFAULT_VISION_MODEL
    text_model: str = DEFAULT_TEXT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    visual_retry_attempts: int = DEFAULT_VISUAL_RETRY_ATTEMPTS
    visual_retry_delay: float = DEFAULT_VISUAL_RETRY_DELAY
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    pipeline_timeout: Optional[float] = DEFAULT_PIPELINE_TIMEOUT
    reject_technical: bool = False
    require_evidence: bool = False
    capture_timeout: int = DEFAULT_CAPTURE_TIMEOUT

    @classmethod
    def from_env(
        cls,
        env_file: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None
    ) -> "Settings":
        """
        Build settings from the environment.

        Args:
            env_file: Optional .env path loaded before reading variables
            environ: Mapping to read instead of os.environ

        Returns:
            Settings instance

        Raises:
            InvalidInputError: If a numeric or boolean variable is malformed
        """
        if environ is None:
            load_dotenv(dotenv_path=env_file)
            environ = os.environ

        pipeline_timeout = _get_float(environ, "AUDITOR_PIPELINE_TIMEOUT", DEFAULT_PIPELINE_TIMEOUT)

        return cls(
            api_key=environ.get("AUDITOR_API_KEY", "").strip(),
            base_url=environ.get("AUDITOR_BASE_URL", "").strip() or DEFAULT_BASE_URL,
            vision_model=environ.get("AUDITOR_VISION_MODEL", "").strip() or DEFAULT_VISION_MODEL,
            text_model=environ.get("AUDITOR_TEXT_MODEL", "").strip() or DEFAULT_TEXT_MODEL,
            temperature=_get_float(environ, "AUDITOR_TEMPERATURE", DEFAULT_TEMPERATURE),
            request_timeout=_get_float(environ, "AUDITOR_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
            visual_retry_attempts=_get_int(
                environ, "AUDITOR_VISUAL_RETRY_ATTEMPTS", DEFAULT_VISUAL_RETRY_ATTEMPTS, minimum=1
            ),
            visual_retry_delay=_get_float(
                environ, "AUDITOR_VISUAL_RETRY_DELAY", DEFAULT_VISUAL_RETRY_DELAY, minimum=0
            ),
            max_concurrency=_get_int(
                environ, "AUDITOR_MAX_CONCURRENCY", DEFAULT_MAX_CONCURRENCY, minimum=1
            ),
            pipeline_timeout=pipeline_timeout if pipeline_timeout > 0 else None,
            reject_technical=_get_bool(environ, "AUDITOR_REJECT_TECHNICAL", False),
            require_evidence=_get_bool(environ, "AUDITOR_REQUIRE_EVIDENCE", False),
            capture_timeout=_get_int(environ, "AUDITOR_CAPTURE_TIMEOUT", DEFAULT_CAPTURE_TIMEOUT),
        )


def _get_raw(environ: Mapping[str, str], name: str) -> Optional[str]:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def _get_int(
    environ: Mapping[str, str],
    name: str,
    default: int,
    minimum: Optional[int] = None
) -> int:
    raw = _get_raw(environ, name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise InvalidInputError(f"{name} must be an integer, got {raw!r}")
    if minimum is not None and value < minimum:
        raise InvalidInputError(f"{name} must be at least {minimum}, got {value}")
    return value


def _get_float(
    environ: Mapping[str, str],
    name: str,
    default: float,
    minimum: Optional[float] = None
) -> float:
    raw = _get_raw(environ, name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise InvalidInputError(f"{name} must be a number, got {raw!r}")
    if minimum is not None and value < minimum:
        raise InvalidInputError(f"{name} must be at least {minimum}, got {value}")
    return value


def _get_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise InvalidInputError(f"{name} must be a boolean, got {raw!r}")
