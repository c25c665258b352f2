"""
Utility modules for the heuristic auditor.

Contains logging, configuration, retry policy, URL and screenshot
handling, and constants.
"""

from .log import setup_logger, get_logger
from .paths import validate_url, ensure_parent_dir
from .images import decode_image, ensure_image, sniff_image_type
from .retry import RetryPolicy
from .config import Settings
from .constants import (
    DEFAULT_USER_AGENT,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_VISUAL_RETRY_ATTEMPTS,
    DEFAULT_VISUAL_RETRY_DELAY,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_PIPELINE_TIMEOUT,
    MIN_SCREENSHOT_BYTES,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "validate_url",
    "ensure_parent_dir",
    "decode_image",
    "ensure_image",
    "sniff_image_type",
    "RetryPolicy",
    "Settings",
    "DEFAULT_USER_AGENT",
    "DEFAULT_REQUEST_TIMEOUT",
    "DEFAULT_VISUAL_RETRY_ATTEMPTS",
    "DEFAULT_VISUAL_RETRY_DELAY",
    "DEFAULT_MAX_CONCURRENCY",
    "DEFAULT_PIPELINE_TIMEOUT",
    "MIN_SCREENSHOT_BYTES",
]
