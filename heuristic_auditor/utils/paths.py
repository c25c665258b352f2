"""
URL and filesystem utilities for the heuristic auditor.

Provides URL validation for page capture and directory helpers for
writing result files.
"""

import os
from urllib.parse import urlparse, urlunparse

from ..exceptions import InvalidInputError


def validate_url(url: str) -> str:
    """
    Validate and normalize a page URL.

    Args:
        url: URL string to validate

    Returns:
        Normalized URL string

    Raises:
        InvalidInputError: If URL is empty or has no host
    """
    url = (url or "").strip()
    if not url:
        raise InvalidInputError("URL is required")

    # Add protocol if missing
    if not url.startswith(('http://', 'https://')):
        url = 'https://' + url

    parsed = urlparse(url)
    if not parsed.netloc or ' ' in parsed.netloc:
        raise InvalidInputError(f"Invalid URL: {url}")

    return urlunparse((
        parsed.scheme.lower(),
        parsed.netloc.lower(),
        parsed.path or '/',
        parsed.params,
        parsed.query,
        ''  # Remove fragment
    ))


def ensure_parent_dir(file_path: str) -> None:
    """
    Ensure the parent directory of a file exists.

    Args:
        file_path: Path to a file
    """
    parent = os.path.dirname(os.path.abspath(file_path))
    os.makedirs(parent, exist_ok=True)
