"""
Capture module for the heuristic auditor.

Contains the captured page model, Playwright page capture and remote
screenshot resolution.
"""

from .page import CapturedPage, html_to_markdown
from .renderer import PageCapture
from .downloader import ScreenshotDownloader, resolve_screenshot

__all__ = [
    "CapturedPage",
    "html_to_markdown",
    "PageCapture",
    "ScreenshotDownloader",
    "resolve_screenshot",
]
