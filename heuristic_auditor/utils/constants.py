"""
Shared constants for the heuristic auditor.

Contains common configuration values used across multiple modules.
"""

# Default user agent string for page capture and screenshot downloads
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

# OpenAI-compatible endpoint used for both vision and text evaluation
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai"
DEFAULT_VISION_MODEL = "gemini-2.5-flash"
DEFAULT_TEXT_MODEL = "gemini-2.5-flash"

# Low temperature keeps per-heuristic output focused
DEFAULT_TEMPERATURE = 0.1

# Per model call timeout in seconds
DEFAULT_REQUEST_TIMEOUT = 60

# Visual decomposition retry: one retry after a fixed one second pause
DEFAULT_VISUAL_RETRY_ATTEMPTS = 2
DEFAULT_VISUAL_RETRY_DELAY = 1.0

# Maximum concurrent heuristic evaluations
DEFAULT_MAX_CONCURRENCY = 10

# Whole pipeline deadline in seconds (0 disables)
DEFAULT_PIPELINE_TIMEOUT = 180

# Page load timeout in milliseconds (for Playwright)
DEFAULT_CAPTURE_TIMEOUT = 30000

# Screenshot download timeout in seconds
DEFAULT_DOWNLOAD_TIMEOUT = 30

# Smallest payload accepted as a real screenshot
MIN_SCREENSHOT_BYTES = 1024

# Context excerpt limits sent to the evaluator model
VISUAL_CONTEXT_CHARS = 3000
STRUCTURAL_CONTEXT_CHARS = 2000
MARKDOWN_CONTEXT_CHARS = 2000
HTML_CONTEXT_CHARS = 1500
VISUAL_HTML_EXCERPT_CHARS = 3000
