"""
Screenshot payload helpers.

Screenshots reach the pipeline as raw bytes, base64 text or a data URL.
They are decoded to bytes and checked before any model call is made.
"""

import base64
import binascii
import re
from typing import Union

from ..exceptions import InvalidScreenshotError
from .constants import MIN_SCREENSHOT_BYTES

DATA_URL_PATTERN = re.compile(r'^data:image/[\w.+-]+;base64,', re.I)
REMOTE_REF_PATTERN = re.compile(r'^\s*https?://', re.I)


def sniff_image_type(image: bytes) -> str:
    """Return the MIME type implied by an image's magic bytes."""
    if image.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image.startswith((b"GIF87a", b"GIF89a")):
        return "image/gif"
    if image[:4] == b"RIFF" and image[8:12] == b"WEBP":
        return "image/webp"
    return "application/octet-stream"


def image_data_url(image: bytes) -> str:
    """Encode image bytes as a data URL with a sniffed MIME type."""
    return f"data:{sniff_image_type(image)};base64,{base64.b64encode(image).decode('ascii')}"


def decode_image(screenshot: Union[bytes, bytearray, str, None]) -> bytes:
    """
    Decode a screenshot payload to raw bytes.

    Args:
        screenshot: Raw bytes, base64 text or a data:image URL

    Returns:
        Image bytes (possibly empty)

    Raises:
        InvalidScreenshotError: For remote references or undecodable text
    """
    if screenshot is None:
        return b""
    if isinstance(screenshot, (bytes, bytearray)):
        return bytes(screenshot)
    if not isinstance(screenshot, str):
        raise InvalidScreenshotError(
            f"Unsupported screenshot payload type: {type(screenshot).__name__}"
        )

    text = screenshot.strip()
    if REMOTE_REF_PATTERN.match(text):
        raise InvalidScreenshotError(
            "Screenshot is a remote reference; resolve it to image data before evaluating"
        )
    text = DATA_URL_PATTERN.sub("", text)
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidScreenshotError(f"Screenshot is not valid base64 data: {e}")


def ensure_image(screenshot: Union[bytes, bytearray, str, None]) -> bytes:
    """
    Decode and validate a screenshot payload.

    Raises:
        InvalidScreenshotError: If the payload is empty, smaller than
            MIN_SCREENSHOT_BYTES, a URL reference, or not PNG/JPEG/GIF/WEBP
    """
    image = decode_image(screenshot)
    if not image:
        raise InvalidScreenshotError("Screenshot data is missing")
    if len(image) < MIN_SCREENSHOT_BYTES:
        raise InvalidScreenshotError(
            f"Screenshot is too small ({len(image)} bytes, minimum {MIN_SCREENSHOT_BYTES})"
        )
    if sniff_image_type(image) == "application/octet-stream":
        raise InvalidScreenshotError("Screenshot is not a PNG, JPEG, GIF or WEBP image")
    return image
