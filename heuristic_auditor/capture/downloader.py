"""
Screenshot resolver for capture sources that return remote references.

Uses aiohttp to fetch the image so the pipeline only ever sees inline
image bytes.
"""

import asyncio
from typing import Optional, Union

import aiohttp
from aiohttp import ClientTimeout, ClientError

from ..exceptions import CaptureError
from ..utils.constants import DEFAULT_DOWNLOAD_TIMEOUT, DEFAULT_USER_AGENT
from ..utils.images import REMOTE_REF_PATTERN, decode_image
from ..utils.log import get_logger


class ScreenshotDownloader:
    """
    Downloads remote screenshot references.

    Inline payloads (bytes, base64, data URLs) pass through decoded.
    """

    # Upper bound for a full-page screenshot
    MAX_BYTES = 25 * 1024 * 1024

    def __init__(
        self,
        timeout: int = DEFAULT_DOWNLOAD_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize the screenshot downloader.

        Args:
            timeout: Request timeout in seconds
            user_agent: User agent string for requests
            session: Optional shared aiohttp session
        """
        self.timeout = ClientTimeout(total=timeout)
        self.user_agent = user_agent
        self._session = session
        self.logger = get_logger("downloader")

    async def resolve(self, reference: Union[bytes, bytearray, str, None]) -> bytes:
        """
        Turn a screenshot reference into image bytes.

        Args:
            reference: URL, base64 text, data URL or raw bytes

        Returns:
            Image bytes (not yet validated as an image)

        Raises:
            CaptureError: If a remote reference cannot be downloaded
        """
        if isinstance(reference, str) and REMOTE_REF_PATTERN.match(reference):
            return await self._download(reference.strip())
        return decode_image(reference)

    async def _download(self, url: str) -> bytes:
        self.logger.debug(f"Downloading screenshot: {url}")
        try:
            if self._session is not None:
                return await self._fetch(self._session, url)
            async with aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent}
            ) as session:
                return await self._fetch(session, url)
        except ClientError as e:
            raise CaptureError(f"Client error downloading screenshot {url}: {e}")
        except asyncio.TimeoutError:
            raise CaptureError(f"Timeout downloading screenshot {url}")

    async def _fetch(self, session: aiohttp.ClientSession, url: str) -> bytes:
        async with session.get(url, allow_redirects=True) as response:
            if response.status != 200:
                raise CaptureError(f"HTTP {response.status} for screenshot: {url}")
            content = await response.read()
        if len(content) > self.MAX_BYTES:
            raise CaptureError(f"Screenshot too large ({len(content)} bytes): {url}")
        self.logger.debug(f"Downloaded screenshot: {url} ({len(content)} bytes)")
        return content


async def resolve_screenshot(
    reference: Union[bytes, bytearray, str, None],
    timeout: int = DEFAULT_DOWNLOAD_TIMEOUT
) -> bytes:
    """Resolve a screenshot reference to bytes with a one-off downloader."""
    return await ScreenshotDownloader(timeout=timeout).resolve(reference)
