"""
Page capture using Playwright.

Renders a page in headless Chromium and returns the final HTML, a
markdown text rendition, a full-page PNG screenshot and the title.
"""

import asyncio
from typing import Optional

from playwright.async_api import async_playwright, Browser, Page, Error as PlaywrightError, TimeoutError as PlaywrightTimeout

from ..exceptions import CaptureError
from ..utils.constants import DEFAULT_CAPTURE_TIMEOUT, DEFAULT_USER_AGENT
from ..utils.log import get_logger
from ..utils.paths import validate_url
from .page import CapturedPage, html_to_markdown


class PageCapture:
    """
    Captures pages with a Playwright headless browser.

    Usable as an async context manager; capture() starts the browser on
    first use otherwise.
    """

    VIEWPORT = {"width": 1920, "height": 1080}

    def __init__(
        self,
        timeout: int = DEFAULT_CAPTURE_TIMEOUT,
        wait_until: str = "networkidle",
        headless: bool = True,
        settle_delay: float = 1.0
    ):
        """
        Initialize page capture.

        Args:
            timeout: Page load timeout in milliseconds
            wait_until: Event to wait for ('load', 'domcontentloaded', 'networkidle')
            headless: Run browser in headless mode
            settle_delay: Seconds to wait after load for late content
        """
        self.timeout = timeout
        self.wait_until = wait_until
        self.headless = headless
        self.settle_delay = settle_delay
        self.logger = get_logger("capture")

        self._playwright = None
        self._browser: Optional[Browser] = None

    async def start(self) -> None:
        """Start the Playwright browser instance."""
        self.logger.info("Starting Playwright browser...")
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self.headless,
            args=[
                '--disable-blink-features=AutomationControlled',
                '--no-sandbox',
                '--disable-setuid-sandbox',
                '--disable-dev-shm-usage',
            ]
        )
        self.logger.info("Browser started successfully")

    async def stop(self) -> None:
        """Stop the Playwright browser instance."""
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
        self.logger.info("Browser stopped")

    async def capture(self, url: str, user_agent: Optional[str] = None) -> CapturedPage:
        """
        Render a page and capture it.

        Args:
            url: URL to capture
            user_agent: Optional custom user agent

        Returns:
            CapturedPage with a full-page PNG screenshot

        Raises:
            InvalidInputError: If the URL is invalid
            CaptureError: On navigation failure, timeout or HTTP error status
        """
        url = validate_url(url)
        if not self._browser:
            await self.start()

        context = await self._browser.new_context(
            user_agent=user_agent or DEFAULT_USER_AGENT,
            viewport=self.VIEWPORT,
            ignore_https_errors=True,
        )
        page: Optional[Page] = None

        try:
            page = await context.new_page()
            self.logger.info(f"Capturing: {url}")
            response = await page.goto(url, wait_until=self.wait_until, timeout=self.timeout)

            if not response:
                raise CaptureError(f"No response for {url}")
            if response.status >= 400:
                raise CaptureError(f"HTTP {response.status} for {url}")

            # Wait for any additional dynamic content
            await asyncio.sleep(self.settle_delay)

            final_url = page.url
            html = await page.content()
            title = await page.title()
            screenshot = await page.screenshot(full_page=True, type="png")

        except PlaywrightTimeout:
            raise CaptureError(f"Timeout capturing {url} after {self.timeout}ms")
        except PlaywrightError as e:
            raise CaptureError(f"Error capturing {url}: {e}")
        finally:
            if page:
                await page.close()
            await context.close()

        self.logger.debug(f"Captured {final_url}: {len(html)} chars, {len(screenshot)} byte screenshot")
        return CapturedPage.from_payload(
            url=final_url,
            html=html,
            markdown=html_to_markdown(html),
            screenshot=screenshot,
            metadata={"title": title, "requestedUrl": url, "statusCode": response.status},
        )

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.stop()
