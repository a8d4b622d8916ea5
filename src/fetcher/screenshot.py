"""Screenshot capture backends."""

import base64
import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class ScreenshotCapturer(Protocol):
    """Anything that can turn a URL into a base64-encoded PNG."""

    async def capture(self, url: str) -> str:
        ...


class PlaywrightScreenshotCapturer:
    """
    Captures a full-page screenshot with headless Chromium.

    A new browser is launched per capture; scans are independent and
    must not share browser state.
    """

    def __init__(self, timeout: float, viewport_width: int = 1280, viewport_height: int = 800):
        self.timeout = timeout
        self.viewport = {"width": viewport_width, "height": viewport_height}

    async def capture(self, url: str) -> str:
        from playwright.async_api import async_playwright

        async with async_playwright() as pw:
            browser = await pw.chromium.launch(headless=True)
            try:
                context = await browser.new_context(viewport=self.viewport)
                page = await context.new_page()
                await page.goto(url, wait_until="load", timeout=self.timeout * 1000)
                screenshot_bytes = await page.screenshot(full_page=True)
                await context.close()
            finally:
                await browser.close()

        logger.debug(f"Captured {len(screenshot_bytes)} byte screenshot of {url}")
        return base64.b64encode(screenshot_bytes).decode()
