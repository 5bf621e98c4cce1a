# src/measurer/services/browser_session_service.py
import logging
from typing import Optional

from playwright.async_api import Browser, BrowserContext, CDPSession, Page, Playwright, async_playwright

from measurer.model import MeasureSettings

logger = logging.getLogger(__name__)


class BrowserSession:
    """
    Headless Chromium with a single browser context.

    All measured pages are opened in the same context so that a warm visit
    finds the HTTP cache filled by the cold visit before it.
    """

    def __init__(self, settings: MeasureSettings):
        self.settings = settings
        self._playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def start(self) -> None:
        if self.context is not None:
            return
        self._playwright = await async_playwright().start()
        self.browser = await self._playwright.chromium.launch(headless=self.settings.headless)
        self.context = await self.browser.new_context(
            viewport={"width": self.settings.viewport_width, "height": self.settings.viewport_height},
        )
        logger.debug("Browser session started (headless=%s).", self.settings.headless)

    async def new_page(self) -> Page:
        if self.context is None:
            await self.start()
        return await self.context.new_page()

    async def new_cdp_session(self, page: Page) -> CDPSession:
        return await self.context.new_cdp_session(page)

    async def close(self) -> None:
        try:
            if self.context is not None:
                await self.context.close()
            if self.browser is not None:
                await self.browser.close()
        finally:
            if self._playwright is not None:
                await self._playwright.stop()
            self.context = None
            self.browser = None
            self._playwright = None
            logger.debug("Browser session closed.")
