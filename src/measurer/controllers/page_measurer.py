# src/measurer/controllers/page_measurer.py
import logging
from typing import Optional

from playwright.async_api import CDPSession, Error as PlaywrightError

from crawler.utils.url_utils import UrlUtils
from emissions.estimator import CarbonEstimator
from measurer.model import MEASURE_EVENTS, MEASURE_MODES, WAIT_UNTIL, MeasureSettings, PageMeasurement, Visit
from measurer.services.browser_session_service import BrowserSession
from measurer.services.transfer_observer_service import ByteAccumulator, build_observer
from website_carbon.errors import ConfigurationError

logger = logging.getLogger(__name__)


class PageMeasurer:
    """
    Loads one URL in the browser and reports the bytes it transferred and the
    resulting emissions.

    A cold visit clears the browser cache, cookies and the origin's storage
    first; a warm visit reuses whatever the previous visits left behind.
    Each attempt opens its own page and DevTools session and closes both
    before returning, on success and on failure.
    """

    def __init__(
            self,
            browser: BrowserSession,
            estimator: CarbonEstimator,
            settings: MeasureSettings,
            is_green: bool = False,
    ):
        if settings.mode not in MEASURE_MODES:
            raise ConfigurationError(f"Unsupported measurement mode: {settings.mode}")
        if settings.event not in MEASURE_EVENTS:
            raise ConfigurationError(f"Unsupported measurement event: {settings.event}")

        self.browser = browser
        self.estimator = estimator
        self.settings = settings
        self.is_green = is_green

    async def measure(self, url: str, visit: Visit) -> PageMeasurement:
        """
        Measures one page load. Navigation and protocol errors are logged and
        returned as a measurement without emissions; they are never raised.
        """
        accumulator = ByteAccumulator()
        try:
            await self._load(url, accumulator, clear_cache_before_load=(visit == "cold"))
        except PlaywrightError as e:
            logger.warning("⚠️  Failed to load %s: %s", url, _first_line(e))
            return PageMeasurement(url=url, visit=visit, bytes_transferred=accumulator.total)

        co2_grams, rating = self.estimator.estimate(accumulator.total, self.is_green)
        return PageMeasurement(
            url=url,
            visit=visit,
            bytes_transferred=accumulator.total,
            co2_grams=co2_grams,
            rating=rating,
        )

    async def _load(self, url: str, accumulator: ByteAccumulator, clear_cache_before_load: bool) -> None:
        page = await self.browser.new_page()
        try:
            client = await self.browser.new_cdp_session(page)
            try:
                await client.send("Network.enable")
                if clear_cache_before_load:
                    await self._clear_browser_state(client, url)

                async with build_observer(self.settings.mode, page, client, accumulator):
                    await page.goto(
                        url,
                        wait_until=WAIT_UNTIL[self.settings.event],
                        timeout=self.settings.timeout_ms,
                    )
            finally:
                await _quietly(client.detach(), "detach DevTools session", url)
        finally:
            await _quietly(page.close(), "close page", url)

    @staticmethod
    async def _clear_browser_state(client: CDPSession, url: str) -> None:
        await client.send("Network.clearBrowserCache")
        await client.send("Network.clearBrowserCookies")
        origin: Optional[str] = UrlUtils.get_origin(url)
        if origin:
            await client.send("Storage.clearDataForOrigin", {"origin": origin, "storageTypes": "all"})
        logger.debug("Cache and storage cleared for %s.", url)


async def _quietly(awaitable, action: str, url: str) -> None:
    """Teardown step whose failure must not mask the measurement outcome."""
    try:
        await awaitable
    except PlaywrightError as e:
        logger.debug("Could not %s for %s: %s", action, url, _first_line(e))


def _first_line(error: Exception) -> str:
    message = str(error).strip()
    return message.splitlines()[0] if message else type(error).__name__
