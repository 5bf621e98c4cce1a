# src/crawler/services/async_page_fetcher_service.py
import asyncio
import logging
import time
from typing import Dict, Optional

import aiohttp

from crawler.model import FetchResult

logger = logging.getLogger(__name__)

# Status codes for requests that never produced an HTTP response
NETWORK_ERROR = -1
INTERNAL_ERROR = -2


class PageFetcherService:
    """
    Owns the aiohttp session shared by the discovery services (crawler,
    robots.txt, sitemap). A semaphore caps the requests in flight.
    """

    def __init__(self, config: Dict, user_agent: str, concurrency: int = 3):
        session_config = config.get('session', {})
        self.total_timeout = int(session_config.get('time_out', 30))
        self.read_timeout = float(session_config.get('client_read_timeout', 10.0))
        self.user_agent = user_agent
        self.semaphore = asyncio.Semaphore(max(1, concurrency))
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "PageFetcherService":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def initialize(self) -> None:
        if self.session is not None and not self.session.closed:
            return
        self.session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(limit=0, ttl_dns_cache=300),
            timeout=aiohttp.ClientTimeout(total=self.total_timeout),
            headers={'Accept-Encoding': 'gzip, deflate', 'User-Agent': self.user_agent},
        )
        logger.debug("Discovery session opened (timeout %ss).", self.total_timeout)

    async def close(self) -> None:
        if self.session is not None and not self.session.closed:
            await self.session.close()


class PageFetcher(PageFetcherService):
    """Fetches crawl candidates and keeps the body of HTML pages only."""

    async def fetch_page(self, url: str) -> FetchResult:
        """
        GETs one URL, following redirects. Never raises: failures come back
        with status NETWORK_ERROR or INTERNAL_ERROR and an error message.
        """
        await self.initialize()
        started = time.perf_counter()
        try:
            async with self.semaphore:
                async with self.session.get(url, allow_redirects=True) as response:
                    content_type = response.headers.get("Content-Type", "").lower()
                    content = None
                    if response.status == 200 and "text/html" in content_type:
                        content = await self._read_text(response, url)
                    result = FetchResult(
                        url=url,
                        status=response.status,
                        final_url=str(response.url),
                        content_type=content_type,
                        content=content,
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            result = FetchResult(url=url, status=NETWORK_ERROR, error=str(e) or type(e).__name__)
        except Exception as e:
            logger.error("Internal fetch error for %s: %s", url, e, exc_info=True)
            result = FetchResult(url=url, status=INTERNAL_ERROR, error=str(e))

        result.elapsed_time = round(time.perf_counter() - started, 4)
        return result

    async def _read_text(self, response: aiohttp.ClientResponse, url: str) -> Optional[str]:
        try:
            return await asyncio.wait_for(response.text(), timeout=self.read_timeout)
        except asyncio.TimeoutError:
            logger.warning("⚠️  Timed out reading %s", url)
            return None
        except UnicodeDecodeError:
            raw = await response.read()
            return raw.decode('utf-8', errors='replace')
