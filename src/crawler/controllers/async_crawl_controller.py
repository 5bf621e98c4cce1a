# src/crawler/controllers/async_crawl_controller.py
import asyncio
import logging
from typing import Dict, List, Optional, Set, Tuple

from crawler.managers.worker_pool_manager import WorkerPoolManager
from crawler.model import CrawledPage, CrawlSettings
from crawler.services.async_page_fetcher_service import PageFetcher
from crawler.services.generate_default_user_agent_service import generate_default_user_agent
from crawler.services.link_processor_service import LinkProcessorService
from crawler.services.robots_txt_service import RobotsTxtService
from crawler.utils.run_timers import RunTimers
from crawler.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)

QueueItem = Tuple[str, int]


class AsyncCrawlController:
    """
    Breadth-first site crawler used when a site publishes no usable sitemap.

    Starting from the site root it follows same-host links up to a maximum
    depth, skipping stylesheets, scripts, archives, images, videos and XML
    files, and records every successfully fetched HTML page until the page
    budget is reached or no links are left.
    """

    def __init__(
            self,
            start_url: str,
            config: Optional[Dict] = None,
            page_fetcher: Optional[PageFetcher] = None,
            link_processor: Optional[LinkProcessorService] = None,
    ):
        """
        Args:
            start_url: Site root the crawl starts from.
            config: Settings dict; its 'session' section configures the fetcher.
            page_fetcher: Pre-built fetcher. A fetcher passed in is not closed by the crawl.
            link_processor: Link extractor, mostly for tests.
        """
        self.config = config or {}
        self.start_url = start_url
        self.site_url = start_url
        self.user_agent = generate_default_user_agent()
        self.page_fetcher = page_fetcher
        self.link_processor = link_processor or LinkProcessorService()
        self.robots: Optional[RobotsTxtService] = None
        self.timer = RunTimers("crawl")

        self.settings = CrawlSettings()
        self.pages: List[CrawledPage] = []
        self.failed_requests = 0
        self.seen: Set[str] = set()
        self.queue: asyncio.Queue = asyncio.Queue()
        self.budget_reached = asyncio.Event()
        self._pages_lock = asyncio.Lock()

    async def run(self, settings: CrawlSettings) -> List[str]:
        """Crawls the site and returns page URLs in the order they were fetched."""
        self.settings = settings
        owns_fetcher = self.page_fetcher is None
        if owns_fetcher:
            self.page_fetcher = PageFetcher(self.config, self.user_agent, concurrency=settings.concurrency)

        with self.timer:
            try:
                await self.page_fetcher.initialize()
                if settings.respect_robots_txt and self.page_fetcher.session is not None:
                    self.robots = RobotsTxtService(self.page_fetcher.session, self.user_agent)
                await self._crawl()
            finally:
                if owns_fetcher:
                    await self.page_fetcher.close()

        logger.info(
            "Crawl finished: %d pages in %.2fs (%d requests failed).",
            len(self.pages), self.timer.duration, self.failed_requests
        )
        return [page.url for page in self.pages]

    async def _crawl(self) -> None:
        root = UrlUtils.normalize_url(self.start_url, self.start_url)
        self.seen.add(root)
        self.queue.put_nowait((root, 0))

        workers = WorkerPoolManager(self._visit, self.queue, self.settings.concurrency)
        workers.start()
        budget_waiter = asyncio.create_task(self.budget_reached.wait())
        drained_waiter = asyncio.create_task(self.queue.join())
        try:
            await asyncio.wait({budget_waiter, drained_waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            # Stop handing out work before the workers are cancelled
            self.budget_reached.set()
            for waiter in (budget_waiter, drained_waiter):
                waiter.cancel()
            await asyncio.gather(budget_waiter, drained_waiter, return_exceptions=True)
            await workers.shutdown()

    async def _visit(self, item: QueueItem) -> None:
        url, depth = item
        if self.budget_reached.is_set():
            return
        if self.robots is not None and not await self.robots.can_fetch(url):
            return

        result = await self.page_fetcher.fetch_page(url)
        if not result.is_html_page:
            self.failed_requests += 1
            logger.debug("Crawl skipped %s (status %s).", url, result.status)
            return
        if depth == 0 and result.final_url:
            # A redirected root moves the whole site, e.g. to its www host
            self.site_url = result.final_url

        async with self._pages_lock:
            if self.budget_reached.is_set():
                return
            self.pages.append(CrawledPage(
                url=url,
                depth=depth,
                status_code=result.status,
                content_type=result.content_type,
            ))
            if self.settings.max_pages is not None and len(self.pages) >= self.settings.max_pages:
                logger.debug("Crawl page budget of %d reached.", self.settings.max_pages)
                self.budget_reached.set()
                return

        if depth < self.settings.max_depth:
            # Relative links resolve against the URL the page was served from
            self._enqueue_links(result.content, result.final_url or url, depth + 1)

    def _enqueue_links(self, html: str, source_url: str, depth: int) -> None:
        for link in self.link_processor.extract_page_links(html, source_url, self.site_url):
            if link not in self.seen:
                self.seen.add(link)
                self.queue.put_nowait((link, depth))
