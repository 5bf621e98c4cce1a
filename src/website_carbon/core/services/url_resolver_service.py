# src/website_carbon/core/services/url_resolver_service.py
import logging
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional

from crawler.controllers.async_crawl_controller import AsyncCrawlController
from crawler.model import CrawlSettings, SitemapSettings
from crawler.services.async_page_fetcher_service import PageFetcherService
from crawler.services.generate_default_user_agent_service import generate_default_user_agent
from crawler.services.sitemap_service import SitemapService
from crawler.utils.url_utils import UrlUtils
from website_carbon.core.managers.config_manager import config_manager
from website_carbon.errors import ConfigurationError, NoUrlsFound
from website_carbon.model import AssessmentTarget

logger = logging.getLogger(__name__)

SitemapFetcher = Callable[[str], Awaitable[List[str]]]
SiteCrawler = Callable[[str, int], Awaitable[List[str]]]

COMMENT_PREFIXES = ('#', '//')


def read_url_file(file_path: Path) -> List[str]:
    """
    Reads page URLs from a text file, one per line.

    Blank lines and lines starting with '#' or '//' are ignored; lines that
    are not http(s) URLs are skipped with a warning.

    Raises:
        ConfigurationError: when the file cannot be read.
    """
    try:
        contents = Path(file_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Error reading source file {file_path}: {e}") from e

    urls = []
    for line in contents.splitlines():
        line = line.strip()
        if not line or line.startswith(COMMENT_PREFIXES):
            continue
        if not UrlUtils.is_valid_url(line):
            logger.warning("⚠️  Invalid URL skipped in file: %s", line)
            continue
        urls.append(line)

    logger.info("📄 Using %d URLs in '%s'", len(urls), file_path)
    return urls


async def fetch_sitemap_urls(site_url: str) -> List[str]:
    """Sitemap discovery backed by aiohttp, configured from the 'discovery' section."""
    config = _discovery_fetch_config()
    settings = SitemapSettings(
        timeout=int(config_manager.get_nested("discovery.sitemap_timeout", 15)),
        retries=int(config_manager.get_nested("discovery.sitemap_retries", 2)),
        concurrency=int(config_manager.get_nested("discovery.sitemap_concurrency", 5)),
    )
    user_agent = generate_default_user_agent("SitemapperBot/1.0")
    async with PageFetcherService(config, user_agent, concurrency=settings.concurrency) as fetcher:
        return await SitemapService(fetcher.session, settings, fetcher.semaphore).fetch_urls(site_url)


async def crawl_site_urls(site_url: str, page_budget: int) -> List[str]:
    """Link-following discovery for sites without a sitemap."""
    logger.info("🕷️  Crawling site to discover pages...")
    settings = CrawlSettings(
        max_pages=page_budget,
        concurrency=int(config_manager.get_nested("discovery.crawl_concurrency", 3)),
        max_depth=int(config_manager.get_nested("discovery.crawl_max_depth", 3)),
        respect_robots_txt=bool(config_manager.get_nested("discovery.respect_robots_txt", True)),
    )
    controller = AsyncCrawlController(start_url=site_url, config=_discovery_fetch_config())
    urls = await controller.run(settings)
    logger.info("🕸️  Found %d URLs by crawling the site", len(urls))
    return urls


def _discovery_fetch_config() -> Dict:
    return {"session": config_manager.get_nested("session", {})}


class UrlResolver:
    """
    Decides which pages to assess.

    Precedence: an explicit URL file, then the site's sitemap, then a crawl
    of the site. The result is capped to the page budget in discovery order.
    """

    def __init__(
            self,
            sitemap_fetcher: SitemapFetcher = fetch_sitemap_urls,
            site_crawler: SiteCrawler = crawl_site_urls,
            force_crawler: Optional[bool] = None,
    ):
        self.sitemap_fetcher = sitemap_fetcher
        self.site_crawler = site_crawler
        if force_crawler is None:
            force_crawler = bool(config_manager.get_nested("discovery.force_crawler", False))
        self.force_crawler = force_crawler

    async def resolve(self, target: AssessmentTarget, page_budget: int) -> List[str]:
        """
        Returns at most `page_budget` URLs.

        Raises:
            NoUrlsFound: when the chosen sources yield nothing.
            ConfigurationError: when the URL file cannot be read.
        """
        if page_budget < 1:
            raise ConfigurationError(f"Page budget must be a positive integer, got {page_budget}")

        if target.uses_file:
            if target.site_url:
                logger.info("ℹ️  Using URLs from '%s'; ignoring site argument %s.", target.url_file, target.site_url)
            urls = read_url_file(target.url_file)
        else:
            urls = await self._discover(target.site_url, page_budget)

        if not urls:
            raise NoUrlsFound()

        if len(urls) > page_budget:
            logger.info("ℹ️  Limiting to %d of %d pages.", page_budget, len(urls))
        return urls[:page_budget]

    async def _discover(self, site_url: str, page_budget: int) -> List[str]:
        urls: List[str] = []
        if self.force_crawler:
            logger.info("ℹ️  Crawler forced - skipping site map check.")
        else:
            urls = await self._from_sitemap(site_url)

        if not urls:
            urls = await self._from_crawl(site_url, page_budget)
        return urls

    async def _from_sitemap(self, site_url: str) -> List[str]:
        try:
            return list(await self.sitemap_fetcher(site_url))
        except Exception as e:
            logger.warning("⚠️  Site map discovery failed for %s: %s", site_url, e)
            return []

    async def _from_crawl(self, site_url: str, page_budget: int) -> List[str]:
        try:
            return list(await self.site_crawler(site_url, page_budget))
        except Exception as e:
            logger.warning("⚠️  Crawling %s failed: %s", site_url, e)
            return []
