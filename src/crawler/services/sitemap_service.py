# src/crawler/services/sitemap_service.py
import asyncio
import gzip
import logging
from typing import List, Optional

import aiohttp
from bs4 import BeautifulSoup

from crawler.model import SitemapDocument, SitemapSettings
from crawler.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"


class SitemapFetchError(Exception):
    """A sitemap document could not be fetched or is not a sitemap."""


class SitemapLimitReached(SitemapFetchError):
    """The sitemap document limit for this run is used up."""


class SitemapService:
    """
    Reads the page locations a site declares in its sitemap.

    Sitemap index documents are followed, child sitemaps are fetched in
    parallel groups and gzip-compressed documents are unpacked. A failure on
    the root document degrades to an empty list; failing child sitemaps are
    skipped.
    """

    def __init__(
            self,
            session: aiohttp.ClientSession,
            settings: Optional[SitemapSettings] = None,
            semaphore: Optional[asyncio.Semaphore] = None,
    ):
        self._session = session
        self.settings = settings or SitemapSettings()
        self._semaphore = semaphore or asyncio.Semaphore(self.settings.concurrency)
        self._timeout = aiohttp.ClientTimeout(total=self.settings.timeout)
        self._documents_fetched = 0
        self._limit_reached = False

    async def fetch_urls(self, site_url: str) -> List[str]:
        """
        Returns the page URLs declared in `<site_url>/sitemap.xml`, in document order.
        Never raises for fetch or parse problems.
        """
        sitemap_url = UrlUtils.sitemap_url_for(site_url)
        logger.info("🔍 Checking for site map: %s", sitemap_url)
        self._documents_fetched = 0
        self._limit_reached = False

        try:
            urls = await self._collect(sitemap_url, seen=set())
        except SitemapFetchError as e:
            logger.warning("⚠️  Could not fetch or parse site map: %s", e)
            return []

        if self._limit_reached:
            logger.warning("⚠️  Sitemap document limit (%d) reached.", self.settings.max_documents)
        logger.info("📄 Found %d URLs in the site map", len(urls))
        return urls

    async def _collect(self, sitemap_url: str, seen: set) -> List[str]:
        seen.add(sitemap_url)
        document = await self.fetch_document(sitemap_url)
        if document.kind == "urlset":
            return _unique(document.locations)

        children = [loc for loc in document.locations if loc not in seen]
        urls: List[str] = []
        step = self.settings.concurrency
        for i in range(0, len(children), step):
            if self._limit_reached:
                break
            group = children[i:i + step]
            results = await asyncio.gather(
                *(self._collect(child, seen) for child in group),
                return_exceptions=True,
            )
            for child, result in zip(group, results):
                if isinstance(result, SitemapLimitReached):
                    logger.debug("Not fetching child sitemap %s: %s", child, result)
                elif isinstance(result, SitemapFetchError):
                    logger.warning("⚠️  Skipping child sitemap %s: %s", child, result)
                elif isinstance(result, BaseException):
                    raise result
                else:
                    urls.extend(result)
        return _unique(urls)

    async def fetch_document(self, sitemap_url: str) -> SitemapDocument:
        """
        Fetches and parses one sitemap document, retrying transient failures.

        Raises:
            SitemapLimitReached: when `max_documents` documents were already requested.
            SitemapFetchError: when the document cannot be fetched or parsed.
        """
        if self._documents_fetched >= self.settings.max_documents:
            self._limit_reached = True
            raise SitemapLimitReached(f"limit of {self.settings.max_documents} documents reached")
        self._documents_fetched += 1
        async with self._semaphore:
            body = await self._fetch_body(sitemap_url)
        return self.parse_document(sitemap_url, body)

    async def _fetch_body(self, sitemap_url: str) -> bytes:
        last_error: Optional[str] = None
        for attempt in range(self.settings.retries + 1):
            try:
                async with self._session.get(sitemap_url, timeout=self._timeout) as response:
                    if response.status == 200:
                        return await response.read()
                    last_error = f"HTTP {response.status} for {sitemap_url}"
                    if response.status < 500:
                        break
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_error = f"{type(e).__name__} for {sitemap_url}: {e}"
            logger.debug("Sitemap attempt %d failed: %s", attempt + 1, last_error)
        raise SitemapFetchError(last_error or f"Could not fetch {sitemap_url}")

    @staticmethod
    def parse_document(sitemap_url: str, body: bytes) -> SitemapDocument:
        """
        Parses a urlset or sitemapindex document.

        Raises:
            SitemapFetchError: when the payload is not a sitemap.
        """
        if body[:2] == GZIP_MAGIC:
            try:
                body = gzip.decompress(body)
            except (OSError, EOFError) as e:
                raise SitemapFetchError(f"Corrupt gzip sitemap {sitemap_url}: {e}") from e

        soup = BeautifulSoup(body, "xml")
        root = soup.find(["urlset", "sitemapindex"])
        if root is None:
            raise SitemapFetchError(f"No urlset or sitemapindex in {sitemap_url}")

        kind = root.name
        entry_tag = "url" if kind == "urlset" else "sitemap"
        locations = []
        for entry in root.find_all(entry_tag, recursive=False):
            loc = entry.find("loc", recursive=False)
            if loc is None:
                continue
            text = loc.get_text(strip=True)
            if text:
                locations.append(text)
        return SitemapDocument(url=sitemap_url, kind=kind, locations=locations)


def _unique(urls: List[str]) -> List[str]:
    return list(dict.fromkeys(urls))
