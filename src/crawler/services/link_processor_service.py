# src/crawler/services/link_processor_service.py
import logging
from typing import Iterator, List, Optional

from bs4 import BeautifulSoup

from crawler.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)

# href values that never lead to another page
NON_PAGE_PREFIXES = ('#', 'mailto:', 'tel:', 'javascript:', 'data:')


class LinkProcessorService:
    """Pulls the same-site page links out of an HTML document."""

    def extract_page_links(
            self, html_content: str, source_url: str, site_url: Optional[str] = None
    ) -> List[str]:
        """
        Absolute, fragment-free URLs of the crawlable pages linked from
        `source_url`, in document order and without duplicates.

        Relative hrefs resolve against `source_url`; only links on the origin
        of `site_url` (default: `source_url`) are kept.
        """
        site_origin = UrlUtils.get_origin(site_url or source_url)
        if not site_origin:
            logger.warning("Cannot extract links from %s: no origin.", source_url)
            return []

        links = (UrlUtils.normalize_url(source_url, href) for href in self._hrefs(html_content))
        return list(dict.fromkeys(
            link for link in links if UrlUtils.is_crawlable_page(link, site_origin)
        ))

    @staticmethod
    def _hrefs(html_content: str) -> Iterator[str]:
        soup = BeautifulSoup(html_content, "html.parser")
        for anchor in soup.find_all('a', href=True):
            href = anchor['href'].strip()
            if href and not href.lower().startswith(NON_PAGE_PREFIXES):
                yield href
