# src/crawler/utils/url_utils.py
import re
import logging
from typing import Optional
from urllib.parse import urlparse, urljoin, urlunparse

logger = logging.getLogger(__name__)

# Assets that are never treated as page candidates while crawling.
EXCLUDED_RESOURCE_PATTERN = re.compile(r"\.(css|js|xml|zip|jpe?g|png|mp4|gif)$", re.IGNORECASE)


class UrlUtils:
    """A collection of static methods for URL parsing and manipulation."""

    @staticmethod
    def normalize_url(base_url: str, url: str) -> str:
        """
        Creates a clean, absolute URL from a base URL and a potentially relative URL.
        """
        absolute_url = urljoin(base_url, url)
        parsed_url = urlparse(absolute_url)

        # Ensure there is a path (e.g., '/' for the homepage)
        if not parsed_url.path:
            parsed_url = parsed_url._replace(path='/')

        # Remove fragments, as they are client-side only
        parsed_url = parsed_url._replace(fragment='')

        return urlunparse(parsed_url)

    @staticmethod
    def is_valid_url(url: str) -> bool:
        """True for absolute http(s) URLs with a host."""
        if not isinstance(url, str):
            return False
        try:
            parsed_url = urlparse(url.strip())
        except ValueError as e:
            logger.debug(f"Invalid URL check: ValueError while parsing '{url}': {e}.")
            return False
        return parsed_url.scheme in ('http', 'https') and bool(parsed_url.netloc)

    @staticmethod
    def get_origin(url: str) -> Optional[str]:
        """
        Extracts the origin (scheme + netloc) from a given URL.
        """
        try:
            parsed_url = urlparse(url)
        except ValueError:
            logger.debug(f"Could not parse invalid URL: {url}")
            return None
        if not parsed_url.scheme or not parsed_url.netloc:
            logger.debug(f"Invalid URL format: {url}")
            return None
        return f"{parsed_url.scheme}://{parsed_url.netloc}"

    @staticmethod
    def get_hostname(url: str) -> Optional[str]:
        try:
            return urlparse(url).hostname
        except ValueError:
            return None

    @staticmethod
    def get_path(url: str) -> str:
        """The path component used when rendering results, '/' for the bare origin."""
        try:
            return urlparse(url).path or '/'
        except ValueError:
            return url

    @staticmethod
    def sitemap_url_for(site_url: str) -> str:
        return urljoin(site_url, "/sitemap.xml")

    @staticmethod
    def is_excluded_resource(url: str) -> bool:
        """
        Checks if a URL points to a stylesheet, script, archive, image, video or
        XML document, none of which count as pages.
        """
        try:
            path = urlparse(url).path
        except ValueError:
            return True
        return bool(EXCLUDED_RESOURCE_PATTERN.search(path))

    @staticmethod
    def is_internal_link(url: str, base_url: str) -> bool:
        """
        Checks if a URL is internal relative to the base_url.
        """
        try:
            return urlparse(url).netloc == urlparse(base_url).netloc
        except ValueError:
            return False

    @staticmethod
    def is_crawlable_page(url: str, base_url: str) -> bool:
        """An internal, valid link that does not point at an excluded asset."""
        return (
            UrlUtils.is_valid_url(url)
            and UrlUtils.is_internal_link(url, base_url)
            and not UrlUtils.is_excluded_resource(url)
        )
