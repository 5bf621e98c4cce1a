# src/crawler/services/robots_txt_service.py
import asyncio
import logging
import urllib.robotparser
from typing import Dict, Optional
from urllib.parse import urljoin

import aiohttp

from crawler.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)


class RobotsTxtService:
    """
    Fetches and caches robots.txt rules per origin so the crawler only
    discovers pages the site allows it to visit.
    """

    def __init__(self, session: aiohttp.ClientSession, user_agent: str, timeout: int = 10):
        self._session = session
        self._user_agent = user_agent
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._parser_cache: Dict[str, Optional[urllib.robotparser.RobotFileParser]] = {}
        self._fetch_locks: Dict[str, asyncio.Lock] = {}

    async def _get_parser(self, origin: str) -> Optional[urllib.robotparser.RobotFileParser]:
        """
        Returns the parsed rules for an origin, fetching them once.
        None means 'no usable robots.txt', which allows everything.
        """
        if origin in self._parser_cache:
            return self._parser_cache[origin]

        lock = self._fetch_locks.setdefault(origin, asyncio.Lock())
        async with lock:
            if origin in self._parser_cache:
                return self._parser_cache[origin]

            robots_url = urljoin(origin, "/robots.txt")
            parser: Optional[urllib.robotparser.RobotFileParser] = None
            try:
                async with self._session.get(robots_url, timeout=self._timeout) as response:
                    if 200 <= response.status < 300:
                        content = await response.text()
                        parser = urllib.robotparser.RobotFileParser(url=robots_url)
                        parser.parse(content.splitlines())
                        logger.debug("Fetched and parsed robots.txt for %s", origin)
                    else:
                        logger.debug(
                            "robots.txt not found for %s (status: %d). Allowing all.",
                            origin, response.status
                        )
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.warning("⚠️  Could not fetch robots.txt for %s: %s. Allowing all.", origin, e)

            self._parser_cache[origin] = parser
            return parser

    async def can_fetch(self, url: str) -> bool:
        """
        Checks if the crawler may fetch a URL.

        Args:
            url: The full URL to check.

        Returns:
            True if fetching is allowed, False otherwise.
        """
        origin = UrlUtils.get_origin(url)
        if not origin:
            return False

        parser = await self._get_parser(origin)
        if parser is None:
            return True
        allowed = parser.can_fetch(self._user_agent, url)
        if not allowed:
            logger.debug("robots.txt disallows %s", url)
        return allowed
