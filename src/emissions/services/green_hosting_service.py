# src/emissions/services/green_hosting_service.py
import asyncio
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import aiohttp

from crawler.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)

DEFAULT_GREENCHECK_API = "https://api.thegreenwebfoundation.org/api/v3/greencheck/"


class GreenHostingService:
    """
    Asks the Green Web Foundation whether a site's host runs on renewable energy.

    Any failure of the lookup (network error, bad status, unexpected payload)
    is reported as 'not green' so the assessment can continue.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 session: Optional[aiohttp.ClientSession] = None):
        config = config or {}
        self.api_url = config.get("api_url", DEFAULT_GREENCHECK_API)
        self.user_agent_identifier = config.get("user_agent_identifier", "sustainability-auditor-cli")
        self.timeout = aiohttp.ClientTimeout(total=int(config.get("timeout", 10)))
        self._session = session

    async def lookup(self, hostname: str) -> Dict[str, Any]:
        """Raw greencheck payload for a hostname. Raises on transport or HTTP errors."""
        url = f"{self.api_url.rstrip('/')}/{quote(hostname)}"
        params = {"nocache": "true"}
        headers = {"User-Agent": self.user_agent_identifier}

        owns_session = self._session is None
        session = self._session or aiohttp.ClientSession(timeout=self.timeout)
        try:
            async with session.get(url, params=params, headers=headers, timeout=self.timeout) as response:
                response.raise_for_status()
                return await response.json(content_type=None)
        finally:
            if owns_session:
                await session.close()

    async def is_green(self, site_url: str) -> bool:
        """
        True when the host of `site_url` is listed as green hosting.
        """
        hostname = UrlUtils.get_hostname(site_url)
        if not hostname:
            logger.warning("⚠️  Cannot check green hosting for '%s': no hostname.", site_url)
            return False

        try:
            payload = await self.lookup(hostname)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.warning("⚠️  Green hosting lookup failed for %s: %s. Assuming not green.", hostname, e)
            return False

        if not isinstance(payload, dict):
            logger.warning("⚠️  Unexpected green hosting response for %s. Assuming not green.", hostname)
            return False

        logger.debug("Green hosting lookup result for %s: %s", hostname, payload)
        return payload.get("green") is True
