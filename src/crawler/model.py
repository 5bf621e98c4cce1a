# src/crawler/model.py (Discovery Layer)
import logging
from datetime import datetime, timezone
from typing import Optional, List

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class CrawledPage(BaseModel):
    url: str
    depth: int = 0
    status_code: Optional[int] = None
    content_type: Optional[str] = None
    crawled_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CrawlSettings(BaseModel):
    max_pages: Optional[int] = Field(default=None, ge=1)
    concurrency: int = Field(default=3, ge=1)
    max_depth: int = Field(default=3, ge=0)
    timeout: int = Field(default=20, ge=1)
    respect_robots_txt: bool = Field(default=True)


class SitemapSettings(BaseModel):
    timeout: int = Field(default=15, ge=1, description="Seconds per sitemap request.")
    retries: int = Field(default=2, ge=0)
    concurrency: int = Field(default=5, ge=1, description="Child sitemaps fetched in parallel.")
    max_documents: int = Field(default=50, ge=1, description="Upper bound on sitemap documents per run.")


class SitemapDocument(BaseModel):
    """A parsed sitemap: either a urlset (page locations) or an index of child sitemaps."""
    url: str
    kind: str = "urlset"
    locations: List[str] = Field(default_factory=list)


class FetchResult(BaseModel):
    """Outcome of one discovery request. Negative status means no HTTP response."""
    url: str
    status: int
    final_url: Optional[str] = None
    content_type: str = ""
    content: Optional[str] = None
    error: Optional[str] = None
    elapsed_time: float = 0.0

    @property
    def is_html_page(self) -> bool:
        return self.status == 200 and self.content is not None
