# tests/discovery/test_crawl_controller.py
import asyncio
from unittest.mock import AsyncMock, MagicMock

from crawler.controllers.async_crawl_controller import AsyncCrawlController
from crawler.managers.worker_pool_manager import WorkerPoolManager
from crawler.model import CrawlSettings, FetchResult

SITE = {
    "https://example.com/": '<a href="/a">A</a><a href="/b">B</a><a href="/style.css">css</a>'
                            '<a href="https://other.org/x">other</a>',
    "https://example.com/a": '<a href="/c">C</a><a href="/">home</a>',
    "https://example.com/b": '<a href="/missing">gone</a>',
    "https://example.com/c": '<a href="/d">D</a>',
    "https://example.com/d": '<p>leaf</p>',
}


def _fake_fetcher(site):
    fetcher = MagicMock()
    fetcher.session = None
    fetcher.initialize = AsyncMock()
    fetcher.close = AsyncMock()
    fetched = []

    async def fetch_page(url):
        fetched.append(url)
        if url not in site:
            return FetchResult(url=url, status=404)
        return FetchResult(url=url, status=200, content=site[url], content_type="text/html")

    fetcher.fetch_page = fetch_page
    fetcher.fetched = fetched
    return fetcher


def _crawl(settings, site=SITE):
    fetcher = _fake_fetcher(site)

    async def run():
        controller = AsyncCrawlController("https://example.com", page_fetcher=fetcher)
        return await controller.run(settings)

    return asyncio.run(run()), fetcher


def test_crawl_finds_internal_html_pages():
    urls, fetcher = _crawl(CrawlSettings(max_pages=20, respect_robots_txt=False))

    assert urls[0] == "https://example.com/"
    assert set(urls) == {
        "https://example.com/",
        "https://example.com/a",
        "https://example.com/b",
        "https://example.com/c",
        "https://example.com/d",
    }
    assert "https://example.com/style.css" not in fetcher.fetched
    assert "https://other.org/x" not in fetcher.fetched
    # the owner of an injected fetcher closes it
    fetcher.close.assert_not_awaited()


def test_crawl_respects_page_budget():
    urls, _ = _crawl(CrawlSettings(max_pages=2, respect_robots_txt=False))
    assert len(urls) == 2
    assert urls[0] == "https://example.com/"


def test_crawl_respects_max_depth():
    urls, fetcher = _crawl(CrawlSettings(max_pages=20, max_depth=1, respect_robots_txt=False))
    assert set(urls) == {"https://example.com/", "https://example.com/a", "https://example.com/b"}
    assert "https://example.com/c" not in fetcher.fetched


def test_crawl_of_unreachable_site_is_empty():
    urls, _ = _crawl(CrawlSettings(max_pages=5, respect_robots_txt=False), site={})
    assert urls == []


def test_worker_pool_survives_failing_items():
    handled = []

    async def handler(item):
        if item == "bad":
            raise ValueError("broken page")
        handled.append(item)

    async def run():
        queue = asyncio.Queue()
        for item in ("a", "bad", "b"):
            queue.put_nowait(item)
        pool = WorkerPoolManager(handler, queue, size=2)
        pool.start()
        await asyncio.wait_for(queue.join(), timeout=5)
        await pool.shutdown()

    asyncio.run(run())
    assert sorted(handled) == ["a", "b"]


def test_crawl_resolves_links_against_redirect_target():
    fetcher = _fake_fetcher({"https://example.com/blog/post-1": "<p>post</p>"})
    fetch_leaf = fetcher.fetch_page

    async def fetch_page(url):
        if url == "https://example.com/":
            fetcher.fetched.append(url)
            return FetchResult(
                url=url, status=200, final_url="https://example.com/blog/",
                content='<a href="post-1">first post</a>', content_type="text/html",
            )
        return await fetch_leaf(url)

    fetcher.fetch_page = fetch_page

    async def run():
        controller = AsyncCrawlController("https://example.com", page_fetcher=fetcher)
        return await controller.run(CrawlSettings(max_pages=5, respect_robots_txt=False))

    urls = asyncio.run(run())
    assert "https://example.com/blog/post-1" in fetcher.fetched
    assert "https://example.com/post-1" not in fetcher.fetched
    assert urls == ["https://example.com/", "https://example.com/blog/post-1"]


def test_crawl_follows_root_redirect_to_www_host():
    fetcher = _fake_fetcher({"https://www.example.com/about": '<a href="https://cdn.example.net/x">cdn</a>'})
    fetch_leaf = fetcher.fetch_page

    async def fetch_page(url):
        if url == "https://example.com/":
            fetcher.fetched.append(url)
            return FetchResult(
                url=url, status=200, final_url="https://www.example.com/",
                content='<a href="/about">about</a>', content_type="text/html",
            )
        return await fetch_leaf(url)

    fetcher.fetch_page = fetch_page

    async def run():
        controller = AsyncCrawlController("https://example.com", page_fetcher=fetcher)
        return await controller.run(CrawlSettings(max_pages=5, respect_robots_txt=False))

    urls = asyncio.run(run())
    assert urls == ["https://example.com/", "https://www.example.com/about"]
    assert "https://cdn.example.net/x" not in fetcher.fetched
