# tests/discovery/test_url_resolver.py
import asyncio
import logging
from unittest.mock import AsyncMock

import pytest

from website_carbon.core.services.url_resolver_service import UrlResolver, read_url_file
from website_carbon.errors import ConfigurationError, NoUrlsFound
from website_carbon.model import AssessmentTarget

SITE = "https://example.com"


def _urls(count, prefix="page"):
    return [f"{SITE}/{prefix}-{i}" for i in range(count)]


def _resolver(sitemap=None, crawl=None, force_crawler=False):
    sitemap_fetcher = AsyncMock(return_value=sitemap or [])
    site_crawler = AsyncMock(return_value=crawl or [])
    resolver = UrlResolver(sitemap_fetcher=sitemap_fetcher, site_crawler=site_crawler,
                           force_crawler=force_crawler)
    return resolver, sitemap_fetcher, site_crawler


def test_sitemap_urls_are_truncated_to_budget_in_order():
    resolver, _, crawler = _resolver(sitemap=_urls(150))
    urls = asyncio.run(resolver.resolve(AssessmentTarget(site_url=SITE), 100))

    assert urls == _urls(150)[:100]
    crawler.assert_not_awaited()


def test_empty_sitemap_falls_back_to_crawl():
    resolver, sitemap, crawler = _resolver(sitemap=[], crawl=_urls(12, "crawled"))
    urls = asyncio.run(resolver.resolve(AssessmentTarget(site_url=SITE), 100))

    assert urls == _urls(12, "crawled")
    sitemap.assert_awaited_once_with(SITE)
    crawler.assert_awaited_once_with(SITE, 100)


def test_sitemap_failure_falls_back_to_crawl(caplog):
    resolver, sitemap, _ = _resolver(crawl=_urls(12, "crawled"))
    sitemap.side_effect = RuntimeError("malformed xml")

    with caplog.at_level(logging.WARNING):
        urls = asyncio.run(resolver.resolve(AssessmentTarget(site_url=SITE), 100))

    assert len(urls) == 12
    assert "malformed xml" in caplog.text


def test_forced_crawler_skips_sitemap():
    resolver, sitemap, crawler = _resolver(sitemap=_urls(3), crawl=_urls(2, "crawled"), force_crawler=True)
    urls = asyncio.run(resolver.resolve(AssessmentTarget(site_url=SITE), 10))

    assert urls == _urls(2, "crawled")
    sitemap.assert_not_awaited()


def test_nothing_discovered_raises():
    resolver, _, _ = _resolver()
    with pytest.raises(NoUrlsFound):
        asyncio.run(resolver.resolve(AssessmentTarget(site_url=SITE), 10))


def test_file_takes_precedence_over_site(tmp_path):
    url_file = tmp_path / "urls.txt"
    url_file.write_text("https://other.org/one\nhttps://other.org/two\n")
    resolver, sitemap, crawler = _resolver(sitemap=_urls(5))

    target = AssessmentTarget(site_url=SITE, url_file=url_file)
    urls = asyncio.run(resolver.resolve(target, 100))

    assert urls == ["https://other.org/one", "https://other.org/two"]
    sitemap.assert_not_awaited()
    crawler.assert_not_awaited()
    assert target.hosting_root(urls) == "https://other.org"


def test_file_urls_are_truncated(tmp_path):
    url_file = tmp_path / "urls.txt"
    url_file.write_text("\n".join(_urls(8)))
    resolver, _, _ = _resolver()

    urls = asyncio.run(resolver.resolve(AssessmentTarget(url_file=url_file), 3))
    assert urls == _urls(3)


def test_empty_file_raises_without_discovery(tmp_path):
    url_file = tmp_path / "urls.txt"
    url_file.write_text("# nothing here\n\n")
    resolver, sitemap, crawler = _resolver(sitemap=_urls(5))

    with pytest.raises(NoUrlsFound):
        asyncio.run(resolver.resolve(AssessmentTarget(url_file=url_file), 10))
    sitemap.assert_not_awaited()
    crawler.assert_not_awaited()


def test_invalid_budget():
    resolver, _, _ = _resolver(sitemap=_urls(1))
    with pytest.raises(ConfigurationError):
        asyncio.run(resolver.resolve(AssessmentTarget(site_url=SITE), 0))


def test_read_url_file_skips_comments_blanks_and_invalid_lines(tmp_path, caplog):
    url_file = tmp_path / "urls.txt"
    url_file.write_text(
        "# homepage first\n"
        "https://example.com/\n"
        "\n"
        "   // legacy section\n"
        "  https://example.com/about  \n"
        "example.com/no-scheme\n"
        "ftp://example.com/file\n"
    )

    with caplog.at_level(logging.WARNING):
        urls = read_url_file(url_file)

    assert urls == ["https://example.com/", "https://example.com/about"]
    assert "example.com/no-scheme" in caplog.text
    assert "ftp://example.com/file" in caplog.text


def test_read_missing_file(tmp_path):
    with pytest.raises(ConfigurationError):
        read_url_file(tmp_path / "missing.txt")


def test_target_requires_a_source():
    with pytest.raises(ValueError):
        AssessmentTarget()
