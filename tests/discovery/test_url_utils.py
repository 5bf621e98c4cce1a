# tests/discovery/test_url_utils.py
import pytest

from crawler.services.link_processor_service import LinkProcessorService
from crawler.utils.url_utils import UrlUtils


@pytest.mark.parametrize("url, expected", [
    ("https://example.com", True),
    ("http://example.com/page?q=1", True),
    ("  https://example.com/  ", True),
    ("ftp://example.com/file", False),
    ("example.com", False),
    ("/relative/path", False),
    ("", False),
    (None, False),
])
def test_is_valid_url(url, expected):
    assert UrlUtils.is_valid_url(url) is expected


@pytest.mark.parametrize("url", [
    "https://example.com/style.css",
    "https://example.com/app.JS",
    "https://example.com/feed.xml",
    "https://example.com/photo.jpeg",
    "https://example.com/photo.jpg",
    "https://example.com/logo.PNG",
    "https://example.com/clip.mp4",
    "https://example.com/anim.gif",
    "https://example.com/archive.zip",
])
def test_excluded_resources(url):
    assert UrlUtils.is_excluded_resource(url)


def test_pages_are_not_excluded():
    assert not UrlUtils.is_excluded_resource("https://example.com/about")
    assert not UrlUtils.is_excluded_resource("https://example.com/page.html")
    assert not UrlUtils.is_excluded_resource("https://example.com/css-guide")


def test_normalize_url_drops_fragment_and_adds_root_path():
    assert UrlUtils.normalize_url("https://example.com/a/", "../b#top") == "https://example.com/b"
    assert UrlUtils.normalize_url("https://example.com", "https://example.com") == "https://example.com/"


def test_origin_path_and_sitemap_location():
    assert UrlUtils.get_origin("https://example.com:8080/x/y?z=1") == "https://example.com:8080"
    assert UrlUtils.get_origin("not a url") is None
    assert UrlUtils.get_path("https://example.com") == "/"
    assert UrlUtils.get_path("https://example.com/blog/post") == "/blog/post"
    assert UrlUtils.sitemap_url_for("https://example.com/deep/page") == "https://example.com/sitemap.xml"


def test_extract_page_links_keeps_internal_pages_only():
    html = """
    <html><body>
      <a href="/about">About</a>
      <a href="contact#form">Contact</a>
      <a href="/about">About again</a>
      <a href="#top">Top</a>
      <a href="mailto:info@example.com">Mail</a>
      <a href="/assets/site.css">Styles</a>
      <a href="https://other.org/page">Elsewhere</a>
      <a href="https://example.com/blog/">Blog</a>
    </body></html>
    """
    links = LinkProcessorService().extract_page_links(html, "https://example.com/company/")
    assert links == [
        "https://example.com/about",
        "https://example.com/company/contact",
        "https://example.com/blog/",
    ]


def test_extract_page_links_filters_on_site_origin_after_cross_host_redirect():
    html = '<a href="/about">about</a><a href="https://example.com/contact">contact</a>'
    links = LinkProcessorService().extract_page_links(
        html, "https://www.example.com/landing/", site_url="https://example.com"
    )
    assert links == ["https://example.com/contact"]
