"""Tests for URL normalization and crawl eligibility."""

import pytest

from content_migration.crawler.urls import (
    canonicalize_url,
    is_malformed_href,
    is_same_site,
    is_skipped_href,
    normalize_hostname,
    should_crawl,
)

SEED = "https://www.example.com/"


def test_normalize_hostname():
    """Test that www. is stripped and case folded."""
    assert normalize_hostname("WWW.Example.COM") == "example.com"
    assert normalize_hostname("example.com") == "example.com"
    assert normalize_hostname("shop.example.com") == "shop.example.com"
    assert normalize_hostname(None) == ""


def test_is_same_site_ignores_www():
    """Test hostname comparison ignoring www."""
    assert is_same_site("https://example.com/about", SEED)
    assert is_same_site("http://WWW.EXAMPLE.COM/x", SEED)
    assert not is_same_site("https://shop.example.com/", SEED)
    assert not is_same_site("https://other.org/", SEED)


def test_canonicalize_collapses_www_variants():
    """Test that www and bare host links canonicalize to the same URL."""
    a = canonicalize_url("https://example.com/about", SEED)
    b = canonicalize_url("https://www.example.com/about/", SEED)

    assert a == b == "https://www.example.com/about"


def test_canonicalize_strips_query_and_fragment():
    """Test query junk and fragments are dropped."""
    assert canonicalize_url("https://www.example.com/blog/?utm_source=x#top") == "https://www.example.com/blog"


def test_canonicalize_root_path():
    """Test that an empty path becomes /."""
    assert canonicalize_url("https://www.example.com") == "https://www.example.com/"
    assert canonicalize_url("https://www.example.com/") == "https://www.example.com/"


def test_canonicalize_keeps_port():
    """Test explicit ports survive canonicalization."""
    assert canonicalize_url("http://localhost:8080/docs/") == "http://localhost:8080/docs"


def test_canonicalize_rejects_non_http():
    """Test non-http(s) URLs yield None."""
    assert canonicalize_url("ftp://example.com/file") is None
    assert canonicalize_url("mailto:someone@example.com") is None


@pytest.mark.parametrize("href", ["", "#", "#section", "mailto:a@b.c", "tel:+123", "javascript:void(0)", "data:text/plain,hi"])
def test_skipped_hrefs(href):
    """Test that empty, fragment and non-http hrefs are skipped."""
    assert is_skipped_href(href)


@pytest.mark.parametrize("href", ['/about"', "/about%22", "/it's", "/a%27b", "/redirect?to=https://evil.example"])
def test_malformed_hrefs(href):
    """Test the malformed-markup guards."""
    assert is_malformed_href(href)


def test_well_formed_hrefs():
    """Test ordinary hrefs pass the malformed guard."""
    assert not is_malformed_href("https://www.example.com/about")
    assert not is_malformed_href("/services/consulting")


def test_should_crawl_same_host_pages():
    """Test content pages on the seed host are eligible."""
    assert should_crawl("https://example.com/about", SEED)
    assert should_crawl("https://www.example.com/blog/post-1", SEED)


@pytest.mark.parametrize(
    "url",
    [
        "https://www.example.com/wp-admin/options.php",
        "https://www.example.com/wp-login.php",
        "https://www.example.com/wp-content/uploads/2024/01/photo",
        "https://www.example.com/brochure.pdf",
        "https://www.example.com/files/Report.DOCX",
        "https://www.example.com/download.zip",
        "https://www.example.com/img/logo.png",
        "https://www.example.com/static/site.css",
        "https://www.example.com/static/app.js",
        "https://www.example.com/sitemap.xml",
    ],
)
def test_should_crawl_rejects_non_content(url):
    """Test admin paths, uploads, documents, images and code files are excluded."""
    assert not should_crawl(url, SEED)


def test_should_crawl_rejects_other_hosts():
    """Test off-site URLs are excluded."""
    assert not should_crawl("https://other.org/about", SEED)
