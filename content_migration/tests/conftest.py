"""Shared fixtures for crawler tests."""

import pytest

from content_migration.crawler.fetcher import FetchedPage, FetchError


class FakeFetcher:
    """In-memory stand-in for the fetch-page proxy."""

    def __init__(self, pages: dict[str, str], failures: dict[str, str] | None = None, redirects: dict[str, str] | None = None):
        self.pages = pages
        self.failures = failures or {}
        self.redirects = redirects or {}
        self.requested: list[str] = []
        self.closed = False

    async def fetch(self, url: str) -> FetchedPage:
        self.requested.append(url)
        if url in self.failures:
            raise FetchError(self.failures[url])
        final_url = self.redirects.get(url, url)
        if final_url not in self.pages:
            raise FetchError("HTTP 404")
        return FetchedPage(url=url, html=self.pages[final_url], final_url=final_url)

    async def aclose(self) -> None:
        self.closed = True


def _page(title: str, body: str) -> str:
    return f"<html><head><title>{title}</title></head><body>{body}</body></html>"


@pytest.fixture
def site_pages() -> dict[str, str]:
    """A small site rooted at https://www.example.com/."""
    return {
        "https://www.example.com/": _page(
            "Home",
            """
            <a href="https://example.com/about">About</a>
            <a href="https://www.example.com/about/">About again</a>
            <a href="/services">Services</a>
            <a href="/brochure.pdf">Brochure</a>
            <a href="mailto:info@example.com">Mail</a>
            <a href="https://other.org/">Elsewhere</a>
            <img src="/logo.png" alt="Logo">
            <iframe src="https://www.youtube.com/embed/dQw4w9WgXcQ"></iframe>
            """,
        ),
        "https://www.example.com/about": _page(
            "About Us",
            '<a href="/team">Team</a><a href="/">Home</a><img src="/about.jpg">',
        ),
        "https://www.example.com/services": _page(
            "Services",
            '<a href="/contact">Contact</a><a href="/files/price-list.xlsx">Prices</a>',
        ),
        "https://www.example.com/team": _page("Our Team", '<a href="/about">About</a>'),
        "https://www.example.com/contact": _page(
            "Contact",
            '<iframe src="https://player.vimeo.com/video/76979871"></iframe>',
        ),
    }


@pytest.fixture
def fake_fetcher(site_pages) -> FakeFetcher:
    return FakeFetcher(site_pages)


@pytest.fixture
def make_fetcher():
    """Factory for fetchers with custom pages, failures or redirects."""
    return FakeFetcher
