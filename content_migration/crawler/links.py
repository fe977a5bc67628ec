"""Internal link discovery."""

import logging

from bs4 import BeautifulSoup

from content_migration.core.utils import resolve_url
from content_migration.crawler.urls import (
    canonicalize_url,
    is_malformed_href,
    is_same_site,
    is_skipped_href,
)

logger = logging.getLogger(__name__)


def extract_links(html: str, base_url: str, seed_url: str) -> list[str]:
    """Collect canonical same-site URLs from every ``<a href>`` in the page.

    Relative hrefs are resolved against ``base_url`` (the page's final URL);
    the seed URL decides which host counts as internal. Order of first
    appearance is preserved and duplicates are dropped.
    """
    soup = BeautifulSoup(html, "lxml")
    links: list[str] = []
    seen: set[str] = set()

    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()

        if is_skipped_href(href) or is_malformed_href(href):
            continue

        full_url = resolve_url(href, base_url)
        if not is_same_site(full_url, seed_url):
            continue

        normalized = canonicalize_url(full_url, seed_url)
        if normalized and normalized not in seen:
            seen.add(normalized)
            links.append(normalized)

    logger.debug(f"Found {len(links)} internal links on {base_url}")
    return links
