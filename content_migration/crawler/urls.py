"""URL normalization and crawl-eligibility rules."""

import logging
import re
from typing import Optional
from urllib.parse import urlparse

from content_migration.core.constants import (
    MALFORMED_HREF_MARKERS,
    SKIP_PATH_PATTERNS,
    SKIPPED_LINK_SCHEMES,
)

logger = logging.getLogger(__name__)


def normalize_hostname(hostname: Optional[str]) -> str:
    """Lower-case a hostname and drop a leading ``www.``."""
    if not hostname:
        return ""
    return re.sub(r"^www\.", "", hostname, flags=re.IGNORECASE).lower()


def is_same_site(url: str, seed_url: str) -> bool:
    """Check whether two URLs share a host, ignoring ``www.``."""
    try:
        host = urlparse(url).hostname
        seed_host = urlparse(seed_url).hostname
    except ValueError:
        return False
    return bool(host) and normalize_hostname(host) == normalize_hostname(seed_host)


def is_skipped_href(href: str) -> bool:
    """Check for empty, fragment-only, or non-http(s) scheme hrefs."""
    if not href or href.startswith("#"):
        return True
    return href.lower().startswith(SKIPPED_LINK_SCHEMES)


def is_malformed_href(href: str) -> bool:
    """Detect hrefs garbled by broken markup (quotes, nested absolute URLs)."""
    if any(marker in href for marker in MALFORMED_HREF_MARKERS):
        return True
    for scheme in ("http://", "https://"):
        if href.find(scheme) > 0:
            return True
    return False


def canonicalize_url(url: str, seed_url: Optional[str] = None) -> Optional[str]:
    """Reduce a URL to ``scheme://host[:port]/path`` without a trailing slash.

    Query string and fragment are dropped. When ``seed_url`` is given and the
    URL is on the same site, the seed's host spelling is used so that
    ``example.com`` and ``www.example.com`` canonicalize identically.
    Returns None for non-http(s) or unparsable URLs.
    """
    try:
        parsed = urlparse(url)
        port = parsed.port
    except ValueError:
        return None
    if parsed.scheme.lower() not in ("http", "https") or not parsed.hostname:
        return None

    host = parsed.hostname
    if seed_url and is_same_site(url, seed_url):
        host = urlparse(seed_url).hostname
    netloc = f"{host}:{port}" if port else host

    path = re.sub(r"/$", "", parsed.path) or "/"
    return f"{parsed.scheme.lower()}://{netloc}{path}"


def should_crawl(url: str, seed_url: str) -> bool:
    """Decide whether a same-site URL is a content page worth fetching."""
    if not is_same_site(url, seed_url):
        return False

    for pattern in SKIP_PATH_PATTERNS:
        if pattern.search(url):
            logger.debug(f"Skipping non-content URL: {url}")
            return False

    return True
