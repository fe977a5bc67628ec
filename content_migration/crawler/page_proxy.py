"""Server side of the fetch-page proxy: fetch a URL on the crawler's behalf."""

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from content_migration.core.config import settings
from content_migration.core.constants import (
    ACCEPTED_CONTENT_TYPES,
    UPSTREAM_ACCEPT_HEADER,
    UPSTREAM_ACCEPT_LANGUAGE,
)

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """Upstream fetch failed; ``status_code`` is what the proxy should answer with."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


@dataclass
class UpstreamPage:
    html: str
    final_url: str
    content_type: str


def validate_target_url(url: Optional[str]) -> str:
    """Ensure the proxy is only ever pointed at an absolute http(s) URL."""
    if not url:
        raise UpstreamError(400, "URL parameter is required")
    try:
        parsed = urlparse(url)
    except ValueError:
        raise UpstreamError(400, "Invalid URL")
    if not parsed.scheme or not parsed.netloc:
        raise UpstreamError(400, "Invalid URL")
    if parsed.scheme.lower() not in ("http", "https"):
        raise UpstreamError(400, "Only HTTP/HTTPS URLs are allowed")
    return url


def create_upstream_client() -> httpx.AsyncClient:
    """HTTP client used to reach target sites."""
    return httpx.AsyncClient(
        timeout=settings.request_timeout,
        follow_redirects=True,
        headers={
            "User-Agent": settings.user_agent,
            "Accept": UPSTREAM_ACCEPT_HEADER,
            "Accept-Language": UPSTREAM_ACCEPT_LANGUAGE,
        },
    )


async def _get_with_retry(client: httpx.AsyncClient, url: str) -> httpx.Response:
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(settings.upstream_max_attempts),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    ):
        with attempt:
            return await client.get(url)
    raise UpstreamError(502, "Failed to fetch page")


async def fetch_upstream(url: Optional[str], client: Optional[httpx.AsyncClient] = None) -> UpstreamPage:
    """Fetch ``url`` and return its HTML, final URL and content type."""
    url = validate_target_url(url)
    owns_client = client is None
    client = client or create_upstream_client()

    try:
        try:
            response = await _get_with_retry(client, url)
        except httpx.HTTPError as e:
            logger.error(f"Upstream fetch failed for {url}: {e}")
            raise UpstreamError(502, f"Failed to fetch page: {e.__class__.__name__}") from e

        if not response.is_success:
            logger.warning(f"Upstream HTTP error for {url}: {response.status_code}")
            raise UpstreamError(response.status_code, f"Failed to fetch page: HTTP {response.status_code}")

        content_type = response.headers.get("content-type", "")
        if not any(accepted in content_type.lower() for accepted in ACCEPTED_CONTENT_TYPES):
            raise UpstreamError(400, "URL does not return HTML content")

        return UpstreamPage(html=response.text, final_url=str(response.url), content_type=content_type)
    finally:
        if owns_client:
            await client.aclose()
