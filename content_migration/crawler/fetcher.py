"""Client for the same-origin fetch-page proxy."""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from content_migration.core.config import settings

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """The proxy could not deliver HTML for a URL."""


@dataclass
class FetchedPage:
    """HTML returned by the proxy for one URL."""

    url: str
    html: str
    final_url: str
    content_type: str = ""
    status_code: int = 200


class PageFetcher:
    """Fetches pages through ``GET <endpoint>?url=...`` with a bearer token."""

    def __init__(
        self,
        endpoint: Optional[str] = None,
        auth_token: str = "",
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.endpoint = endpoint or settings.fetch_page_url
        self.auth_token = auth_token
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.request_timeout,
        )

    async def fetch(self, url: str) -> FetchedPage:
        """Fetch one page; raises FetchError on non-2xx or empty HTML."""
        headers = {"Authorization": f"Bearer {self.auth_token}"}
        response = await self.client.get(self.endpoint, params={"url": url}, headers=headers)

        if not response.is_success:
            raise FetchError(f"HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise FetchError(f"Invalid proxy response: {e}") from e

        html = payload.get("html") if isinstance(payload, dict) else None
        if not html:
            raise FetchError("Empty response")

        return FetchedPage(
            url=url,
            html=html,
            final_url=payload.get("finalUrl") or url,
            content_type=payload.get("contentType") or "",
            status_code=response.status_code,
        )

    async def aclose(self) -> None:
        """Close HTTP client if this fetcher created it."""
        if self._owns_client:
            await self.client.aclose()
