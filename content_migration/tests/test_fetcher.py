"""Tests for the fetch-page proxy client."""

import httpx
import pytest

from content_migration.crawler.fetcher import FetchError, PageFetcher

ENDPOINT = "http://proxy.test/api/content-migration/fetch-page"


def make_fetcher(handler, token="secret") -> PageFetcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return PageFetcher(endpoint=ENDPOINT, auth_token=token, client=client)


@pytest.mark.asyncio
async def test_fetch_sends_url_and_bearer_token():
    """Test the request shape and the parsed response."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url.params["url"]
        seen["auth"] = request.headers["authorization"]
        return httpx.Response(
            200,
            json={
                "html": "<html></html>",
                "finalUrl": "https://www.example.com/about",
                "contentType": "text/html; charset=utf-8",
            },
        )

    fetcher = make_fetcher(handler)
    page = await fetcher.fetch("https://example.com/about")

    assert seen == {"url": "https://example.com/about", "auth": "Bearer secret"}
    assert page.html == "<html></html>"
    assert page.final_url == "https://www.example.com/about"
    assert page.content_type == "text/html; charset=utf-8"
    assert page.status_code == 200


@pytest.mark.asyncio
async def test_fetch_defaults_final_url_to_requested():
    """Test a response without finalUrl keeps the requested URL."""
    fetcher = make_fetcher(lambda request: httpx.Response(200, json={"html": "<p>x</p>"}))

    page = await fetcher.fetch("https://www.example.com/")

    assert page.final_url == "https://www.example.com/"


@pytest.mark.asyncio
async def test_fetch_non_success_raises():
    """Test non-2xx proxy answers become FetchError('HTTP n')."""
    fetcher = make_fetcher(lambda request: httpx.Response(404, json={"error": "Failed to fetch page: HTTP 404"}))

    with pytest.raises(FetchError, match="HTTP 404"):
        await fetcher.fetch("https://www.example.com/missing")


@pytest.mark.asyncio
async def test_fetch_empty_html_raises():
    """Test an empty html field is treated as a failure."""
    fetcher = make_fetcher(lambda request: httpx.Response(200, json={"html": ""}))

    with pytest.raises(FetchError, match="Empty response"):
        await fetcher.fetch("https://www.example.com/")


@pytest.mark.asyncio
async def test_fetch_invalid_json_raises():
    """Test a non-JSON body is reported as an invalid proxy response."""
    fetcher = make_fetcher(lambda request: httpx.Response(200, text="<html>not json</html>"))

    with pytest.raises(FetchError, match="Invalid proxy response"):
        await fetcher.fetch("https://www.example.com/")


@pytest.mark.asyncio
async def test_aclose_leaves_injected_client_open():
    """Test the fetcher only closes clients it created."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    fetcher = PageFetcher(endpoint=ENDPOINT, client=client)

    await fetcher.aclose()

    assert client.is_closed is False
    await client.aclose()


@pytest.mark.asyncio
async def test_aclose_closes_owned_client():
    """Test a fetcher-created client is closed."""
    fetcher = PageFetcher(endpoint=ENDPOINT)

    await fetcher.aclose()

    assert fetcher.client.is_closed is True
