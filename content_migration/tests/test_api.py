"""Tests for the HTTP API."""

import time

import pytest
from fastapi.testclient import TestClient

from content_migration.api.deps import get_job_manager
from content_migration.api.main import app
from content_migration.core.config import settings
from content_migration.crawler.jobs import CrawlJobManager
from content_migration.crawler.page_proxy import UpstreamError, UpstreamPage

SEED = "https://www.example.com/"
FETCH_PAGE = "/api/content-migration/fetch-page"


@pytest.fixture
def auth_headers() -> dict:
    return {"Authorization": f"Bearer {settings.api_key}"}


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def crawl_client(make_fetcher, site_pages):
    """Client whose crawl jobs read from the in-memory site."""
    manager = CrawlJobManager(fetcher_factory=lambda options: make_fetcher(site_pages))
    app.dependency_overrides[get_job_manager] = lambda: manager
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


def wait_until_finished(client, job_id, headers) -> dict:
    for _ in range(200):
        body = client.get(f"/api/content-migration/crawl/{job_id}", headers=headers).json()
        if body["finished"]:
            return body
        time.sleep(0.01)
    raise AssertionError("crawl job did not finish")


def test_health(client):
    """Test health check endpoint."""
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_fetch_page_requires_bearer(client):
    """Test missing or malformed Authorization headers are rejected."""
    assert client.get(FETCH_PAGE, params={"url": SEED}).status_code == 401

    response = client.get(FETCH_PAGE, params={"url": SEED}, headers={"Authorization": "Token abc"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized"


def test_fetch_page_rejects_wrong_token(client):
    """Test an unknown token is rejected."""
    response = client.get(FETCH_PAGE, params={"url": SEED}, headers={"Authorization": "Bearer nope"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token"


def test_fetch_page_returns_camel_case_payload(client, auth_headers, monkeypatch):
    """Test the proxy answers with html, finalUrl and contentType."""
    requested = []

    async def fake_fetch_upstream(url):
        requested.append(url)
        return UpstreamPage(html="<html>ok</html>", final_url="https://www.example.com/home", content_type="text/html")

    monkeypatch.setattr("content_migration.api.routes_fetch.fetch_upstream", fake_fetch_upstream)

    response = client.get(FETCH_PAGE, params={"url": SEED}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {
        "html": "<html>ok</html>",
        "finalUrl": "https://www.example.com/home",
        "contentType": "text/html",
    }
    assert requested == [SEED]


def test_fetch_page_mirrors_upstream_status(client, auth_headers, monkeypatch):
    """Test upstream failures keep their status and message."""

    async def fake_fetch_upstream(url):
        raise UpstreamError(404, "Failed to fetch page: HTTP 404")

    monkeypatch.setattr("content_migration.api.routes_fetch.fetch_upstream", fake_fetch_upstream)

    response = client.get(FETCH_PAGE, params={"url": SEED}, headers=auth_headers)

    assert response.status_code == 404
    assert response.json()["detail"] == "Failed to fetch page: HTTP 404"


def test_fetch_page_unexpected_error_is_500(client, auth_headers, monkeypatch):
    """Test unexpected failures become a generic 500."""

    async def fake_fetch_upstream(url):
        raise RuntimeError("boom")

    monkeypatch.setattr("content_migration.api.routes_fetch.fetch_upstream", fake_fetch_upstream)

    response = client.get(FETCH_PAGE, params={"url": SEED}, headers=auth_headers)

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to fetch page"


def test_fetch_page_missing_url(client, auth_headers):
    """Test the url parameter is required."""
    response = client.get(FETCH_PAGE, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "URL parameter is required"


def test_fetch_page_rejects_non_http(client, auth_headers):
    """Test only http(s) targets are proxied."""
    response = client.get(FETCH_PAGE, params={"url": "ftp://example.com/file"}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Only HTTP/HTTPS URLs are allowed"


def test_crawl_job_lifecycle(crawl_client, auth_headers):
    """Test starting a crawl job and reading its final status."""
    response = crawl_client.post(
        "/api/content-migration/crawl",
        json={"targetUrl": SEED, "maxPages": 10, "crawlDelay": 0},
        headers=auth_headers,
    )
    assert response.status_code == 200
    job_id = response.json()["jobId"]

    body = wait_until_finished(crawl_client, job_id, auth_headers)

    assert body["status"] == "completed"
    assert body["targetUrl"] == SEED
    assert body["pages"] == 5
    assert body["videos"] == 2
    assert body["progress"]["pagesCrawled"] == 5
    assert body["error"] is None

    listed = crawl_client.get("/api/content-migration/crawl", headers=auth_headers).json()
    assert [job["id"] for job in listed["jobs"]] == [job_id]


def test_crawl_job_validation(crawl_client, auth_headers):
    """Test invalid crawl options are rejected."""
    response = crawl_client.post(
        "/api/content-migration/crawl",
        json={"targetUrl": SEED, "maxPages": 0},
        headers=auth_headers,
    )

    assert response.status_code == 422


def test_crawl_requires_auth(crawl_client):
    """Test crawl endpoints need a bearer token."""
    response = crawl_client.post("/api/content-migration/crawl", json={"targetUrl": SEED})

    assert response.status_code == 401


def test_unknown_job(crawl_client, auth_headers):
    """Test unknown job ids return 404."""
    assert crawl_client.get("/api/content-migration/crawl/missing", headers=auth_headers).status_code == 404
    assert crawl_client.post("/api/content-migration/crawl/missing/stop", headers=auth_headers).status_code == 404


def test_unknown_job_action(crawl_client, auth_headers):
    """Test only pause, resume and stop are accepted."""
    job_id = crawl_client.post(
        "/api/content-migration/crawl",
        json={"targetUrl": SEED, "crawlDelay": 0},
        headers=auth_headers,
    ).json()["jobId"]

    response = crawl_client.post(f"/api/content-migration/crawl/{job_id}/explode", headers=auth_headers)

    assert response.status_code == 400
    wait_until_finished(crawl_client, job_id, auth_headers)


def test_stop_finished_job_keeps_status(crawl_client, auth_headers):
    """Test controlling a finished job is harmless."""
    job_id = crawl_client.post(
        "/api/content-migration/crawl",
        json={"targetUrl": SEED, "crawlDelay": 0},
        headers=auth_headers,
    ).json()["jobId"]
    wait_until_finished(crawl_client, job_id, auth_headers)

    response = crawl_client.post(f"/api/content-migration/crawl/{job_id}/pause", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["status"] == "completed"
