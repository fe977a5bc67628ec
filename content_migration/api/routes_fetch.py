"""Fetch-page proxy route."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status

from content_migration.api.deps import limiter
from content_migration.core.schemas import FetchPageResponse
from content_migration.core.security import verify_bearer_token
from content_migration.crawler.page_proxy import UpstreamError, fetch_upstream

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/fetch-page", response_model=FetchPageResponse)
@limiter.limit("120/minute")
async def fetch_page(
    request: Request,
    url: Optional[str] = None,
    token: str = Depends(verify_bearer_token),
):
    """Fetch a page's HTML server-side so the crawler avoids cross-origin limits."""
    try:
        page = await fetch_upstream(url)
        logger.info(f"Fetched {url} -> {page.final_url} ({len(page.html)} chars)")
        return FetchPageResponse(html=page.html, final_url=page.final_url, content_type=page.content_type)

    except UpstreamError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching page {url}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch page",
        )
