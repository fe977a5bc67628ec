"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from content_migration.core.config import settings
from content_migration.crawler.models import CrawlProgress, CrawlStatus


class CamelSchema(BaseModel):
    """Schema exchanged with the browser client in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FetchPageResponse(CamelSchema):
    """Fetch-page proxy response."""

    html: str
    final_url: str
    content_type: str


class CrawlJobRequest(CamelSchema):
    """Crawl job request schema."""

    target_url: str = Field(..., min_length=1, description="Seed URL; also defines the allowed host")
    max_pages: int = Field(settings.default_max_pages, ge=1)
    crawl_delay: int = Field(settings.default_crawl_delay_ms, ge=0, description="Milliseconds between fetches")
    download_images: bool = True
    download_documents: bool = True


class CrawlJobCreated(CamelSchema):
    success: bool = True
    job_id: str
    message: str = "Crawl job created. Use the job ID to check status."


class CrawlJobSummary(CamelSchema):
    """Status of one crawl job."""

    id: str
    target_url: str
    status: CrawlStatus
    created_at: datetime
    finished: bool
    progress: CrawlProgress
    pages: int = 0
    images: int = 0
    videos: int = 0
    documents: int = 0
    error: Optional[str] = None


class CrawlJobList(CamelSchema):
    jobs: list[CrawlJobSummary]
