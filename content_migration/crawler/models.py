"""Data models for the site crawler."""

from datetime import datetime
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from content_migration.core.utils import utcnow


class RecordModel(BaseModel):
    """Base for records handed to the document store (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FrozenRecordModel(RecordModel):
    """Record that never changes after creation."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class CrawlStatus(str, Enum):
    """Crawl run status."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    FAILED = "failed"


class ErrorType(str, Enum):
    """Crawl error classification."""

    NETWORK = "network"
    TIMEOUT = "timeout"
    PARSE = "parse"
    NOT_FOUND = "404"
    SERVER_ERROR = "500"
    OTHER = "other"


class PageType(str, Enum):
    """Coarse page classification."""

    HOME = "home"
    ABOUT = "about"
    TEAM = "team"
    SERVICES = "services"
    BLOG = "blog"
    CONTACT = "contact"
    CASE_STUDY = "case-study"
    RESOURCES = "resources"
    LEGAL = "legal"
    OTHER = "other"


class CrawlOptions(FrozenRecordModel):
    """Input for one crawl run."""

    target_url: str
    max_pages: int = Field(100, ge=1)
    crawl_delay: int = Field(1500, ge=0, description="Milliseconds between fetches")
    download_images: bool = True
    download_documents: bool = True
    auth_token: str = ""


class CrawlError(RecordModel):
    """One failed URL."""

    url: str
    error_type: ErrorType = ErrorType.NETWORK
    message: str
    timestamp: datetime = Field(default_factory=utcnow)


class CrawlProgress(RecordModel):
    """Running counters for a crawl; mutated in place by the engine only."""

    total_pages_discovered: int = 0
    pages_crawled: int = 0
    pages_remaining: int = 0
    images_found: int = 0
    images_downloaded: int = 0
    videos_found: int = 0
    documents_found: int = 0
    documents_downloaded: int = 0
    errors: list[CrawlError] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=utcnow)
    last_updated_at: datetime = Field(default_factory=utcnow)
    status: CrawlStatus = CrawlStatus.IDLE

    def touch(self) -> None:
        self.last_updated_at = utcnow()

    def snapshot(self) -> "CrawlProgress":
        """Independent copy safe to hand to callers."""
        return self.model_copy(deep=True)


class ImageAsset(FrozenRecordModel):
    """Image referenced by a crawled page."""

    id: str
    source_url: str
    local_path: Optional[str] = None
    alt: Optional[str] = None
    title: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    format: str = "unknown"
    context: Literal["hero", "content", "gallery", "thumbnail", "logo", "team", "background", "icon"] = "content"
    caption: Optional[str] = None
    parent_page_url: str
    file_size: Optional[int] = None
    downloaded: bool = False


class VideoAsset(FrozenRecordModel):
    """YouTube or Vimeo video referenced by a crawled page."""

    id: str
    platform: Literal["youtube", "vimeo", "self-hosted", "other"]
    url: str
    embed_code: Optional[str] = None
    video_id: Optional[str] = None
    thumbnail_url: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[str] = None
    parent_page_url: str
    context: Literal["embedded", "linked", "modal"] = "embedded"


class DocumentAsset(FrozenRecordModel):
    """Downloadable document linked from a crawled page."""

    id: str
    url: str
    local_path: Optional[str] = None
    file_name: str
    file_type: Literal["pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "other"]
    file_size: Optional[int] = None
    link_text: str
    parent_page_url: str
    downloaded: bool = False


class PageMetadata(FrozenRecordModel):
    """Head metadata of a page."""

    url: str
    slug: str
    title: str
    meta_description: Optional[str] = None
    meta_keywords: list[str] = Field(default_factory=list)
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_image: Optional[str] = None
    canonical_url: Optional[str] = None
    published_date: Optional[str] = None
    last_modified: Optional[str] = None
    breadcrumb: list[str] = Field(default_factory=list)


class HeroCta(FrozenRecordModel):
    text: str
    link: str


class HeroSection(FrozenRecordModel):
    heading: Optional[str] = None
    subheading: Optional[str] = None
    image: Optional[str] = None
    cta: Optional[HeroCta] = None


class ContentSection(FrozenRecordModel):
    """One ``<section>`` or ``<article>`` block."""

    type: Literal["text", "image-text", "gallery", "video", "form", "testimonial", "cta", "list", "table"] = "text"
    heading: Optional[str] = None
    content: str
    images: list[str] = Field(default_factory=list)
    videos: list[str] = Field(default_factory=list)
    order: int


class PageContent(FrozenRecordModel):
    hero: Optional[HeroSection] = None
    sections: list[ContentSection] = Field(default_factory=list)


class SeoBlock(FrozenRecordModel):
    keywords: list[str] = Field(default_factory=list)
    og_image: Optional[str] = None
    structured_data: Optional[list[Any]] = None


class NavigationBlock(FrozenRecordModel):
    breadcrumb: list[str] = Field(default_factory=list)
    related_pages: list[str] = Field(default_factory=list)


class MediaBlock(FrozenRecordModel):
    images: list[ImageAsset] = Field(default_factory=list)
    videos: list[VideoAsset] = Field(default_factory=list)
    documents: list[DocumentAsset] = Field(default_factory=list)


class CrawledPage(FrozenRecordModel):
    """Model for a successfully fetched and parsed page."""

    url: str
    slug: str
    title: str
    page_type: PageType
    published_date: Optional[str] = None
    last_modified: Optional[str] = None
    metadata: PageMetadata
    content: PageContent
    seo: SeoBlock
    navigation: NavigationBlock = Field(default_factory=NavigationBlock)
    media: MediaBlock = Field(default_factory=MediaBlock)
    forms: list[dict[str, Any]] = Field(default_factory=list)
    word_count: int
    http_status: int = 200
    crawled_at: datetime = Field(default_factory=utcnow)
