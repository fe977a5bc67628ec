"""Migration report built from a finished crawl."""

from collections import Counter
from datetime import datetime
from typing import Literal
from urllib.parse import urlparse

from pydantic import Field

from content_migration.core.constants import (
    FETCHABLE_MEDIA_SCHEMES,
    HIGH_VALUE_PAGE_LIMIT,
    MIGRATION_PRIORITY_GROUPS,
    NAVIGATION_EXCLUDED_TYPES,
)
from content_migration.core.utils import utcnow
from content_migration.crawler.models import (
    CrawledPage,
    CrawlError,
    DocumentAsset,
    ImageAsset,
    RecordModel,
    VideoAsset,
)


class ReportSummary(RecordModel):
    total_pages: int
    pages_by_type: dict[str, int]
    total_images: int
    total_videos: int
    total_documents: int
    total_word_count: int


class HighValuePage(RecordModel):
    url: str
    title: str
    word_count: int


class ContentAudit(RecordModel):
    missing_metadata: list[str] = Field(default_factory=list)
    duplicate_content: list[str] = Field(default_factory=list)
    high_value_pages: list[HighValuePage] = Field(default_factory=list)


class MediaOptimization(RecordModel):
    images_needing_alt_text: list[str] = Field(default_factory=list)
    videos_by_platform: dict[str, int] = Field(default_factory=dict)
    document_types: list[str] = Field(default_factory=list)
    broken_media_links: list[str] = Field(default_factory=list)


class MigrationPriority(RecordModel):
    priority1: list[str] = Field(default_factory=list)
    priority2: list[str] = Field(default_factory=list)
    priority3: list[str] = Field(default_factory=list)
    archive: list[str] = Field(default_factory=list)


class UrlMapping(RecordModel):
    old_url: str
    new_url: str
    redirect_type: Literal["301", "302", "none"]
    notes: str = ""


class MigrationReport(RecordModel):
    """Site-wide summary of a crawl, used to plan the content migration."""

    site_url: str
    crawl_date: datetime = Field(default_factory=utcnow)
    summary: ReportSummary
    content_audit: ContentAudit
    media_optimization: MediaOptimization
    migration_priority: MigrationPriority = Field(default_factory=MigrationPriority)
    url_mapping: list[UrlMapping] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    errors: list[CrawlError] = Field(default_factory=list)


class NavigationItem(RecordModel):
    label: str
    url: str
    children: list["NavigationItem"] = Field(default_factory=list)
    order: int = 0


class SiteStructure(RecordModel):
    """Navigation proposal for the new site, grouped by page type."""

    primary_navigation: list[NavigationItem] = Field(default_factory=list)
    secondary_navigation: list[NavigationItem] = Field(default_factory=list)
    footer_navigation: list[NavigationItem] = Field(default_factory=list)
    sitemap_urls: list[str] = Field(default_factory=list)


def _new_path(page: CrawledPage) -> str:
    return "/" if page.slug == "home" else f"/{page.slug}"


def build_url_mapping(pages: list[CrawledPage]) -> list[UrlMapping]:
    """Map each crawled URL to its slug-based path on the new site."""
    mappings = []
    for page in pages:
        old_path = urlparse(page.url).path or "/"
        new_path = _new_path(page)
        changed = old_path.rstrip("/") != new_path.rstrip("/")
        mappings.append(
            UrlMapping(
                old_url=page.url,
                new_url=new_path,
                redirect_type="301" if changed else "none",
                notes=page.page_type.value,
            )
        )
    return mappings


def find_high_value_pages(pages: list[CrawledPage], limit: int = HIGH_VALUE_PAGE_LIMIT) -> list[HighValuePage]:
    """Pages with the most words, largest first; ties keep crawl order."""
    ranked = sorted(pages, key=lambda page: page.word_count, reverse=True)
    return [HighValuePage(url=p.url, title=p.title, word_count=p.word_count) for p in ranked[:limit]]


def find_broken_media_links(images: list[ImageAsset], documents: list[DocumentAsset]) -> list[str]:
    """Media URLs that could not be fetched from the new site as written."""
    broken = []
    for url in [img.source_url for img in images] + [doc.url for doc in documents]:
        try:
            parsed = urlparse(url)
        except ValueError:
            broken.append(url)
            continue
        if parsed.scheme not in FETCHABLE_MEDIA_SCHEMES or (parsed.scheme != "data" and not parsed.netloc):
            broken.append(url)
    return list(dict.fromkeys(broken))


def build_migration_priority(pages: list[CrawledPage]) -> MigrationPriority:
    """Group page URLs by how early they should move to the new site."""
    groups: dict[str, list[str]] = {name: [] for name in MIGRATION_PRIORITY_GROUPS}
    archive = []
    for page in pages:
        for name, page_types in MIGRATION_PRIORITY_GROUPS.items():
            if page.page_type.value in page_types:
                groups[name].append(page.url)
                break
        else:
            archive.append(page.url)
    return MigrationPriority(**groups, archive=archive)


def build_recommendations(
    pages: list[CrawledPage],
    audit: ContentAudit,
    media: MediaOptimization,
    url_mapping: list[UrlMapping],
) -> list[str]:
    recommendations = []
    if audit.missing_metadata:
        recommendations.append("Review all pages with missing meta descriptions")
    if media.images_needing_alt_text:
        recommendations.append("Add alt text to images that are missing it")
    if sum(1 for page in pages if page.page_type.value == "services") > 1:
        recommendations.append("Consider consolidating similar service pages")
    if audit.duplicate_content:
        recommendations.append("Give pages that share a title distinct titles")
    if media.broken_media_links:
        recommendations.append("Fix or remove broken media links")
    if pages:
        recommendations.append("Update outdated content before migration")
    if any(mapping.redirect_type != "none" for mapping in url_mapping):
        recommendations.append("Verify all redirects are properly configured")
    return recommendations


def build_site_structure(pages: list[CrawledPage]) -> SiteStructure:
    """Propose a primary navigation with one menu per page type.

    Home and unclassified pages get no menu. Menus follow the order in which
    their page type was first crawled, and each menu lists its pages in crawl
    order. Every crawled URL goes into the sitemap.
    """
    by_type: dict[str, list[CrawledPage]] = {}
    for page in pages:
        by_type.setdefault(page.page_type.value, []).append(page)

    navigation = []
    for page_type, typed_pages in by_type.items():
        if page_type in NAVIGATION_EXCLUDED_TYPES:
            continue
        children = [NavigationItem(label=p.title, url=p.url, order=i) for i, p in enumerate(typed_pages)]
        navigation.append(
            NavigationItem(
                label=page_type.replace("-", " ").title(),
                url=f"/{page_type}",
                children=children,
                order=len(navigation),
            )
        )

    return SiteStructure(primary_navigation=navigation, sitemap_urls=[page.url for page in pages])


def build_migration_report(
    site_url: str,
    pages: list[CrawledPage],
    images: list[ImageAsset],
    videos: list[VideoAsset],
    documents: list[DocumentAsset],
    errors: list[CrawlError] | None = None,
) -> MigrationReport:
    """Summarize a crawl's pages and assets."""
    title_counts = Counter(page.title for page in pages)

    audit = ContentAudit(
        missing_metadata=[page.url for page in pages if not page.metadata.meta_description],
        duplicate_content=[page.url for page in pages if title_counts[page.title] > 1],
        high_value_pages=find_high_value_pages(pages),
    )
    media = MediaOptimization(
        images_needing_alt_text=list(dict.fromkeys(img.source_url for img in images if not img.alt)),
        videos_by_platform=dict(Counter(video.platform for video in videos)),
        document_types=sorted({doc.file_type for doc in documents}),
        broken_media_links=find_broken_media_links(images, documents),
    )
    url_mapping = build_url_mapping(pages)

    return MigrationReport(
        site_url=site_url,
        summary=ReportSummary(
            total_pages=len(pages),
            pages_by_type=dict(Counter(page.page_type.value for page in pages)),
            total_images=len(images),
            total_videos=len(videos),
            total_documents=len(documents),
            total_word_count=sum(page.word_count for page in pages),
        ),
        content_audit=audit,
        media_optimization=media,
        migration_priority=build_migration_priority(pages),
        url_mapping=url_mapping,
        recommendations=build_recommendations(pages, audit, media, url_mapping),
        errors=list(errors or []),
    )


def _bullets(counts: dict[str, int], unit: str) -> str:
    if not counts:
        return "- None"
    return "\n".join(f"- **{key}**: {count} {unit}" for key, count in sorted(counts.items()))


def _url_list(urls: list[str]) -> list[str]:
    return [f"- {url}" for url in urls] or ["None"]


def render_report_markdown(report: MigrationReport) -> str:
    """Render the report as Markdown."""
    summary = report.summary
    audit = report.content_audit
    media = report.media_optimization
    priority = report.migration_priority

    lines = [
        "# Content Migration Report",
        "",
        "## Crawl Summary",
        "",
        f"- **Start URL**: {report.site_url}",
        f"- **Crawled At**: {report.crawl_date.isoformat()}",
        f"- **Pages Crawled**: {summary.total_pages}",
        f"- **Images Found**: {summary.total_images}",
        f"- **Videos Found**: {summary.total_videos}",
        f"- **Documents Found**: {summary.total_documents}",
        f"- **Total Words**: {summary.total_word_count}",
        f"- **Errors**: {len(report.errors)}",
        "",
        "## Page Type Breakdown",
        "",
        _bullets(summary.pages_by_type, "pages"),
        "",
        "## Migration Priority",
        "",
        "### Priority 1 (Critical)",
        *_url_list(priority.priority1),
        "",
        "### Priority 2 (Important)",
        *_url_list(priority.priority2),
        "",
        "### Priority 3 (Supporting)",
        *_url_list(priority.priority3),
        "",
        "### Archive",
        *_url_list(priority.archive),
        "",
        "## Content Audit",
        "",
        f"- Pages missing a meta description: {len(audit.missing_metadata)}",
        f"- Pages sharing a title with another page: {len(audit.duplicate_content)}",
        "",
        "### High-Value Pages (by content volume)",
        *([f"- {p.title} ({p.word_count} words): {p.url}" for p in audit.high_value_pages] or ["None"]),
        "",
        "## Media Assets",
        "",
        "### Videos by Platform",
        _bullets(media.videos_by_platform, "videos"),
        "",
        "### Documents",
        f"- Document types: {', '.join(media.document_types) or 'none'}",
        "",
        "### Images Needing Alt Text",
        f"- {len(media.images_needing_alt_text)} images",
        "",
        "### Broken Media Links",
        *([f"- {url}" for url in media.broken_media_links] or ["No broken media links"]),
        "",
        "## Recommendations",
        "",
        *([f"{i}. {text}" for i, text in enumerate(report.recommendations, start=1)] or ["None"]),
        "",
        "## Errors",
        "",
    ]
    if report.errors:
        lines.extend(f"- {error.url}: {error.message}" for error in report.errors)
    else:
        lines.append("No errors encountered")

    return "\n".join(lines) + "\n"
