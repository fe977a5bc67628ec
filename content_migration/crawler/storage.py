"""Export of crawl results to disk."""

import csv
import logging
from pathlib import Path
from typing import Iterable

import orjson
from pydantic import BaseModel

from content_migration.core.utils import compute_content_hash, utcnow
from content_migration.crawler.models import CrawledPage, DocumentAsset, ImageAsset, VideoAsset
from content_migration.crawler.report import (
    MigrationReport,
    build_site_structure,
    build_url_mapping,
    render_report_markdown,
)

logger = logging.getLogger(__name__)


def _dump(record: BaseModel) -> dict:
    return record.model_dump(mode="json", by_alias=True)


class ExportManager:
    """Writes pages, asset inventories, URL mapping and the report under one directory."""

    def __init__(self, base_dir: str = "content-migration"):
        self.base_dir = Path(base_dir)
        self.pages_dir = self.base_dir / "pages"
        self.media_dir = self.base_dir / "media"
        self.videos_dir = self.media_dir / "videos"

        # Create directories
        for dir_path in [self.pages_dir, self.media_dir, self.videos_dir]:
            dir_path.mkdir(parents=True, exist_ok=True)

        # file stem -> URL of the page saved under it
        self._written_pages: dict[str, str] = {}

    def _write_json(self, filepath: Path, data) -> str:
        filepath.write_bytes(orjson.dumps(data, option=orjson.OPT_INDENT_2))
        logger.debug(f"Saved {filepath}")
        return str(filepath)

    def _write_jsonl(self, filepath: Path, records: Iterable[BaseModel]) -> str:
        with open(filepath, "wb") as f:
            for record in records:
                f.write(orjson.dumps(_dump(record)) + b"\n")
        logger.debug(f"Saved {filepath}")
        return str(filepath)

    def save_page(self, page: CrawledPage) -> str:
        """Save one page as ``pages/<slug>.json``.

        A slug already written for another URL gets a short hash of the page
        URL appended, so ``/a/b`` and ``/a-b`` land in separate files.
        """
        stem = page.slug or compute_content_hash(page.url)[:16]
        owner = self._written_pages.setdefault(stem, page.url)
        if owner != page.url:
            stem = f"{stem}-{compute_content_hash(page.url)[:8]}"
            logger.warning(f"Slug {page.slug!r} already saved for {owner}; saving {page.url} as {stem}.json")
            self._written_pages[stem] = page.url
        return self._write_json(self.pages_dir / f"{stem}.json", _dump(page))

    def save_pages(self, pages: list[CrawledPage]) -> list[str]:
        return [self.save_page(page) for page in pages]

    def save_site_structure(self, site_url: str, pages: list[CrawledPage], images, videos, documents) -> str:
        """Save the page inventory with crawl totals and proposed navigation.

        The primary navigation is also written on its own as ``navigation-map.json``.
        """
        site_structure = build_site_structure(pages)
        structure = {
            "crawledAt": utcnow().isoformat(),
            "startUrl": site_url,
            "totalPages": len(pages),
            "totalImages": len(images),
            "totalVideos": len(videos),
            "totalDocuments": len(documents),
            "pages": [
                {"url": p.url, "slug": p.slug, "pageType": p.page_type.value, "title": p.title}
                for p in pages
            ],
            **_dump(site_structure),
        }
        self._write_json(
            self.base_dir / "navigation-map.json", [_dump(item) for item in site_structure.primary_navigation]
        )
        return self._write_json(self.base_dir / "site-structure.json", structure)

    def save_video_inventory(self, videos: list[VideoAsset]) -> str:
        return self._write_json(
            self.videos_dir / "video-inventory.json", {"videos": [_dump(v) for v in videos]}
        )

    def save_images(self, images: list[ImageAsset]) -> str:
        return self._write_jsonl(self.media_dir / "images.jsonl", images)

    def save_documents(self, documents: list[DocumentAsset]) -> str:
        return self._write_jsonl(self.media_dir / "documents.jsonl", documents)

    def save_url_mapping(self, pages: list[CrawledPage]) -> str:
        """Save ``url-mapping.csv`` (old URL, new path, redirect type, page type, title)."""
        filepath = self.base_dir / "url-mapping.csv"
        titles = {page.url: page.title for page in pages}
        with open(filepath, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(["Old URL", "New URL", "Redirect", "Page Type", "Title"])
            for mapping in build_url_mapping(pages):
                writer.writerow(
                    [mapping.old_url, mapping.new_url, mapping.redirect_type, mapping.notes, titles[mapping.old_url]]
                )
        logger.debug(f"Saved {filepath}")
        return str(filepath)

    def save_report(self, report: MigrationReport) -> str:
        """Save the report as Markdown plus its JSON form."""
        self._write_json(self.base_dir / "migration-report.json", _dump(report))
        filepath = self.base_dir / "migration-report.md"
        filepath.write_text(render_report_markdown(report), encoding="utf-8")
        logger.debug(f"Saved {filepath}")
        return str(filepath)

    def export_all(self, site_url, pages, images, videos, documents, report: MigrationReport | None = None) -> None:
        """Write every export file for a finished crawl."""
        self.save_pages(pages)
        self.save_site_structure(site_url, pages, images, videos, documents)
        self.save_video_inventory(videos)
        self.save_images(images)
        self.save_documents(documents)
        self.save_url_mapping(pages)
        if report is not None:
            self.save_report(report)
        logger.info(f"Exported {len(pages)} pages to {self.base_dir}")


def get_export_manager(base_dir: str = "content-migration") -> ExportManager:
    """Get export manager instance."""
    return ExportManager(base_dir=base_dir)
