"""Breadth-first site crawler driven through the fetch-page proxy."""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Optional

from content_migration.core.config import settings
from content_migration.core.utils import utcnow
from content_migration.crawler.fetcher import PageFetcher
from content_migration.crawler.links import extract_links
from content_migration.crawler.models import (
    CrawledPage,
    CrawlError,
    CrawlOptions,
    CrawlProgress,
    CrawlStatus,
    DocumentAsset,
    ErrorType,
    ImageAsset,
    VideoAsset,
)
from content_migration.crawler.parse_html import (
    extract_documents,
    extract_images,
    extract_videos,
    parse_page,
)
from content_migration.crawler.urls import canonicalize_url, is_same_site, should_crawl

logger = logging.getLogger(__name__)


def _noop(*args) -> None:
    return None


@dataclass
class CrawlCallbacks:
    """Synchronous hooks invoked from inside the crawl loop, in production order."""

    on_progress: Callable[[CrawlProgress], None] = _noop
    on_page_crawled: Callable[[CrawledPage], None] = _noop
    on_image_found: Callable[[ImageAsset], None] = _noop
    on_video_found: Callable[[VideoAsset], None] = _noop
    on_document_found: Callable[[DocumentAsset], None] = _noop
    on_error: Callable[[str, str], None] = _noop
    on_complete: Callable[
        [list[CrawledPage], list[ImageAsset], list[VideoAsset], list[DocumentAsset]], None
    ] = _noop


class SiteCrawler:
    """Crawls one site breadth-first, one fetch at a time.

    The instance owns its frontier, visited set and results; it is good for a
    single ``start()`` call. ``pause()``, ``resume()`` and ``stop()`` are
    cooperative and only take effect before the next URL is dequeued.
    """

    def __init__(
        self,
        options: CrawlOptions,
        callbacks: Optional[CrawlCallbacks] = None,
        fetcher: Optional[PageFetcher] = None,
        poll_interval: Optional[float] = None,
    ):
        self.options = options
        self.callbacks = callbacks or CrawlCallbacks()
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or PageFetcher(auth_token=options.auth_token)
        self.poll_interval = poll_interval if poll_interval is not None else settings.pause_poll_interval
        self.seed_url = canonicalize_url(options.target_url) or options.target_url

        self.visited_urls: set[str] = set()
        self.url_queue: deque[str] = deque()
        self._queued: set[str] = set()

        self.crawled_pages: list[CrawledPage] = []
        self.all_images: list[ImageAsset] = []
        self.all_videos: list[VideoAsset] = []
        self.all_documents: list[DocumentAsset] = []

        self.is_paused = False
        self.is_stopped = False
        self._started = False
        self.progress = CrawlProgress()

    def _emit_progress(self) -> None:
        self.callbacks.on_progress(self.progress.snapshot())

    def _budget_left(self) -> bool:
        return len(self.crawled_pages) < self.options.max_pages

    def _should_continue(self) -> bool:
        return bool(self.url_queue) and self._budget_left() and not self.is_stopped

    def _enqueue(self, url: str) -> bool:
        if url in self.visited_urls or url in self._queued:
            return False
        self.url_queue.append(url)
        self._queued.add(url)
        self.progress.total_pages_discovered += 1
        return True

    def _dequeue(self) -> str:
        url = self.url_queue.popleft()
        self._queued.discard(url)
        return url

    def _log_error(self, url: str, message: str) -> None:
        logger.warning(f"Error crawling {url}: {message}")
        self.progress.errors.append(CrawlError(url=url, error_type=ErrorType.NETWORK, message=message))
        self.progress.touch()
        self.callbacks.on_error(url, message)

    async def start(self) -> None:
        """Run the crawl until the frontier empties, the budget is hit, or stop() is called."""
        if self._started:
            raise RuntimeError("SiteCrawler.start() can only be called once per instance")
        self._started = True

        logger.info(
            f"Starting crawl: seed={self.seed_url}, max_pages={self.options.max_pages}, "
            f"crawl_delay={self.options.crawl_delay}ms"
        )
        self.progress.status = CrawlStatus.RUNNING
        self.progress.started_at = utcnow()
        self.progress.touch()
        self._enqueue(self.seed_url)
        self._emit_progress()

        try:
            while self._should_continue():
                if self.is_paused:
                    await asyncio.sleep(self.poll_interval)
                    continue

                url = self._dequeue()
                if url in self.visited_urls:
                    continue

                await self.crawl_page(url)

                self.progress.pages_remaining = len(self.url_queue)
                self.progress.touch()
                self._emit_progress()

                if self._should_continue():
                    await asyncio.sleep(self.options.crawl_delay / 1000)
        except asyncio.CancelledError:
            self.is_stopped = True
            self._finish()
            raise
        except Exception:
            logger.exception(f"Crawl of {self.seed_url} aborted by a callback error")
            self.is_stopped = True
            self._finish()
            raise
        finally:
            if self._owns_fetcher:
                await self.fetcher.aclose()

        self._finish()

    def _finish(self) -> None:
        self.progress.status = CrawlStatus.FAILED if self.is_stopped else CrawlStatus.COMPLETED
        self.progress.pages_remaining = len(self.url_queue)
        self.progress.touch()
        logger.info(
            f"Crawl {self.progress.status.value}: {len(self.crawled_pages)} pages, "
            f"{len(self.all_images)} images, {len(self.all_videos)} videos, "
            f"{len(self.all_documents)} documents, {len(self.progress.errors)} errors"
        )
        self._emit_progress()
        self.callbacks.on_complete(
            list(self.crawled_pages),
            list(self.all_images),
            list(self.all_videos),
            list(self.all_documents),
        )

    def pause(self) -> None:
        """Defer the next dequeue until resume() is called."""
        if self.progress.status != CrawlStatus.RUNNING:
            logger.warning(f"Ignoring pause(): crawl is {self.progress.status.value}")
            return
        self.is_paused = True
        self.progress.status = CrawlStatus.PAUSED
        self.progress.touch()
        self._emit_progress()

    def resume(self) -> None:
        """Continue a paused crawl from where the frontier left off."""
        if self.progress.status != CrawlStatus.PAUSED:
            logger.warning(f"Ignoring resume(): crawl is {self.progress.status.value}")
            return
        self.is_paused = False
        self.progress.status = CrawlStatus.RUNNING
        self.progress.touch()
        self._emit_progress()

    def stop(self) -> None:
        """Exit the loop once the in-flight page is done; the run ends as failed."""
        self.is_stopped = True

    async def crawl_page(self, url: str) -> None:
        """Fetch, parse and harvest one URL.

        Fetch and extraction failures are recorded as page errors. Exceptions
        raised by callbacks are not page errors and propagate to ``start()``.
        """
        self.visited_urls.add(url)
        try:
            fetched = await self.fetcher.fetch(url)
            page_url = fetched.final_url or url

            final_canonical = canonicalize_url(page_url, self.seed_url)
            if final_canonical and is_same_site(page_url, self.seed_url):
                self.visited_urls.add(final_canonical)

            images = extract_images(fetched.html, page_url)
            videos = extract_videos(fetched.html, page_url)
            documents = extract_documents(fetched.html, page_url)

            page = parse_page(
                page_url,
                fetched.html,
                http_status=fetched.status_code,
                images=images,
                videos=videos,
                documents=documents,
            )
            links = extract_links(fetched.html, page_url, self.seed_url)
        except Exception as e:
            self._log_error(url, str(e) or e.__class__.__name__)
            return

        added = 0
        for link in links:
            if should_crawl(link, self.seed_url) and self._enqueue(link):
                added += 1
        logger.info(f"Crawled {url}: {len(links)} internal links, {added} new, queue size {len(self.url_queue)}")

        self.crawled_pages.append(page)
        self.all_images.extend(images)
        self.all_videos.extend(videos)
        self.all_documents.extend(documents)
        self.progress.pages_crawled = len(self.crawled_pages)
        self.progress.images_found = len(self.all_images)
        self.progress.videos_found = len(self.all_videos)
        self.progress.documents_found = len(self.all_documents)

        self.callbacks.on_page_crawled(page)
        for image in images:
            self.callbacks.on_image_found(image)
        for video in videos:
            self.callbacks.on_video_found(video)
        for document in documents:
            self.callbacks.on_document_found(document)
