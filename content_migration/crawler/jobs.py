"""In-process registry of crawl jobs started through the API."""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from content_migration.core.constants import MAX_LISTED_JOBS
from content_migration.core.utils import utcnow
from content_migration.crawler.engine import CrawlCallbacks, SiteCrawler
from content_migration.crawler.fetcher import PageFetcher
from content_migration.crawler.models import (
    CrawledPage,
    CrawlOptions,
    CrawlProgress,
    DocumentAsset,
    ImageAsset,
    VideoAsset,
)

logger = logging.getLogger(__name__)


@dataclass
class CrawlJob:
    """A crawl run plus the latest progress snapshot and, once done, its results."""

    id: str
    options: CrawlOptions
    crawler: SiteCrawler
    created_at: datetime = field(default_factory=utcnow)
    progress: CrawlProgress = field(default_factory=CrawlProgress)
    pages: list[CrawledPage] = field(default_factory=list)
    images: list[ImageAsset] = field(default_factory=list)
    videos: list[VideoAsset] = field(default_factory=list)
    documents: list[DocumentAsset] = field(default_factory=list)
    task: Optional[asyncio.Task] = None

    @property
    def finished(self) -> bool:
        return self.task is not None and self.task.done()


class CrawlJobManager:
    """Starts SiteCrawler runs as asyncio tasks and keeps them addressable by id."""

    def __init__(
        self,
        fetcher_factory: Optional[Callable[[CrawlOptions], PageFetcher]] = None,
        max_jobs: int = MAX_LISTED_JOBS,
    ):
        self._jobs: dict[str, CrawlJob] = {}
        self._fetcher_factory = fetcher_factory
        self.max_jobs = max_jobs

    def create_job(self, options: CrawlOptions) -> CrawlJob:
        """Create a job and schedule its crawl on the running event loop."""
        job_id = uuid.uuid4().hex
        fetcher = self._fetcher_factory(options) if self._fetcher_factory else None

        callbacks = CrawlCallbacks(
            on_progress=lambda progress: self._on_progress(job_id, progress),
            on_complete=lambda pages, images, videos, documents: self._on_complete(
                job_id, pages, images, videos, documents
            ),
        )
        job = CrawlJob(id=job_id, options=options, crawler=SiteCrawler(options, callbacks, fetcher=fetcher))
        self._jobs[job_id] = job
        job.task = asyncio.create_task(self._run(job))
        job.task.add_done_callback(lambda _: self._evict_finished())
        self._evict_finished()
        logger.info(f"Created crawl job {job_id} for {options.target_url}")
        return job

    async def _run(self, job: CrawlJob) -> None:
        try:
            await job.crawler.start()
        except Exception:
            logger.exception(f"Crawl job {job.id} crashed")
            raise

    def _evict_finished(self) -> None:
        """Drop the oldest finished jobs once more than ``max_jobs`` are held."""
        excess = len(self._jobs) - self.max_jobs
        if excess <= 0:
            return
        finished = sorted((j for j in self._jobs.values() if j.finished), key=lambda j: j.created_at)
        for job in finished[:excess]:
            del self._jobs[job.id]
            logger.debug(f"Evicted finished crawl job {job.id}")

    def _on_progress(self, job_id: str, progress: CrawlProgress) -> None:
        job = self._jobs.get(job_id)
        if job:
            job.progress = progress

    def _on_complete(self, job_id, pages, images, videos, documents) -> None:
        job = self._jobs.get(job_id)
        if job:
            job.pages, job.images, job.videos, job.documents = pages, images, videos, documents

    def get(self, job_id: str) -> Optional[CrawlJob]:
        return self._jobs.get(job_id)

    def list_jobs(self, limit: int = MAX_LISTED_JOBS) -> list[CrawlJob]:
        """Most recent jobs first."""
        jobs = sorted(self._jobs.values(), key=lambda j: j.created_at, reverse=True)
        return jobs[:limit]

    def pause(self, job_id: str) -> Optional[CrawlJob]:
        job = self.get(job_id)
        if job:
            job.crawler.pause()
        return job

    def resume(self, job_id: str) -> Optional[CrawlJob]:
        job = self.get(job_id)
        if job:
            job.crawler.resume()
        return job

    def stop(self, job_id: str) -> Optional[CrawlJob]:
        job = self.get(job_id)
        if job:
            job.crawler.stop()
        return job

    async def wait(self, job_id: str) -> Optional[CrawlJob]:
        """Block until the job's crawl task finishes."""
        job = self.get(job_id)
        if job and job.task:
            await asyncio.shield(job.task)
        return job

    async def shutdown(self) -> None:
        """Stop every unfinished job and wait for the loops to exit."""
        for job in self._jobs.values():
            if not job.finished:
                job.crawler.stop()
        tasks = [job.task for job in self._jobs.values() if job.task]
        await asyncio.gather(*tasks, return_exceptions=True)
