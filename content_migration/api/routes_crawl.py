"""Crawl job API routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from content_migration.api.deps import get_job_manager
from content_migration.core.logging import mask_token
from content_migration.core.schemas import CrawlJobCreated, CrawlJobList, CrawlJobRequest, CrawlJobSummary
from content_migration.core.security import verify_bearer_token
from content_migration.crawler.jobs import CrawlJob, CrawlJobManager
from content_migration.crawler.models import CrawlOptions

logger = logging.getLogger(__name__)
router = APIRouter()


def _summarize(job: CrawlJob) -> CrawlJobSummary:
    error = None
    if job.finished and not job.task.cancelled() and job.task.exception() is not None:
        error = str(job.task.exception())
    return CrawlJobSummary(
        id=job.id,
        target_url=job.options.target_url,
        status=job.progress.status,
        created_at=job.created_at,
        finished=job.finished,
        progress=job.progress,
        pages=job.progress.pages_crawled,
        images=job.progress.images_found,
        videos=job.progress.videos_found,
        documents=job.progress.documents_found,
        error=error,
    )


def _get_job_or_404(manager: CrawlJobManager, job_id: str) -> CrawlJob:
    job = manager.get(job_id)
    if job is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    return job


@router.post("/crawl", response_model=CrawlJobCreated)
async def create_crawl_job(
    request: CrawlJobRequest,
    token: str = Depends(verify_bearer_token),
    manager: CrawlJobManager = Depends(get_job_manager),
):
    """Start a new crawl job."""
    try:
        options = CrawlOptions(
            target_url=request.target_url,
            max_pages=request.max_pages,
            crawl_delay=request.crawl_delay,
            download_images=request.download_images,
            download_documents=request.download_documents,
            auth_token=token,
        )
        job = manager.create_job(options)
        logger.info(f"Crawl job {job.id} requested for {request.target_url} (token {mask_token(token)})")
        return CrawlJobCreated(job_id=job.id)

    except Exception as e:
        logger.error(f"Error creating crawl job: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create crawl job",
        )


@router.get("/crawl", response_model=CrawlJobList)
async def list_crawl_jobs(
    token: str = Depends(verify_bearer_token),
    manager: CrawlJobManager = Depends(get_job_manager),
):
    """List the most recent crawl jobs."""
    return CrawlJobList(jobs=[_summarize(job) for job in manager.list_jobs()])


@router.get("/crawl/{job_id}", response_model=CrawlJobSummary)
async def get_crawl_job(
    job_id: str,
    token: str = Depends(verify_bearer_token),
    manager: CrawlJobManager = Depends(get_job_manager),
):
    """Get crawl job status."""
    return _summarize(_get_job_or_404(manager, job_id))


@router.post("/crawl/{job_id}/{action}", response_model=CrawlJobSummary)
async def control_crawl_job(
    job_id: str,
    action: str,
    token: str = Depends(verify_bearer_token),
    manager: CrawlJobManager = Depends(get_job_manager),
):
    """Pause, resume or stop a crawl job."""
    _get_job_or_404(manager, job_id)

    controls = {"pause": manager.pause, "resume": manager.resume, "stop": manager.stop}
    if action not in controls:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown action: {action}")

    job = controls[action](job_id)
    logger.info(f"Crawl job {job_id}: {action} requested")
    return _summarize(job)
