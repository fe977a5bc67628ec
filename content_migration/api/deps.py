"""FastAPI dependencies."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from content_migration.crawler.jobs import CrawlJobManager

# Rate limiter
limiter = Limiter(key_func=get_remote_address)

job_manager = CrawlJobManager()


def get_job_manager() -> CrawlJobManager:
    """Shared crawl job registry."""
    return job_manager
