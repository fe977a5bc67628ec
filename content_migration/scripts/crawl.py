"""Site crawl CLI script."""

import asyncio
import logging
import signal
from typing import Optional

import typer
from tqdm import tqdm

from content_migration.core.config import settings
from content_migration.core.logging import setup_logging
from content_migration.crawler.engine import CrawlCallbacks, SiteCrawler
from content_migration.crawler.fetcher import PageFetcher
from content_migration.crawler.models import CrawlOptions, CrawlProgress
from content_migration.crawler.report import build_migration_report
from content_migration.crawler.storage import get_export_manager

setup_logging()
logger = logging.getLogger(__name__)

app = typer.Typer()


async def run_crawl(options: CrawlOptions, endpoint: Optional[str], output_dir: str, report: bool) -> int:
    """Run one crawl with a progress bar and export the results."""
    results: dict = {}
    pbar = tqdm(total=options.max_pages, desc="Crawling pages", unit="page")

    def on_progress(progress: CrawlProgress) -> None:
        pbar.n = progress.pages_crawled
        pbar.set_postfix(
            queued=progress.pages_remaining,
            images=progress.images_found,
            videos=progress.videos_found,
            docs=progress.documents_found,
            errors=len(progress.errors),
            status=progress.status.value,
        )
        pbar.refresh()

    def on_error(url: str, message: str) -> None:
        tqdm.write(f"Error: {url}: {message}")

    def on_complete(pages, images, videos, documents) -> None:
        results.update(pages=pages, images=images, videos=videos, documents=documents)

    crawler = SiteCrawler(
        options,
        CrawlCallbacks(on_progress=on_progress, on_error=on_error, on_complete=on_complete),
        fetcher=PageFetcher(endpoint=endpoint, auth_token=options.auth_token),
    )

    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, crawler.stop)
    except NotImplementedError:
        logger.debug("Signal handlers not supported; Ctrl-C will abort immediately")

    try:
        await crawler.start()
    finally:
        pbar.close()
        await crawler.fetcher.aclose()

    exporter = get_export_manager(output_dir)
    migration_report = None
    if report:
        migration_report = build_migration_report(
            crawler.seed_url,
            results["pages"],
            results["images"],
            results["videos"],
            results["documents"],
            crawler.progress.errors,
        )
    exporter.export_all(
        crawler.seed_url,
        results["pages"],
        results["images"],
        results["videos"],
        results["documents"],
        report=migration_report,
    )

    logger.info(
        f"Crawl {crawler.progress.status.value}: {crawler.progress.pages_crawled} pages, "
        f"{crawler.progress.images_found} images, {crawler.progress.videos_found} videos, "
        f"{crawler.progress.documents_found} documents, {len(crawler.progress.errors)} errors"
    )
    return 0 if crawler.progress.pages_crawled else 1


@app.command()
def main(
    url: str = typer.Option(..., help="Seed URL to start crawling"),
    max_pages: int = typer.Option(settings.default_max_pages, help="Maximum number of pages to crawl"),
    crawl_delay: int = typer.Option(settings.default_crawl_delay_ms, help="Delay between requests in milliseconds"),
    endpoint: Optional[str] = typer.Option(None, help="Fetch-page proxy URL (defaults to FETCH_PAGE_URL)"),
    token: str = typer.Option(settings.api_key, help="Bearer token for the fetch-page proxy"),
    output_dir: str = typer.Option(settings.output_dir, help="Directory for exported pages, media inventories and report"),
    report: bool = typer.Option(True, help="Write the migration report"),
):
    """Crawl a site through the fetch-page proxy and export its content inventory."""
    logger.info(f"Starting crawl: url={url}, max_pages={max_pages}, crawl_delay={crawl_delay}ms")

    options = CrawlOptions(
        target_url=url,
        max_pages=max_pages,
        crawl_delay=crawl_delay,
        auth_token=token,
    )
    exit_code = asyncio.run(run_crawl(options, endpoint, output_dir, report))
    raise typer.Exit(code=exit_code)


if __name__ == "__main__":
    app()
