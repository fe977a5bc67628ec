"""FastAPI application main module."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from content_migration.api.deps import job_manager, limiter
from content_migration.api.routes_crawl import router as crawl_router
from content_migration.api.routes_fetch import router as fetch_router
from content_migration.core.config import settings
from content_migration.core.logging import setup_logging

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    logger.info("Starting Content Migration API")
    yield
    await job_manager.shutdown()
    logger.info("Shutting down Content Migration API")


# Create FastAPI app
app = FastAPI(
    title="Content Migration API",
    description="Site crawler and same-origin fetch proxy for website content migration",
    version="0.1.0",
    lifespan=lifespan,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(fetch_router, prefix="/api/content-migration", tags=["fetch"])
app.include_router(crawl_router, prefix="/api/content-migration", tags=["crawl"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Content Migration API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }
