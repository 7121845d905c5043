"""
FastAPI application entry point.

Configures the API with all routes, middleware, and error handling.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .v1.router import router as v1_router
from .deps import get_services, close_services

logger = logging.getLogger(__name__)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)

# Global scheduler instance
scheduler: Optional[AsyncIOScheduler] = None


async def refresh_graph_snapshot():
    """Background job to reload members and relations from the association API."""
    try:
        logger.info("Running scheduled graph refresh...")
        services = get_services()
        # The association API client is synchronous
        await run_in_threadpool(services.graph.refresh)
        logger.info("Scheduled graph refresh completed")

    except Exception as e:
        logger.error(f"Scheduled graph refresh failed: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan manager."""
    global scheduler

    logger.info("Starting Member Graph API...")

    # Initialize services and load a first snapshot
    services = get_services()
    logger.info("Services initialized")
    await refresh_graph_snapshot()

    interval = services.config.graph.refresh_interval_minutes
    if interval > 0:
        scheduler = AsyncIOScheduler()
        scheduler.add_job(
            refresh_graph_snapshot,
            trigger=IntervalTrigger(minutes=interval),
            id="graph_refresh",
            name=f"Refresh graph snapshot every {interval} minutes",
            replace_existing=True
        )
        scheduler.start()
        logger.info(f"Background scheduler started - graph refresh every {interval} minutes")

    yield

    # Cleanup on shutdown
    logger.info("Shutting down...")
    if scheduler:
        scheduler.shutdown(wait=False)
        scheduler = None
        logger.info("Scheduler stopped")
    close_services()


app = FastAPI(
    title="Member Graph API",
    description="Relationship graph of association members with faceted filtering",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


# Health check
@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "member-graph-api"}


# Include API v1 routes
app.include_router(v1_router, prefix="/api/v1")


# Root endpoint
@app.get("/", tags=["System"])
async def root():
    """API root endpoint."""
    return {
        "name": "Member Graph API",
        "version": "1.0.0",
        "docs": "/docs"
    }
