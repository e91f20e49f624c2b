"""
FastAPI application factory.

Creates and configures the FastAPI application instance, and wires the
process-wide engine state (calibration manager, load cache) onto
``app.state`` at startup.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlmodel import Session

from app.api.v1.router import api_router
from app.capacity.cache import LoadScoreCache
from app.core.config import settings
from app.db.init_db import init_db
from app.db.session import engine
from app.services.capacity_service import CapacityService

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db(engine)

    with Session(engine) as session:
        manager = CapacityService.load_manager(session, settings.DEFAULT_PRESET)
    cache = LoadScoreCache(max_size=settings.LOAD_CACHE_MAX_SIZE)

    # Cached scores were computed against the old configuration
    manager.add_listener(lambda _snapshot: cache.invalidate_all())

    app.state.calibration_manager = manager
    app.state.load_cache = cache
    logger.info("Capacity engine ready: %s", manager.configuration.model_dump())
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Activity load and pacing estimation for energy-limiting conditions.",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan)

# Include API router
app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {
        "message": "Capacity Engine API",
        "version": settings.VERSION,
        "status": "healthy"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "service": "capacity-engine",
        "version": settings.VERSION
    }


@app.get("/info")
async def info():
    return {
        "project name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "authors": settings.AUTHORS,
        "project url": settings.PROJECT_URL
    }
