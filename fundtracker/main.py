"""
FastAPI application entry point.

Run with: uvicorn fundtracker.main:app --reload
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from fundtracker._version import VERSION
from fundtracker.database import init_db

# Import models to ensure they're registered with SQLAlchemy
from fundtracker.models import ExitDetails, Investment  # noqa: F401
from fundtracker.routers import exits_router, investments_router
from fundtracker import telemetry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    Startup: Configure logging, create database tables if they don't exist,
    initialize telemetry.
    Shutdown: (nothing to clean up for now)
    """
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Startup
    await init_db()
    logger.info("Database initialized")

    if telemetry.setup_telemetry():
        # Attach OTLP handler to root logger for log export
        handler = telemetry.get_log_handler()
        if handler:
            logging.getLogger().addHandler(handler)
        logger.info("Telemetry initialized (OTLP metrics + logs enabled)")
    else:
        logger.info("Telemetry disabled")

    yield

    # Shutdown
    logger.info("Application shutting down")


# Create FastAPI application
app = FastAPI(
    title="VC Fund Tracker API",
    description="Investment and exit records for a venture-capital fund",
    version=VERSION,
    lifespan=lifespan,
)


# Register routers
app.include_router(investments_router, prefix="/api/v1", tags=["investments"])
app.include_router(exits_router, prefix="/api/v1", tags=["exits"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/api/version")
async def get_version():
    """Get API version information."""
    return {
        "version": VERSION,
        "api_version": "v1",
    }
