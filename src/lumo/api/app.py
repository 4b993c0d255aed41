"""
Lumo FastAPI Application.

Local daemon receiving OTLP telemetry and hook notifications from
Claude Code.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from lumo import __version__
from lumo.api.routes import notify, otel
from lumo.api.schemas import HealthResponse
from lumo.config import settings
from lumo.db.connection import check_connection, run_migrations
from lumo.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Configures logging, validates settings and brings the database schema
    up to date before the daemon starts serving requests.
    """
    setup_logging(context="daemon")
    logger.info("Starting Lumo daemon v%s", __version__)

    settings.validate_settings()
    logger.info("Database path: %s", settings.database_file)
    run_migrations()

    logger.info("OTLP endpoints:")
    logger.info("  - Metrics: http://%s/v1/metrics", settings.server_address)
    logger.info("  - Logs:    http://%s/v1/logs", settings.server_address)

    yield

    logger.info("Daemon shut down")


app = FastAPI(
    lifespan=lifespan,
    title="Lumo Daemon",
    description="Local OTLP receiver for Claude Code telemetry",
    version=__version__,
)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "status": "ok",
        "message": "Lumo daemon is running",
        "version": __version__,
    }


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    db_status = "healthy" if check_connection() else "unhealthy"

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        database=db_status,
    )


app.include_router(otel.router)
app.include_router(notify.router)
