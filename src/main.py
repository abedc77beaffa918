"""SchemeSaathi FastAPI application entry point.

Creates the FastAPI app, installs error handlers, includes routers, and
wires the eligibility and application-flow services onto ``app.state``
during the lifespan.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator

import structlog
from fastapi import FastAPI
from fastapi.responses import ORJSONResponse

from config.settings import settings
from src.api.errors import install_error_handlers
from src.api.router import api_router
from src.data.seed import build_catalog
from src.services.analytics import InMemoryAnalytics
from src.services.applications import ApplicationService
from src.services.schemes import SchemeService
from src.services.sessions import SessionManager
from src.services.status_tracker import StatusTracker
from src.services.store import InMemoryApplicationStore, InMemorySessionStore
from src.services.tracking import TrackingReferenceGenerator

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

_SWEEP_INTERVAL_SECONDS = 300


# ---------------------------------------------------------------------------
# Structured logging configuration
# ---------------------------------------------------------------------------


def _configure_logging() -> None:
    """Set up structlog with JSON or console rendering based on settings."""
    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping()[settings.log_level.upper()],
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Background session sweep
# ---------------------------------------------------------------------------


async def _sweep_sessions_periodically(sessions: SessionManager) -> None:
    while True:
        await asyncio.sleep(_SWEEP_INTERVAL_SECONDS)
        try:
            sessions.sweep_expired()
        except Exception:
            logger.warning("app.session_sweep_failed", exc_info=True)


# ---------------------------------------------------------------------------
# Application lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage startup and shutdown of the SchemeSaathi services.

    On startup:
      1. Load the scheme catalog
      2. Create session and application stores
      3. Create the tracking generator, status tracker and analytics sink
      4. Compose the scheme and application services
      5. Start the periodic session sweep
      6. Store everything on ``app.state``

    On shutdown the sweep task is cancelled.
    """
    _configure_logging()
    logger.info("app.startup", env=settings.env)

    app.state.start_time = time.time()

    # -- 1. Scheme catalog --------------------------------------------------
    catalog = build_catalog(settings.scheme_data_path)
    app.state.catalog = catalog
    logger.info("app.catalog_loaded", schemes=len(catalog))

    # -- 2. Sessions --------------------------------------------------------
    sessions = SessionManager(
        InMemorySessionStore(),
        ttl=timedelta(hours=settings.session_ttl_hours),
        default_language=settings.default_language,
    )
    app.state.sessions = sessions

    # -- 3. Tracking, status and analytics ----------------------------------
    tracking = TrackingReferenceGenerator(
        prefix=settings.tracking_prefix,
        max_attempts=settings.tracking_max_attempts,
    )
    status_tracker = StatusTracker()
    analytics = InMemoryAnalytics()
    app.state.status_tracker = status_tracker
    app.state.analytics = analytics

    # -- 4. Services --------------------------------------------------------
    app.state.scheme_service = SchemeService(catalog, analytics=analytics)
    app.state.applications = ApplicationService(
        catalog,
        sessions,
        store=InMemoryApplicationStore(),
        tracking=tracking,
        status_tracker=status_tracker,
        analytics=analytics,
    )

    # -- 5. Session sweep ---------------------------------------------------
    sweeper = asyncio.create_task(_sweep_sessions_periodically(sessions))

    logger.info("app.startup_complete")

    yield

    # -- Shutdown -----------------------------------------------------------
    logger.info("app.shutdown_start")
    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper
    logger.info("app.shutdown_complete")


# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="SchemeSaathi API",
    description=(
        "SchemeSaathi -- eligibility checks, document checklists and "
        "step-by-step applications for government welfare schemes."
    ),
    version="0.1.0",
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
)

install_error_handlers(app)

# -- Include routers -------------------------------------------------------
app.include_router(api_router)


@app.get("/api", response_class=ORJSONResponse)
async def api_info() -> dict:
    """API information endpoint."""
    return {
        "name": "SchemeSaathi API",
        "version": app.version,
        "docs": "/docs",
        "health": "/api/v1/health",
    }
