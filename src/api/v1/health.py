"""Health check endpoints.

Liveness reports process uptime; readiness additionally confirms the
scheme catalog was loaded, since no flow can run without it.
"""

from __future__ import annotations

import time

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """Basic health check response."""

    status: str
    version: str
    uptime_seconds: float


class ReadinessResponse(BaseModel):
    status: str
    checks: dict[str, str]


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Liveness probe; does not inspect loaded data."""
    start_time: float = getattr(request.app.state, "start_time", time.time())
    uptime = time.time() - start_time

    return HealthResponse(
        status="healthy",
        version=request.app.version,
        uptime_seconds=round(uptime, 2),
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(request: Request) -> ReadinessResponse | ORJSONResponse:
    checks: dict[str, str] = {}

    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        checks["catalog"] = "not_initialised"
    elif len(catalog) == 0:
        checks["catalog"] = "empty"
    else:
        checks["catalog"] = f"ok ({len(catalog)} schemes)"

    if checks["catalog"].startswith("ok"):
        return ReadinessResponse(status="ready", checks=checks)

    logger.warning("health.not_ready", checks=checks)
    return ORJSONResponse({"status": "not_ready", "checks": checks}, status_code=503)
