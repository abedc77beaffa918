"""Main API router combining all v1 route modules.

Aggregates all routers under the ``/api/v1`` prefix so the
FastAPI application only needs to include a single router.

Includes:
    * Health: liveness and readiness probes
    * Schemes: catalog, eligibility checks, document checklists
    * Sessions: creation, lookup, language switching
    * Applications: step-by-step flow, submission, status tracking
"""

from __future__ import annotations

from fastapi import APIRouter

from src.api.v1 import applications, health, schemes, sessions

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health.router)
api_router.include_router(schemes.router)
api_router.include_router(sessions.router)
api_router.include_router(applications.router)
