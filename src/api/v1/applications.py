"""Application endpoints: start, answer steps, submit and track."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Request, status
from pydantic import BaseModel, Field

from src.models.application import Application, ApplicationStatus
from src.models.scheme import ApplicationStep
from src.services.applications import (
    ApplicationService,
    ProgressResult,
    StartedApplication,
    SubmissionResult,
)

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

router = APIRouter(prefix="/applications", tags=["applications"])


# ---------------------------------------------------------------------------
# Request / response schemas
# ---------------------------------------------------------------------------


class StartApplicationRequest(BaseModel):
    scheme_id: str = Field(min_length=1)
    session_id: str = Field(min_length=1)


class SaveStepRequest(BaseModel):
    """``value`` is a plain JSON answer or a tagged ``{"kind", "value"}`` object."""

    value: Any = None


class ApplicationView(BaseModel):
    application: Application
    next_step: ApplicationStep | None


def _applications(request: Request) -> ApplicationService:
    return request.app.state.applications


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("", response_model=StartedApplication, status_code=status.HTTP_201_CREATED)
async def start_application(request: Request, body: StartApplicationRequest) -> StartedApplication:
    return _applications(request).start_application(body.scheme_id, body.session_id)


@router.get("/status/{tracking_reference}", response_model=ApplicationStatus)
async def get_application_status(request: Request, tracking_reference: str) -> ApplicationStatus:
    return _applications(request).get_application_status(tracking_reference)


@router.get("/{application_id}", response_model=ApplicationView)
async def get_application(request: Request, application_id: str) -> ApplicationView:
    service = _applications(request)
    application = service.get_application(application_id)
    return ApplicationView(application=application, next_step=service.get_next_step(application_id))


@router.put("/{application_id}/steps/{step_number}", response_model=ProgressResult)
async def save_progress(
    request: Request,
    application_id: str,
    step_number: int,
    body: SaveStepRequest,
) -> ProgressResult:
    return _applications(request).save_progress(application_id, step_number, body.value)


@router.post("/{application_id}/submit", response_model=SubmissionResult)
async def submit_application(request: Request, application_id: str) -> SubmissionResult:
    """Submit a completed application; 409 ``APPLICATION_INCOMPLETE`` lists the missing steps."""
    return _applications(request).submit_application(application_id)
