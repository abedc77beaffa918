"""Session endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Request, status
from pydantic import BaseModel

from src.models.session import Session
from src.services.sessions import SessionManager

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


class CreateSessionRequest(BaseModel):
    language: str | None = None


class LanguageRequest(BaseModel):
    language: str


def _sessions(request: Request) -> SessionManager:
    return request.app.state.sessions


@router.post("", response_model=Session, status_code=status.HTTP_201_CREATED)
async def create_session(request: Request, body: CreateSessionRequest | None = None) -> Session:
    language = body.language if body is not None else None
    return _sessions(request).create_session(language)


@router.get("/{session_id}", response_model=Session)
async def get_session(request: Request, session_id: str) -> Session:
    """Return a live session; 410 ``SESSION_EXPIRED`` once its window has closed."""
    return _sessions(request).get_session(session_id)


@router.put("/{session_id}/language", response_model=Session)
async def set_language(request: Request, session_id: str, body: LanguageRequest) -> Session:
    return _sessions(request).set_language(session_id, body.language)
