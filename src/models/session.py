from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from src.models.enums import ConversationRole


class ConversationTurn(BaseModel):
    role: ConversationRole
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class Session(BaseModel):
    """Time-bounded container for a user's conversation and applications.

    ``applications`` maps scheme id to the id of the application the
    session holds for it, so a session owns at most one per scheme.
    ``language`` is presentation only and may change freely.
    """

    session_id: str = Field(default_factory=lambda: uuid4().hex)
    language: str = "en"
    conversation_history: list[ConversationTurn] = Field(default_factory=list)
    current_context: dict[str, Any] = Field(default_factory=dict)
    applications: dict[str, str] = Field(default_factory=dict)
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at
