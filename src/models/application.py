"""Application records and their post-submission status view."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, Field, computed_field, model_validator

from src.models.enums import ApplicationState, TrackingStatus
from src.models.values import UserValue


class Application(BaseModel):
    """A user's in-progress or submitted run through a scheme's steps.

    Invariants maintained by ``ApplicationService``:

    * ``current_step_number`` never decreases while in progress.
    * ``responses`` entries are only added or overwritten, never removed.
    * ``tracking_reference`` is set if and only if ``status`` is submitted.
    * A submitted application is never mutated again.
    """

    application_id: str = Field(default_factory=lambda: uuid4().hex)
    scheme_id: str
    session_id: str
    total_steps: int = Field(ge=1)
    current_step_number: int = Field(default=1, ge=1)
    responses: dict[int, UserValue] = Field(default_factory=dict)
    status: ApplicationState = ApplicationState.IN_PROGRESS
    tracking_reference: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    submitted_at: datetime | None = None

    @model_validator(mode="after")
    def _reference_matches_status(self) -> Application:
        submitted = self.status == ApplicationState.SUBMITTED
        if submitted != (self.tracking_reference is not None):
            raise ValueError("tracking_reference must be present exactly when submitted")
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def missing_steps(self) -> list[int]:
        return [n for n in range(1, self.total_steps + 1) if n not in self.responses]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def completed(self) -> bool:
        return not self.missing_steps

    @property
    def is_submitted(self) -> bool:
        return self.status == ApplicationState.SUBMITTED


class ApplicationStatus(BaseModel):
    """Read-only status of a submitted application, keyed by tracking reference."""

    tracking_reference: str
    scheme_id: str
    status: TrackingStatus
    status_message: str
    next_steps: list[str] = Field(default_factory=list)
    submitted_at: datetime
    updated_at: datetime
