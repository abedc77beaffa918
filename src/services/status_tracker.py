"""Post-submission status tracking.

Once submitted, an application leaves the state machine and is followed
here by tracking reference.  Status moves only forward::

    Submitted -> Under Review -> Approved | Rejected
    Submitted -> Rejected

Transitions are driven from outside the engine (a department back office
or its integration), through :meth:`StatusTracker.update_status`.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Final

import structlog

from src.errors import NotFoundError, ValidationFailedError
from src.models.application import Application, ApplicationStatus
from src.models.enums import TrackingStatus

logger = structlog.get_logger(__name__)


_ALLOWED_TRANSITIONS: Final[dict[TrackingStatus, frozenset[TrackingStatus]]] = {
    TrackingStatus.SUBMITTED: frozenset({TrackingStatus.UNDER_REVIEW, TrackingStatus.REJECTED}),
    TrackingStatus.UNDER_REVIEW: frozenset({TrackingStatus.APPROVED, TrackingStatus.REJECTED}),
    TrackingStatus.APPROVED: frozenset(),
    TrackingStatus.REJECTED: frozenset(),
}

_STATUS_GUIDANCE: Final[dict[TrackingStatus, tuple[str, list[str]]]] = {
    TrackingStatus.SUBMITTED: (
        "Your application has been received and is waiting to be reviewed.",
        [
            "Keep your tracking reference safe.",
            "Keep the original documents from your checklist ready for verification.",
        ],
    ),
    TrackingStatus.UNDER_REVIEW: (
        "Your application is being reviewed by the department.",
        [
            "An officer may contact you to verify your documents.",
            "Check the status again in a few days.",
        ],
    ),
    TrackingStatus.APPROVED: (
        "Your application has been approved.",
        [
            "Benefits will be credited to the bank account you provided.",
            "Contact the scheme helpline if nothing arrives within 30 days.",
        ],
    ),
    TrackingStatus.REJECTED: (
        "Your application was not approved.",
        [
            "Read the reason given and check whether it can be corrected.",
            "You may apply again or contact the scheme helpline for help.",
        ],
    ),
}


class StatusTracker:
    """Read-mostly status registry keyed by tracking reference."""

    __slots__ = ("_clock", "_lock", "_records")

    def __init__(self, *, clock: Callable[[], datetime] = lambda: datetime.now(UTC)) -> None:
        self._records: dict[str, ApplicationStatus] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def register(self, application: Application) -> ApplicationStatus:
        """Start tracking a freshly submitted application (idempotent)."""
        if application.tracking_reference is None or application.submitted_at is None:
            raise ValueError("only submitted applications can be tracked")

        reference = application.tracking_reference
        message, next_steps = _STATUS_GUIDANCE[TrackingStatus.SUBMITTED]
        with self._lock:
            existing = self._records.get(reference)
            if existing is not None:
                return existing.model_copy(deep=True)
            record = ApplicationStatus(
                tracking_reference=reference,
                scheme_id=application.scheme_id,
                status=TrackingStatus.SUBMITTED,
                status_message=message,
                next_steps=list(next_steps),
                submitted_at=application.submitted_at,
                updated_at=application.submitted_at,
            )
            self._records[reference] = record
            return record.model_copy(deep=True)

    def get_status(self, reference: str) -> ApplicationStatus:
        with self._lock:
            record = self._records.get(reference)
            if record is None:
                raise NotFoundError("tracking reference", reference)
            return record.model_copy(deep=True)

    def update_status(self, reference: str, status: TrackingStatus, note: str | None = None) -> ApplicationStatus:
        """Apply an externally decided status change.

        Raises
        ------
        NotFoundError
            For an unknown tracking reference.
        ValidationFailedError
            If the move is not allowed from the current status.
        """
        with self._lock:
            record = self._records.get(reference)
            if record is None:
                raise NotFoundError("tracking reference", reference)
            if status not in _ALLOWED_TRANSITIONS[record.status]:
                raise ValidationFailedError(
                    "status",
                    f"Cannot move application from '{record.status}' to '{status}'",
                )
            message, next_steps = _STATUS_GUIDANCE[status]
            updated = record.model_copy(
                update={
                    "status": status,
                    "status_message": note or message,
                    "next_steps": list(next_steps),
                    "updated_at": self._clock(),
                }
            )
            self._records[reference] = updated

        logger.info("status.updated", tracking_reference=reference, status=str(status))
        return updated.model_copy(deep=True)
