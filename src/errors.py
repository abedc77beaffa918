"""Error kinds raised by the eligibility and application flow engine.

Every error carries a stable ``code`` the API layer renders verbatim,
a human-readable ``message`` and a ``details`` mapping with the
caller-correctable specifics (missing fields, missing steps, ...).
Ineligibility is a normal result and never appears here.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    __slots__ = ()

    SCHEME_NOT_FOUND = "SCHEME_NOT_FOUND"
    INVALID_ELIGIBILITY_INPUTS = "INVALID_ELIGIBILITY_INPUTS"
    APPLICATION_INCOMPLETE = "APPLICATION_INCOMPLETE"
    APPLICATION_ALREADY_SUBMITTED = "APPLICATION_ALREADY_SUBMITTED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class SchemeFlowError(Exception):
    """Base class for all engine errors."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {"error": str(self.code), "detail": self.message, **self.details}


class SchemeNotFoundError(SchemeFlowError):
    code = ErrorCode.SCHEME_NOT_FOUND

    def __init__(self, scheme_id: str) -> None:
        super().__init__(f"Scheme '{scheme_id}' not found", scheme_id=scheme_id)


class InvalidEligibilityInputsError(SchemeFlowError):
    code = ErrorCode.INVALID_ELIGIBILITY_INPUTS

    def __init__(self, scheme_id: str, missing_fields: list[str]) -> None:
        super().__init__(
            f"Missing eligibility inputs: {', '.join(missing_fields)}",
            scheme_id=scheme_id,
            missing_fields=missing_fields,
        )
        self.missing_fields = missing_fields


class ApplicationIncompleteError(SchemeFlowError):
    code = ErrorCode.APPLICATION_INCOMPLETE

    def __init__(self, application_id: str, completed_steps: int, total_steps: int, missing_steps: list[int]) -> None:
        super().__init__(
            f"Application is missing {len(missing_steps)} of {total_steps} steps",
            application_id=application_id,
            completed_steps=completed_steps,
            total_steps=total_steps,
            missing_steps=missing_steps,
        )
        self.missing_steps = missing_steps


class ApplicationAlreadySubmittedError(SchemeFlowError):
    code = ErrorCode.APPLICATION_ALREADY_SUBMITTED

    def __init__(self, application_id: str) -> None:
        super().__init__(
            f"Application '{application_id}' has already been submitted",
            application_id=application_id,
        )


class ValidationFailedError(SchemeFlowError):
    code = ErrorCode.VALIDATION_FAILED

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message, field=field)
        self.field = field


class SessionExpiredError(SchemeFlowError):
    code = ErrorCode.SESSION_EXPIRED

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session '{session_id}' has expired", session_id=session_id)


class NotFoundError(SchemeFlowError):
    code = ErrorCode.NOT_FOUND

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind.capitalize()} '{identifier}' not found", kind=kind, identifier=identifier)


class TrackingReferenceError(SchemeFlowError):
    """Raised only when every regeneration attempt collided."""

    code = ErrorCode.INTERNAL_ERROR

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Could not allocate a unique tracking reference after {attempts} attempts")
