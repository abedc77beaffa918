"""Application state machine.

An application moves through its scheme's steps strictly in order::

    start_application -> in_progress (step 1)
    save_progress     -> in_progress (pointer advances on the current step)
    submit_application -> submitted (terminal, immutable)

Every mutation of one application runs under that application's lock and
works on a private copy that replaces the stored record in one ``put``,
so concurrent readers only ever see whole snapshots.  Editing requires
the owning session to be live; once submitted, the record is handed to
the :class:`~src.services.status_tracker.StatusTracker`.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import UTC, date, datetime
from typing import Any, assert_never

import structlog
from pydantic import BaseModel

from src.errors import (
    ApplicationAlreadySubmittedError,
    ApplicationIncompleteError,
    NotFoundError,
    ValidationFailedError,
)
from src.models.application import Application, ApplicationStatus
from src.models.enums import ApplicationState, FieldType
from src.models.scheme import ApplicationStep, Scheme
from src.models.values import DateValue, NumberValue, SelectValue, TextValue, to_user_value
from src.services.analytics import AnalyticsSink, notify
from src.services.catalog import SchemeCatalog
from src.services.sessions import SessionManager
from src.services.status_tracker import StatusTracker
from src.services.store import ApplicationStore, InMemoryApplicationStore
from src.services.tracking import TrackingReferenceGenerator

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Result models
# ---------------------------------------------------------------------------


class StartedApplication(BaseModel):
    """``first_step`` is the step to answer next; step 1 for a new application."""

    application_id: str
    first_step: ApplicationStep
    current_step_number: int
    total_steps: int
    resumed: bool = False


class ProgressResult(BaseModel):
    application_id: str
    current_step_number: int
    next_step: ApplicationStep | None = None
    completed: bool


class SubmissionResult(BaseModel):
    application_id: str
    tracking_reference: str
    submitted_at: datetime


# ---------------------------------------------------------------------------
# Answer validation
# ---------------------------------------------------------------------------


def _coerce_answer(step: ApplicationStep, raw: Any, today: date) -> NumberValue | TextValue | DateValue | SelectValue:
    """Convert *raw* into the tagged kind *step* expects and apply its rules."""
    field = f"step_{step.step_number}"

    def fail(message: str) -> ValidationFailedError:
        return ValidationFailedError(field, message)

    if raw is None:
        raise fail("An answer is required")
    try:
        tagged = to_user_value(raw)
    except (TypeError, ValueError) as exc:
        raise fail(f"Unsupported answer type {type(raw).__name__}") from exc

    match step.field_type:
        case FieldType.NUMBER:
            if not isinstance(tagged, NumberValue):
                raise fail("Expected a number")
            answer: NumberValue | TextValue | DateValue | SelectValue = tagged
        case FieldType.DATE:
            if not isinstance(tagged, DateValue):
                raise fail("Expected a date in YYYY-MM-DD format")
            if tagged.value > today:
                raise fail("Date cannot be in the future")
            answer = tagged
        case FieldType.SELECT:
            if not isinstance(tagged, TextValue | SelectValue):
                raise fail("Expected one of the listed options")
            if tagged.value not in (step.options or []):
                raise fail(f"'{tagged.value}' is not one of: {', '.join(step.options or [])}")
            answer = SelectValue(value=tagged.value)
        case FieldType.TEXT:
            # ISO-looking strings are tagged as dates; a text step keeps them verbatim.
            if isinstance(tagged, DateValue) and isinstance(raw, str):
                tagged = TextValue(value=raw)
            if not isinstance(tagged, TextValue | SelectValue):
                raise fail("Expected text")
            if not tagged.value.strip():
                raise fail("An answer is required")
            answer = TextValue(value=tagged.value.strip())
        case _:
            assert_never(step.field_type)

    rule = step.validation_rule
    if rule is None:
        return answer

    if isinstance(answer, NumberValue):
        if rule.min_value is not None and answer.value < rule.min_value:
            raise fail(f"Must be at least {rule.min_value:g}")
        if rule.max_value is not None and answer.value > rule.max_value:
            raise fail(f"Must be at most {rule.max_value:g}")
    elif isinstance(answer, TextValue):
        text = answer.value
        if rule.min_length is not None and len(text) < rule.min_length:
            raise fail(f"Must be at least {rule.min_length} characters")
        if rule.max_length is not None and len(text) > rule.max_length:
            raise fail(f"Must be at most {rule.max_length} characters")
        if rule.pattern is not None and re.fullmatch(rule.pattern, text) is None:
            raise fail("Answer is not in the expected format")
    return answer


# ---------------------------------------------------------------------------
# Application service
# ---------------------------------------------------------------------------


class ApplicationService:
    """Starts, advances and submits applications."""

    __slots__ = ("_analytics", "_catalog", "_clock", "_sessions", "_status", "_store", "_tracking")

    def __init__(
        self,
        catalog: SchemeCatalog,
        sessions: SessionManager,
        *,
        store: ApplicationStore | None = None,
        tracking: TrackingReferenceGenerator | None = None,
        status_tracker: StatusTracker | None = None,
        analytics: AnalyticsSink | None = None,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._catalog = catalog
        self._sessions = sessions
        self._store = store if store is not None else InMemoryApplicationStore()
        self._tracking = tracking or TrackingReferenceGenerator()
        self._status = status_tracker or StatusTracker(clock=clock)
        self._analytics = analytics
        self._clock = clock

    @property
    def status_tracker(self) -> StatusTracker:
        return self._status

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _load(self, application_id: str) -> Application:
        application = self._store.get(application_id)
        if application is None:
            raise NotFoundError("application", application_id)
        return application

    def _scheme_for(self, application: Application) -> Scheme:
        # Applications started before a scheme was deactivated may still finish.
        return self._catalog.get_scheme(application.scheme_id, include_inactive=True)

    @staticmethod
    def _next_step(scheme: Scheme, application: Application) -> ApplicationStep | None:
        missing = application.missing_steps
        return scheme.step(missing[0]) if missing else None

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def start_application(self, scheme_id: str, session_id: str) -> StartedApplication:
        """Create an application, or resume the session's open one for this scheme.

        Raises
        ------
        SchemeNotFoundError
            For an unknown or inactive scheme.
        NotFoundError, SessionExpiredError
            If the session is unknown or no longer live.
        """
        scheme = self._catalog.get_scheme(scheme_id)
        self._sessions.get_session(session_id)

        with self._store.lock(f"session:{session_id}:{scheme_id}"):
            existing_id = self._sessions.bound_application(session_id, scheme_id)
            existing = self._store.get(existing_id) if existing_id is not None else None
            if existing is not None and not existing.is_submitted:
                step = scheme.step(existing.current_step_number) or scheme.steps[0]
                logger.info(
                    "applications.resumed",
                    application_id=existing.application_id,
                    scheme_id=scheme_id,
                    step=step.step_number,
                )
                return StartedApplication(
                    application_id=existing.application_id,
                    first_step=step,
                    current_step_number=existing.current_step_number,
                    total_steps=existing.total_steps,
                    resumed=True,
                )

            now = self._clock()
            application = Application(
                scheme_id=scheme_id,
                session_id=session_id,
                total_steps=scheme.total_steps,
                created_at=now,
                updated_at=now,
            )
            self._store.put(application)
            self._sessions.bind_application(session_id, scheme_id, application.application_id)

        logger.info(
            "applications.started",
            application_id=application.application_id,
            scheme_id=scheme_id,
            total_steps=scheme.total_steps,
        )
        return StartedApplication(
            application_id=application.application_id,
            first_step=scheme.steps[0],
            current_step_number=1,
            total_steps=scheme.total_steps,
        )

    def save_progress(self, application_id: str, step_number: int, value: Any) -> ProgressResult:
        """Record the answer to one step.

        Saving the current step advances the pointer (except on the last
        step); re-saving an earlier step overwrites its answer and leaves the
        pointer where it is.  On any error the record is left untouched.

        Raises
        ------
        NotFoundError
            For an unknown application.
        ApplicationAlreadySubmittedError
            If the application was already submitted.
        SessionExpiredError
            If the owning session is no longer live.
        ValidationFailedError
            For a step that does not exist or lies ahead of the current
            step (``field="step_number"``), or an invalid answer
            (``field="step_<n>"``).
        """
        with self._store.lock(application_id):
            application = self._load(application_id)
            if application.is_submitted:
                raise ApplicationAlreadySubmittedError(application_id)
            self._sessions.get_session(application.session_id)

            scheme = self._scheme_for(application)
            step = scheme.step(step_number)
            if step is None or step_number > application.total_steps:
                raise ValidationFailedError(
                    "step_number",
                    f"Step {step_number} does not exist; this application has {application.total_steps} steps",
                )
            if step_number > application.current_step_number:
                raise ValidationFailedError(
                    "step_number",
                    f"Step {step_number} cannot be answered before step {application.current_step_number}",
                )

            application.responses[step_number] = _coerce_answer(step, value, self._clock().date())
            if step_number == application.current_step_number and step_number < application.total_steps:
                application.current_step_number += 1
            application.updated_at = self._clock()
            self._store.put(application)

        logger.info(
            "applications.step_saved",
            application_id=application_id,
            step=step_number,
            current_step=application.current_step_number,
            completed=application.completed,
        )
        return ProgressResult(
            application_id=application_id,
            current_step_number=application.current_step_number,
            next_step=self._next_step(scheme, application),
            completed=application.completed,
        )

    def get_application(self, application_id: str) -> Application:
        return self._load(application_id)

    def get_next_step(self, application_id: str) -> ApplicationStep | None:
        """First unanswered step, or *None* when every step has an answer."""
        application = self._load(application_id)
        return self._next_step(self._scheme_for(application), application)

    def submit_application(self, application_id: str) -> SubmissionResult:
        """Freeze a completed application and issue its tracking reference.

        Raises
        ------
        NotFoundError
            For an unknown application.
        ApplicationAlreadySubmittedError
            If the application was already submitted.
        SessionExpiredError
            If the owning session is no longer live.
        ApplicationIncompleteError
            If any step is still unanswered.
        TrackingReferenceError
            If no unique reference could be allocated.
        """
        with self._store.lock(application_id):
            application = self._load(application_id)
            if application.is_submitted:
                raise ApplicationAlreadySubmittedError(application_id)
            self._sessions.get_session(application.session_id)

            missing = application.missing_steps
            if missing:
                raise ApplicationIncompleteError(
                    application_id,
                    completed_steps=application.total_steps - len(missing),
                    total_steps=application.total_steps,
                    missing_steps=missing,
                )

            reference = self._tracking.generate()
            now = self._clock()
            submitted = application.model_copy(
                update={
                    "status": ApplicationState.SUBMITTED,
                    "tracking_reference": reference,
                    "submitted_at": now,
                    "updated_at": now,
                }
            )
            self._store.put(submitted)
            self._status.register(submitted)

        self._sessions.release_application(submitted.session_id, submitted.scheme_id, application_id)
        notify(self._analytics, "application_submitted", submitted.scheme_id)
        logger.info(
            "applications.submitted",
            application_id=application_id,
            scheme_id=submitted.scheme_id,
            tracking_reference=reference,
        )
        return SubmissionResult(application_id=application_id, tracking_reference=reference, submitted_at=now)

    def get_application_status(self, tracking_reference: str) -> ApplicationStatus:
        return self._status.get_status(tracking_reference)
