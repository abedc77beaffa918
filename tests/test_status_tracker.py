"""Tests for post-submission status tracking."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from src.errors import NotFoundError, ValidationFailedError
from src.models.application import Application
from src.models.enums import ApplicationState, TrackingStatus
from src.models.values import TextValue
from src.services.status_tracker import StatusTracker

_SUBMITTED_AT = datetime(2026, 2, 1, 12, 0, tzinfo=UTC)
_LATER = datetime(2026, 2, 5, 12, 0, tzinfo=UTC)


@pytest.fixture
def tracker() -> StatusTracker:
    return StatusTracker(clock=lambda: _LATER)


@pytest.fixture
def submitted() -> Application:
    return Application(
        scheme_id="senior-pension",
        session_id="sess",
        total_steps=1,
        responses={1: TextValue(value="Asha Devi")},
        status=ApplicationState.SUBMITTED,
        tracking_reference="APP-20260201-0123456789",
        submitted_at=_SUBMITTED_AT,
    )


class TestRegister:
    def test_starts_as_submitted(self, tracker: StatusTracker, submitted: Application) -> None:
        status = tracker.register(submitted)
        assert status.status == TrackingStatus.SUBMITTED
        assert status.submitted_at == _SUBMITTED_AT
        assert status.status_message
        assert status.next_steps

    def test_is_idempotent(self, tracker: StatusTracker, submitted: Application) -> None:
        tracker.register(submitted)
        tracker.update_status(submitted.tracking_reference, TrackingStatus.UNDER_REVIEW)
        again = tracker.register(submitted)
        assert again.status == TrackingStatus.UNDER_REVIEW, "Re-registering must not reset status"

    def test_in_progress_application_rejected(self, tracker: StatusTracker) -> None:
        with pytest.raises(ValueError):
            tracker.register(Application(scheme_id="s", session_id="sess", total_steps=1))


class TestTransitions:
    @pytest.mark.parametrize(
        "path",
        [
            [TrackingStatus.UNDER_REVIEW, TrackingStatus.APPROVED],
            [TrackingStatus.UNDER_REVIEW, TrackingStatus.REJECTED],
            [TrackingStatus.REJECTED],
        ],
    )
    def test_allowed_paths(self, tracker: StatusTracker, submitted: Application, path: list[TrackingStatus]) -> None:
        tracker.register(submitted)
        for status in path:
            result = tracker.update_status(submitted.tracking_reference, status)
            assert result.status == status
            assert result.updated_at == _LATER

    @pytest.mark.parametrize(
        ("path", "illegal"),
        [
            ([], TrackingStatus.APPROVED),
            ([], TrackingStatus.SUBMITTED),
            ([TrackingStatus.UNDER_REVIEW], TrackingStatus.SUBMITTED),
            ([TrackingStatus.REJECTED], TrackingStatus.UNDER_REVIEW),
            ([TrackingStatus.UNDER_REVIEW, TrackingStatus.APPROVED], TrackingStatus.REJECTED),
        ],
    )
    def test_illegal_transitions(
        self,
        tracker: StatusTracker,
        submitted: Application,
        path: list[TrackingStatus],
        illegal: TrackingStatus,
    ) -> None:
        tracker.register(submitted)
        for status in path:
            tracker.update_status(submitted.tracking_reference, status)
        with pytest.raises(ValidationFailedError):
            tracker.update_status(submitted.tracking_reference, illegal)

    def test_note_overrides_message(self, tracker: StatusTracker, submitted: Application) -> None:
        tracker.register(submitted)
        status = tracker.update_status(
            submitted.tracking_reference,
            TrackingStatus.REJECTED,
            note="Age proof could not be verified.",
        )
        assert status.status_message == "Age proof could not be verified."

    def test_unknown_reference(self, tracker: StatusTracker) -> None:
        with pytest.raises(NotFoundError):
            tracker.get_status("APP-00000000-FFFFFFFFFF")
        with pytest.raises(NotFoundError):
            tracker.update_status("APP-00000000-FFFFFFFFFF", TrackingStatus.APPROVED)
