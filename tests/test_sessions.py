"""Tests for session lifetime, language switching and application binding."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from src.errors import NotFoundError, SessionExpiredError, ValidationFailedError
from src.models.enums import ConversationRole
from src.services.sessions import SessionManager
from src.services.store import InMemorySessionStore


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 1, 8, 0, tzinfo=UTC))


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def manager(store: InMemorySessionStore, clock: FakeClock) -> SessionManager:
    return SessionManager(store, clock=clock)


class TestLifecycle:
    def test_window_is_24_hours(self, manager: SessionManager, clock: FakeClock) -> None:
        session = manager.create_session("en")
        assert session.created_at == clock.now
        assert session.expires_at - session.created_at == timedelta(hours=24)

    def test_custom_ttl(self, store: InMemorySessionStore, clock: FakeClock) -> None:
        manager = SessionManager(store, ttl=timedelta(hours=2), clock=clock)
        session = manager.create_session()
        assert session.expires_at == clock.now + timedelta(hours=2)

    def test_default_language(self, store: InMemorySessionStore, clock: FakeClock) -> None:
        manager = SessionManager(store, default_language="hi", clock=clock)
        assert manager.create_session().language == "hi"

    def test_regional_tag_is_canonicalised(self, manager: SessionManager) -> None:
        assert manager.create_session("hi-IN").language == "hi"

    def test_unsupported_language_rejected(self, manager: SessionManager) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            manager.create_session("klingon")
        assert exc_info.value.field == "language"

    def test_duplicate_id_rejected(self, manager: SessionManager) -> None:
        manager.create_session(session_id="abc")
        with pytest.raises(ValidationFailedError):
            manager.create_session(session_id="abc")

    def test_unknown_session(self, manager: SessionManager) -> None:
        with pytest.raises(NotFoundError):
            manager.get_session("nope")


class TestExpiry:
    def test_live_until_exactly_expires_at(self, manager: SessionManager, clock: FakeClock) -> None:
        session = manager.create_session()
        clock.advance(hours=24)
        assert manager.get_session(session.session_id).session_id == session.session_id

    def test_expired_after_window(self, manager: SessionManager, clock: FakeClock) -> None:
        session = manager.create_session()
        clock.advance(hours=24, seconds=1)
        with pytest.raises(SessionExpiredError):
            manager.get_session(session.session_id)

    def test_expiry_does_not_depend_on_sweep(self, manager: SessionManager, store: InMemorySessionStore, clock: FakeClock) -> None:
        session = manager.create_session()
        clock.advance(days=2)
        assert store.get(session.session_id) is not None, "Data persists until swept"
        with pytest.raises(SessionExpiredError):
            manager.get_session(session.session_id)

    def test_sweep_archives_and_is_idempotent(
        self,
        manager: SessionManager,
        store: InMemorySessionStore,
        clock: FakeClock,
    ) -> None:
        old = manager.create_session()
        clock.advance(hours=23)
        fresh = manager.create_session()
        clock.advance(hours=2)

        assert manager.sweep_expired() == 1
        assert manager.sweep_expired() == 0
        assert store.get(old.session_id) is None
        assert store.get_archived(old.session_id) is not None
        assert manager.get_session(fresh.session_id).session_id == fresh.session_id
        with pytest.raises(SessionExpiredError):
            manager.get_session(old.session_id)

    def test_mutation_of_expired_session_rejected(self, manager: SessionManager, clock: FakeClock) -> None:
        session = manager.create_session()
        clock.advance(days=1, minutes=1)
        with pytest.raises(SessionExpiredError):
            manager.set_language(session.session_id, "hi")


class TestLanguageSwitch:
    def test_switch_preserves_state(self, manager: SessionManager) -> None:
        session = manager.create_session("en")
        manager.append_turn(session.session_id, ConversationRole.USER, "Am I eligible for a pension?")
        manager.append_turn(session.session_id, ConversationRole.ASSISTANT, "How old are you?")
        manager.update_context(session.session_id, {"scheme_id": "senior-pension"})
        manager.bind_application(session.session_id, "senior-pension", "app-1")
        before = manager.get_session(session.session_id)

        after = manager.set_language(session.session_id, "hi")

        assert after.language == "hi"
        assert after.conversation_history == before.conversation_history
        assert after.current_context == before.current_context
        assert after.applications == before.applications
        assert after.expires_at == before.expires_at

    def test_switch_to_unsupported_language_leaves_session_untouched(self, manager: SessionManager) -> None:
        session = manager.create_session("en")
        with pytest.raises(ValidationFailedError):
            manager.set_language(session.session_id, "zz")
        assert manager.get_session(session.session_id).language == "en"


class TestHistoryAndBinding:
    def test_history_is_ordered(self, manager: SessionManager) -> None:
        session = manager.create_session()
        for n in range(3):
            manager.append_turn(session.session_id, "user", f"message {n}")
        history = manager.get_session(session.session_id).conversation_history
        assert [t.content for t in history] == ["message 0", "message 1", "message 2"]

    def test_returned_sessions_are_snapshots(self, manager: SessionManager) -> None:
        session = manager.create_session()
        snapshot = manager.get_session(session.session_id)
        snapshot.current_context["tampered"] = True
        assert "tampered" not in manager.get_session(session.session_id).current_context

    def test_release_only_matching_binding(self, manager: SessionManager) -> None:
        session = manager.create_session()
        manager.bind_application(session.session_id, "senior-pension", "app-1")
        manager.release_application(session.session_id, "senior-pension", "app-other")
        assert manager.bound_application(session.session_id, "senior-pension") == "app-1"
        manager.release_application(session.session_id, "senior-pension", "app-1")
        assert manager.bound_application(session.session_id, "senior-pension") is None
