"""Session binding: conversation state and applications tied to a session lifetime.

A session lives for a fixed window (24 hours by default) from creation.
Expiry is decided by comparing ``now`` with ``expires_at`` at read time,
so a lookup never depends on whether the background sweep has run.  The
sweep only moves expired sessions into the archive, where their data
survives but lookups no longer return them.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import structlog

from config.languages import get_language
from src.errors import NotFoundError, SessionExpiredError, ValidationFailedError
from src.models.enums import ConversationRole
from src.models.session import ConversationTurn, Session
from src.services.store import InMemorySessionStore, SessionStore

logger = structlog.get_logger(__name__)


def _canonical_language(code: str) -> str:
    config = get_language(code)
    if config is None:
        raise ValidationFailedError("language", f"Unsupported language '{code}'")
    return config.code


class SessionManager:
    """Creates, looks up and mutates sessions."""

    __slots__ = ("_clock", "_default_language", "_store", "_ttl")

    def __init__(
        self,
        store: SessionStore | None = None,
        *,
        ttl: timedelta = timedelta(hours=24),
        default_language: str = "en",
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._store = store if store is not None else InMemorySessionStore()
        self._ttl = ttl
        self._default_language = default_language
        self._clock = clock

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create_session(self, language: str | None = None, session_id: str | None = None) -> Session:
        lang = _canonical_language(language or self._default_language)
        now = self._clock()
        fields: dict[str, Any] = {"language": lang, "created_at": now, "expires_at": now + self._ttl}
        if session_id is not None:
            fields["session_id"] = session_id
        session = Session(**fields)

        with self._store.lock(session.session_id):
            if self._store.get(session.session_id) is not None or self._store.get_archived(session.session_id):
                raise ValidationFailedError("session_id", f"Session '{session.session_id}' already exists")
            self._store.put(session)

        logger.info("sessions.created", session_id=session.session_id, language=lang)
        return session

    def get_session(self, session_id: str) -> Session:
        """Return a live session.

        Raises
        ------
        NotFoundError
            If no session with this id was ever created.
        SessionExpiredError
            If the session's window has closed, archived or not.
        """
        session = self._store.get(session_id)
        if session is None:
            if self._store.get_archived(session_id) is not None:
                raise SessionExpiredError(session_id)
            raise NotFoundError("session", session_id)
        if session.is_expired(self._clock()):
            raise SessionExpiredError(session_id)
        return session

    def sweep_expired(self) -> int:
        """Archive every expired session; safe to run repeatedly or concurrently."""
        now = self._clock()
        archived = 0
        for session_id in self._store.session_ids():
            with self._store.lock(session_id):
                session = self._store.get(session_id)
                if session is not None and session.is_expired(now) and self._store.archive(session_id):
                    archived += 1
        if archived:
            logger.info("sessions.swept", archived=archived)
        return archived

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _mutate(self, session_id: str, change: Callable[[Session], None]) -> Session:
        with self._store.lock(session_id):
            session = self.get_session(session_id)
            change(session)
            self._store.put(session)
        return session

    def set_language(self, session_id: str, language: str) -> Session:
        """Switch presentation language; history, context and applications are untouched."""
        lang = _canonical_language(language)

        def change(session: Session) -> None:
            session.language = lang

        session = self._mutate(session_id, change)
        logger.info("sessions.language_changed", session_id=session_id, language=lang)
        return session

    def append_turn(self, session_id: str, role: ConversationRole | str, content: str) -> Session:
        turn = ConversationTurn(role=role, content=content, timestamp=self._clock())
        return self._mutate(session_id, lambda s: s.conversation_history.append(turn))

    def update_context(self, session_id: str, values: dict[str, Any]) -> Session:
        return self._mutate(session_id, lambda s: s.current_context.update(values))

    # ------------------------------------------------------------------
    # Application binding
    # ------------------------------------------------------------------

    def bind_application(self, session_id: str, scheme_id: str, application_id: str) -> Session:
        def change(session: Session) -> None:
            session.applications[scheme_id] = application_id

        return self._mutate(session_id, change)

    def bound_application(self, session_id: str, scheme_id: str) -> str | None:
        return self.get_session(session_id).applications.get(scheme_id)

    def release_application(self, session_id: str, scheme_id: str, application_id: str) -> None:
        """Drop the binding once the application leaves the session's ownership.

        Tolerates a session that expired after the application was loaded.
        """
        with self._store.lock(session_id):
            session = self._store.get(session_id)
            if session is None or session.applications.get(scheme_id) != application_id:
                return
            del session.applications[scheme_id]
            self._store.put(session)
