"""Storage for applications and sessions.

Stores are injected into the services that use them rather than living
in module globals.  The in-memory implementations here hand out deep
copies on every read and store deep copies on every write, so a reader
always sees a complete record and never one half-way through an update.

Writers serialise through :meth:`lock`, a per-key mutex: two mutations of
the same application (or session) never interleave, while different
keys proceed in parallel.
"""

from __future__ import annotations

import contextlib
import threading
from collections.abc import Iterator
from contextlib import AbstractContextManager
from typing import Protocol, runtime_checkable

from src.models.application import Application
from src.models.session import Session


# ---------------------------------------------------------------------------
# Per-key locking
# ---------------------------------------------------------------------------


class _LockEntry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class KeyedLocks:
    """One :class:`threading.Lock` per key, kept only while someone holds or awaits it."""

    __slots__ = ("_guard", "_locks")

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, _LockEntry] = {}

    @contextlib.contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _LockEntry()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


# ---------------------------------------------------------------------------
# Store protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class ApplicationStore(Protocol):
    """Persistence interface for application records."""

    def get(self, application_id: str) -> Application | None: ...

    def put(self, application: Application) -> None: ...

    def lock(self, key: str) -> AbstractContextManager[None]: ...


@runtime_checkable
class SessionStore(Protocol):
    """Persistence interface for sessions, including an archive for expired ones."""

    def get(self, session_id: str) -> Session | None: ...

    def put(self, session: Session) -> None: ...

    def archive(self, session_id: str) -> bool: ...

    def get_archived(self, session_id: str) -> Session | None: ...

    def session_ids(self) -> list[str]: ...

    def lock(self, key: str) -> AbstractContextManager[None]: ...


# ---------------------------------------------------------------------------
# In-memory implementations
# ---------------------------------------------------------------------------


class InMemoryApplicationStore:
    __slots__ = ("_data", "_guard", "_locks")

    def __init__(self) -> None:
        self._data: dict[str, Application] = {}
        self._guard = threading.Lock()
        self._locks = KeyedLocks()

    def get(self, application_id: str) -> Application | None:
        with self._guard:
            record = self._data.get(application_id)
            return record.model_copy(deep=True) if record is not None else None

    def put(self, application: Application) -> None:
        snapshot = application.model_copy(deep=True)
        with self._guard:
            self._data[snapshot.application_id] = snapshot

    def lock(self, key: str) -> AbstractContextManager[None]:
        return self._locks.hold(key)

    def __len__(self) -> int:
        return len(self._data)


class InMemorySessionStore:
    __slots__ = ("_archived", "_data", "_guard", "_locks")

    def __init__(self) -> None:
        self._data: dict[str, Session] = {}
        self._archived: dict[str, Session] = {}
        self._guard = threading.Lock()
        self._locks = KeyedLocks()

    def get(self, session_id: str) -> Session | None:
        with self._guard:
            record = self._data.get(session_id)
            return record.model_copy(deep=True) if record is not None else None

    def put(self, session: Session) -> None:
        snapshot = session.model_copy(deep=True)
        with self._guard:
            self._data[snapshot.session_id] = snapshot

    def archive(self, session_id: str) -> bool:
        """Move a session to the archive; *False* if it was not live."""
        with self._guard:
            record = self._data.pop(session_id, None)
            if record is None:
                return False
            self._archived[session_id] = record
            return True

    def get_archived(self, session_id: str) -> Session | None:
        with self._guard:
            record = self._archived.get(session_id)
            return record.model_copy(deep=True) if record is not None else None

    def session_ids(self) -> list[str]:
        with self._guard:
            return list(self._data)

    def lock(self, key: str) -> AbstractContextManager[None]:
        return self._locks.hold(key)
