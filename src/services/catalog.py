"""In-memory scheme catalog.

The catalog owns scheme definitions; every other component only reads
them.  Lookups hand out the stored instance, so callers must treat
schemes as read-only.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable

import structlog

from src.errors import SchemeNotFoundError
from src.models.scheme import Scheme, SchemeCategory

logger = structlog.get_logger(__name__)


class SchemeCatalog:
    """Scheme registry keyed by ``scheme_id``, in insertion order."""

    __slots__ = ("_lock", "_schemes")

    def __init__(self, schemes: Iterable[Scheme] = ()) -> None:
        self._schemes: dict[str, Scheme] = {}
        self._lock = threading.Lock()
        for scheme in schemes:
            self.upsert_scheme(scheme)

    def find(self, scheme_id: str) -> Scheme | None:
        with self._lock:
            return self._schemes.get(scheme_id)

    def get_scheme(self, scheme_id: str, *, include_inactive: bool = False) -> Scheme:
        """Return the scheme, raising :class:`SchemeNotFoundError` if unknown.

        Inactive schemes are hidden unless *include_inactive* is set, which
        lets applications started before deactivation run to completion.
        """
        scheme = self.find(scheme_id)
        if scheme is None or (not scheme.active and not include_inactive):
            raise SchemeNotFoundError(scheme_id)
        return scheme

    def list_schemes(
        self,
        category: SchemeCategory | str | None = None,
        *,
        include_inactive: bool = False,
    ) -> list[Scheme]:
        with self._lock:
            schemes = list(self._schemes.values())
        return [
            s
            for s in schemes
            if (include_inactive or s.active) and (category is None or s.category == category)
        ]

    def upsert_scheme(self, scheme: Scheme) -> None:
        with self._lock:
            replaced = scheme.scheme_id in self._schemes
            self._schemes[scheme.scheme_id] = scheme
        logger.debug("catalog.upserted", scheme_id=scheme.scheme_id, replaced=replaced)

    def __len__(self) -> int:
        with self._lock:
            return len(self._schemes)

    def __contains__(self, scheme_id: object) -> bool:
        with self._lock:
            return scheme_id in self._schemes
