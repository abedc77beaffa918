"""Collision-free tracking references for submitted applications.

References look like ``APP-20261018-3F9A0C71B2``: a configurable prefix,
the UTC issue date and ten hex digits from a fresh UUID4.  Every candidate
is checked against the set of all references ever issued by this
generator, which is kept apart from application storage so a reference
is never handed out twice, even after its application is archived.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from uuid import uuid4

import structlog

from src.errors import TrackingReferenceError

logger = structlog.get_logger(__name__)


def _random_suffix() -> str:
    return uuid4().hex[:10].upper()


class TrackingReferenceGenerator:
    """Issues unique tracking references, retrying on collision."""

    __slots__ = ("_clock", "_issued", "_lock", "_max_attempts", "_prefix", "_suffix_factory")

    def __init__(
        self,
        *,
        prefix: str = "APP",
        max_attempts: int = 5,
        issued: Iterable[str] = (),
        suffix_factory: Callable[[], str] = _random_suffix,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._prefix = prefix
        self._max_attempts = max_attempts
        self._issued: set[str] = set(issued)
        self._suffix_factory = suffix_factory
        self._clock = clock
        self._lock = threading.Lock()

    def generate(self) -> str:
        """Return a reference never issued before.

        Raises
        ------
        TrackingReferenceError
            If every one of ``max_attempts`` candidates collided.
        """
        with self._lock:
            for attempt in range(1, self._max_attempts + 1):
                candidate = f"{self._prefix}-{self._clock():%Y%m%d}-{self._suffix_factory()}"
                if candidate not in self._issued:
                    self._issued.add(candidate)
                    return candidate
                logger.warning("tracking.collision", attempt=attempt)

        logger.error("tracking.exhausted", attempts=self._max_attempts)
        raise TrackingReferenceError(self._max_attempts)

    def is_issued(self, reference: str) -> bool:
        with self._lock:
            return reference in self._issued

    @property
    def issued_count(self) -> int:
        return len(self._issued)
