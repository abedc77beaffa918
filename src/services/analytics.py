"""Fire-and-forget analytics hooks.

Only scheme identifiers and counts ever cross this boundary: no session
ids, application ids, answers or eligibility inputs.  A failing sink is
logged and otherwise ignored so analytics can never break a user flow.
"""

from __future__ import annotations

import threading
from collections import Counter
from typing import Protocol, runtime_checkable

import structlog

logger = structlog.get_logger(__name__)


@runtime_checkable
class AnalyticsSink(Protocol):
    def scheme_viewed(self, scheme_id: str) -> None: ...

    def eligibility_checked(self, scheme_id: str, eligible: bool) -> None: ...

    def application_submitted(self, scheme_id: str) -> None: ...


def notify(sink: AnalyticsSink | None, event: str, *args: object) -> None:
    """Deliver *event* to *sink* without letting sink failures propagate."""
    if sink is None:
        return
    try:
        getattr(sink, event)(*args)
    except Exception:
        logger.warning("analytics.hook_failed", hook=event, exc_info=True)


class InMemoryAnalytics:
    """Per-scheme event counters."""

    __slots__ = ("_counts", "_lock")

    def __init__(self) -> None:
        self._counts: Counter[tuple[str, str]] = Counter()
        self._lock = threading.Lock()

    def _bump(self, event: str, scheme_id: str) -> None:
        with self._lock:
            self._counts[(event, scheme_id)] += 1

    def scheme_viewed(self, scheme_id: str) -> None:
        self._bump("scheme_viewed", scheme_id)

    def eligibility_checked(self, scheme_id: str, eligible: bool) -> None:
        self._bump("eligibility_checked", scheme_id)
        self._bump("eligible" if eligible else "ineligible", scheme_id)

    def application_submitted(self, scheme_id: str) -> None:
        self._bump("application_submitted", scheme_id)

    def count(self, event: str, scheme_id: str) -> int:
        with self._lock:
            return self._counts[(event, scheme_id)]

    def snapshot(self) -> dict[str, dict[str, int]]:
        """Counters grouped as ``{scheme_id: {event: count}}``."""
        grouped: dict[str, dict[str, int]] = {}
        with self._lock:
            for (event, scheme_id), value in self._counts.items():
                grouped.setdefault(scheme_id, {})[event] = value
        return grouped
