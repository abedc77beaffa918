"""Tests for tracking reference generation."""

from __future__ import annotations

import re
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime

import pytest

from src.errors import ErrorCode, TrackingReferenceError
from src.services.tracking import TrackingReferenceGenerator

_FIXED_NOW = datetime(2026, 3, 14, 9, 30, tzinfo=UTC)


def _fixed_clock() -> datetime:
    return _FIXED_NOW


class TestFormat:
    def test_prefix_date_and_hex_suffix(self) -> None:
        reference = TrackingReferenceGenerator(prefix="SPN", clock=_fixed_clock).generate()
        assert re.fullmatch(r"SPN-20260314-[0-9A-F]{10}", reference), reference

    def test_default_prefix(self) -> None:
        assert TrackingReferenceGenerator().generate().startswith("APP-")


class TestUniqueness:
    def test_many_references_are_distinct(self) -> None:
        generator = TrackingReferenceGenerator()
        references = [generator.generate() for _ in range(500)]
        assert len(set(references)) == 500
        assert generator.issued_count == 500

    def test_concurrent_generation_is_distinct(self) -> None:
        generator = TrackingReferenceGenerator()
        with ThreadPoolExecutor(max_workers=8) as pool:
            references = list(pool.map(lambda _: generator.generate(), range(200)))
        assert len(set(references)) == 200

    def test_collision_is_retried(self) -> None:
        suffixes = iter(["AAAAAAAAAA", "AAAAAAAAAA", "BBBBBBBBBB"])
        generator = TrackingReferenceGenerator(clock=_fixed_clock, suffix_factory=lambda: next(suffixes))
        first = generator.generate()
        second = generator.generate()
        assert first == "APP-20260314-AAAAAAAAAA"
        assert second == "APP-20260314-BBBBBBBBBB"

    def test_previously_issued_references_are_never_reused(self) -> None:
        generator = TrackingReferenceGenerator(
            clock=_fixed_clock,
            issued=["APP-20260314-AAAAAAAAAA"],
            suffix_factory=iter(["AAAAAAAAAA", "CCCCCCCCCC"]).__next__,
        )
        assert generator.generate() == "APP-20260314-CCCCCCCCCC"
        assert generator.is_issued("APP-20260314-AAAAAAAAAA")

    def test_exhaustion_raises_internal_error(self) -> None:
        generator = TrackingReferenceGenerator(
            clock=_fixed_clock,
            max_attempts=3,
            issued=["APP-20260314-AAAAAAAAAA"],
            suffix_factory=lambda: "AAAAAAAAAA",
        )
        with pytest.raises(TrackingReferenceError) as exc_info:
            generator.generate()
        assert exc_info.value.code == ErrorCode.INTERNAL_ERROR
        assert generator.issued_count == 1
