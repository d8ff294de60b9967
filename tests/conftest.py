"""Shared test fixtures for all test modules."""

import time
from collections.abc import Callable, Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from metricshipper.core.models import MetricRecord

T0 = datetime(2021, 1, 1, tzinfo=UTC)


@pytest.fixture
def t0() -> datetime:
    """Fixed record timestamp: 2021-01-01T00:00:00Z."""
    return T0


@pytest.fixture
def make_record() -> Callable[..., MetricRecord]:
    """Factory fixture for MetricRecord objects with a fixed timestamp.

    Usage:
        def test_something(make_record):
            record = make_record("cpu", tags={"host": "a"}, fields={"usage": 1})
    """

    def _make(
        name: str = "cpu",
        tags: dict[str, str] | None = None,
        fields: dict[str, Any] | None = None,
        timestamp: datetime = T0,
    ) -> MetricRecord:
        return MetricRecord(
            name=name,
            tags=tags or {},
            fields=fields if fields is not None else {"value": 1.0},
            timestamp=timestamp,
        )

    return _make


@pytest.fixture
def cpu_record(make_record: Callable[..., MetricRecord]) -> MetricRecord:
    """The record used by the end-to-end export scenario."""
    return make_record(
        "cpu",
        tags={"host": "a", "region": "us", "zone": "1"},
        fields={"usage": 42.0, "idle": "high"},
    )


@pytest.fixture
def wide_record(make_record: Callable[..., MetricRecord]) -> MetricRecord:
    """A record with 25 numeric fields (f00..f24)."""
    return make_record("wide", fields={f"f{i:02d}": float(i) for i in range(25)})


@pytest.fixture
def sqlite_db_path(tmp_path: Path) -> str:
    """Provide a temporary database path for SQLite output tests."""
    return str(tmp_path / "datums.db")


@pytest.fixture
def non_utc_timezone(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run the test with the process local time zone set to America/New_York."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset() is not available on this platform")
    monkeypatch.setenv("TZ", "America/New_York")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()
