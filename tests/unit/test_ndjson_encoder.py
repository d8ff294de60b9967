"""Tests for the NDJSON record encoder."""

import json
from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from metricshipper.core.encoding.ndjson import encode_record
from metricshipper.core.models import MetricRecord


class TestEncodeRecord:
    """Tests for encode_record()."""

    @pytest.mark.core
    def test_encodes_all_parts(self, cpu_record: MetricRecord) -> None:
        """Name, sorted tags, fields and timestamp are encoded."""
        obj = json.loads(encode_record(cpu_record))
        assert obj == {
            "name": "cpu",
            "tags": {"host": "a", "region": "us", "zone": "1"},
            "fields": {"idle": "high", "usage": 42.0},
            "timestamp": 1609459200.0,
        }

    @pytest.mark.core
    def test_datetime_fields_become_unix_seconds(
        self, make_record: Callable[..., MetricRecord]
    ) -> None:
        """Datetime fields are written as integer seconds."""
        record = make_record(fields={"boot": datetime(2021, 1, 1, tzinfo=UTC)})
        assert json.loads(encode_record(record))["fields"] == {"boot": 1609459200}

    @pytest.mark.core
    def test_non_json_fields_are_dropped(
        self, make_record: Callable[..., MetricRecord]
    ) -> None:
        """Values JSON cannot carry are left out."""
        record = make_record(fields={"n": 1, "blob": b"x", "items": [1, 2]})
        assert json.loads(encode_record(record))["fields"] == {"n": 1}

