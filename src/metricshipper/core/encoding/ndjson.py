"""NDJSON encoder for metric records."""

import json
import numbers
from datetime import datetime
from typing import Any

from metricshipper.core.encoding.line_protocol import timestamp_ns
from metricshipper.core.models import MetricRecord


def _json_fields(record: MetricRecord) -> dict[str, Any]:
    """Keep JSON-native field values; datetimes become Unix seconds."""
    fields: dict[str, Any] = {}
    for name in sorted(record.fields):
        value = record.fields[name]
        if isinstance(value, (bool, str)) or value is None:
            fields[name] = value
        elif isinstance(value, numbers.Integral):
            fields[name] = int(value)
        elif isinstance(value, numbers.Real):
            fields[name] = float(value)
        elif isinstance(value, datetime):
            fields[name] = timestamp_ns(value) // 1_000_000_000
    return fields


def encode_record(record: MetricRecord) -> str:
    """Encode a record as one JSON object (no trailing newline)."""
    obj = {
        "name": record.name,
        "tags": dict(sorted(record.tags.items())),
        "fields": _json_fields(record),
        "timestamp": timestamp_ns(record.timestamp) / 1_000_000_000,
    }
    return json.dumps(obj)
