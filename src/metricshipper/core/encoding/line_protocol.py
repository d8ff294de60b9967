"""Line protocol encoder for metric records.

Produces one line per record::

    cpu,host=a,region=us idle="high",usage=42.0 1609459200000000000

Tags and fields are written in name order. Values that line protocol cannot
carry (None, containers, non-finite floats) are left out.
"""

import calendar
import math
import numbers
from datetime import datetime

from metricshipper.core.models import FieldValue, MetricRecord


def _escape_measurement(name: str) -> str:
    return name.replace("\\", "\\\\").replace(",", "\\,").replace(" ", "\\ ")


def _escape_key(key: str) -> str:
    return (
        key.replace("\\", "\\\\")
        .replace(",", "\\,")
        .replace("=", "\\=")
        .replace(" ", "\\ ")
    )


def _unix_seconds(value: datetime) -> int:
    return calendar.timegm(value.utctimetuple())


def timestamp_ns(value: datetime) -> int:
    """Convert a datetime to integer nanoseconds since the Unix epoch."""
    return _unix_seconds(value) * 1_000_000_000 + value.microsecond * 1000


def format_field_value(value: FieldValue) -> str | None:
    """Format a field value as line protocol, or None if it cannot be carried."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, numbers.Integral):
        return f"{int(value)}i"
    if isinstance(value, numbers.Real):
        number = float(value)
        if math.isnan(number) or math.isinf(number):
            return None
        return repr(number)
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    if isinstance(value, datetime):
        return f"{_unix_seconds(value)}i"
    return None


def encode_record(record: MetricRecord) -> str:
    """Encode a record as a single line (no trailing newline).

    Returns:
        The encoded line, or an empty string when no field can be encoded.
    """
    fields = []
    for name in sorted(record.fields):
        formatted = format_field_value(record.fields[name])
        if formatted is not None:
            fields.append(f"{_escape_key(name)}={formatted}")
    if not fields:
        return ""

    series = _escape_measurement(record.name)
    for name in sorted(record.tags):
        series += f",{_escape_key(name)}={_escape_key(record.tags[name])}"

    return f"{series} {','.join(fields)} {timestamp_ns(record.timestamp)}"
