"""Line protocol parser producing MetricRecord objects."""

import re
from datetime import UTC, datetime, timedelta

from metricshipper.core.errors import InputError
from metricshipper.core.models import FieldValue, MetricRecord

_UNESCAPE = re.compile(r"\\(.)")
_TRUE = {"t", "T", "true", "True", "TRUE"}
_FALSE = {"f", "F", "false", "False", "FALSE"}


def _split(text: str, sep: str, quotes: bool = False, maxsplit: int = -1) -> list[str]:
    """Split on sep, ignoring escaped separators (and quoted ones if asked)."""
    parts: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    while i < len(text):
        char = text[i]
        if char == "\\" and i + 1 < len(text):
            current.append(text[i : i + 2])
            i += 2
            continue
        if quotes and char == '"':
            in_quotes = not in_quotes
        if char == sep and not in_quotes and maxsplit != len(parts):
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1
    parts.append("".join(current))
    return parts


def _unescape(text: str) -> str:
    return _UNESCAPE.sub(r"\1", text)


def _parse_field_value(raw: str) -> FieldValue:
    if len(raw) >= 2 and raw.startswith('"') and raw.endswith('"'):
        return raw[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    if raw.endswith("i") and raw[:-1].lstrip("-").isdigit():
        return int(raw[:-1])
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    return float(raw)


def _parse_timestamp(raw: str) -> datetime:
    ns = int(raw)
    seconds, remainder = divmod(ns, 1_000_000_000)
    return datetime.fromtimestamp(seconds, tz=UTC) + timedelta(
        microseconds=remainder // 1000
    )


def parse_line(line: str, default_time: datetime) -> MetricRecord:
    """Parse a single line of line protocol.

    Args:
        line: One non-empty, non-comment line.
        default_time: Timestamp used when the line carries none.

    Raises:
        InputError: If the line is malformed.
    """
    parts = [p for p in _split(line.strip(), " ", quotes=True) if p]
    if len(parts) not in (2, 3):
        raise InputError(f"malformed line: {line!r}")

    series = _split(parts[0], ",")
    name = _unescape(series[0])
    if not name:
        raise InputError(f"missing measurement name: {line!r}")

    tags: dict[str, str] = {}
    for item in series[1:]:
        pair = _split(item, "=", maxsplit=1)
        if len(pair) != 2:
            raise InputError(f"malformed tag {item!r} in line: {line!r}")
        tags[_unescape(pair[0])] = _unescape(pair[1])

    fields: dict[str, FieldValue] = {}
    for item in _split(parts[1], ",", quotes=True):
        pair = _split(item, "=", quotes=True, maxsplit=1)
        if len(pair) != 2:
            raise InputError(f"malformed field {item!r} in line: {line!r}")
        try:
            fields[_unescape(pair[0])] = _parse_field_value(pair[1])
        except ValueError as e:
            raise InputError(f"bad field value {pair[1]!r} in line: {line!r}") from e

    timestamp = default_time
    if len(parts) == 3:
        try:
            timestamp = _parse_timestamp(parts[2])
        except ValueError as e:
            raise InputError(f"bad timestamp {parts[2]!r} in line: {line!r}") from e

    return MetricRecord(name=name, tags=tags, fields=fields, timestamp=timestamp)


def parse_lines(
    data: str,
    default_time: datetime | None = None,
    errors: list[InputError] | None = None,
) -> list[MetricRecord]:
    """Parse line protocol text into records.

    Blank lines and lines starting with "#" are skipped. When an errors list
    is given, malformed lines are appended to it and parsing continues with
    the next line.

    Raises:
        InputError: On the first malformed line, when no errors list is given.
    """
    now = default_time or datetime.now(UTC)
    records = []
    for line in data.splitlines():
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        try:
            records.append(parse_line(line, now))
        except InputError as e:
            if errors is None:
                raise
            errors.append(e)
    return records
