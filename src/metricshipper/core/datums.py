"""Datum builder: one exportable datum per numeric field of a record."""

from collections.abc import Iterable

from metricshipper.core.coercion import coerce_value
from metricshipper.core.dimensions import DEFAULT_MAX_DIMENSIONS, select_dimensions
from metricshipper.core.models import Datum, MetricRecord

METRIC_NAME_SEPARATOR = "_"


def metric_name(record_name: str, field_name: str) -> str:
    """Join a record name and a field name into a datum metric name."""
    return METRIC_NAME_SEPARATOR.join((record_name, field_name))


def build_datums(
    record: MetricRecord,
    max_dimensions: int = DEFAULT_MAX_DIMENSIONS,
) -> list[Datum]:
    """Create a datum for each field of a record that coerces to a number.

    Fields are visited in ascending name order so the output is deterministic.
    Fields with unsupported values are skipped.

    Args:
        record: The source record. It is not modified.
        max_dimensions: Cap on dimensions attached to each datum.

    Returns:
        List of Datum, possibly empty.
    """
    datums: list[Datum] = []
    dimensions = None

    for field_name in sorted(record.fields):
        value = coerce_value(record.fields[field_name])
        if value is None:
            continue
        if dimensions is None:
            dimensions = select_dimensions(record.tags, max_dimensions)
        datums.append(
            Datum(
                metric_name=metric_name(record.name, field_name),
                value=value,
                dimensions=dimensions,
                timestamp=record.timestamp,
            )
        )

    return datums


def build_all_datums(
    records: Iterable[MetricRecord],
    max_dimensions: int = DEFAULT_MAX_DIMENSIONS,
) -> list[Datum]:
    """Build datums for several records, keeping record order."""
    datums: list[Datum] = []
    for record in records:
        datums.extend(build_datums(record, max_dimensions))
    return datums
