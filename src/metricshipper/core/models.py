"""Core domain models for metric export."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

# Field values are heterogeneous; coercion decides what is exportable.
FieldValue = Any


@dataclass(frozen=True)
class MetricRecord:
    """One observation produced by an input.

    Attributes:
        name: Measurement name (e.g., cpu).
        tags: Contextual string attributes. The "host" tag is privileged
            when dimensions are selected.
        fields: Field name to value. Only numeric-coercible values are exported.
        timestamp: Point in time for the whole record. Defaults to now (UTC);
            naive values are read as UTC.
    """

    name: str
    tags: Mapping[str, str] = field(default_factory=dict)
    fields: Mapping[str, FieldValue] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("metric record name must be non-empty")


@dataclass(frozen=True)
class Dimension:
    """A named contextual attribute attached to a datum."""

    name: str
    value: str


@dataclass(frozen=True)
class Datum:
    """A single exportable data point derived from one field of a record.

    Attributes:
        metric_name: Record name and field name joined with "_".
        value: Numeric value produced by coercion.
        dimensions: Ordered dimensions selected from the record's tags.
        timestamp: The record's timestamp.
    """

    metric_name: str
    value: float
    dimensions: tuple[Dimension, ...]
    timestamp: datetime
