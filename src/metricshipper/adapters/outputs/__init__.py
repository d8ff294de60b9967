"""Output transports implementing core ports."""

from metricshipper.adapters.outputs.cloudwatch import (
    CloudWatchTransport,
    cloudwatch_output,
)
from metricshipper.adapters.outputs.in_memory import (
    InMemoryBatchTransport,
    InMemoryKeyedTransport,
)
from metricshipper.adapters.outputs.kafka import KafkaTransport, kafka_output
from metricshipper.adapters.outputs.sqlite import (
    SQLiteTransport,
    StoredDatum,
    sqlite_output,
)

__all__ = [
    "CloudWatchTransport",
    "InMemoryBatchTransport",
    "InMemoryKeyedTransport",
    "KafkaTransport",
    "SQLiteTransport",
    "StoredDatum",
    "cloudwatch_output",
    "kafka_output",
    "sqlite_output",
]
