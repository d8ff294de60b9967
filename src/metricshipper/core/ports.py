"""Port interfaces for transports, outputs and inputs.

These protocols define the contracts that adapters must implement.
The core engine depends only on these interfaces, not concrete backends.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from metricshipper.core.models import Datum, MetricRecord


@runtime_checkable
class BatchTransportPort(Protocol):
    """Port for backends that accept bounded batches of datums.

    Adapters implementing this protocol send one batch per call.
    Examples: CloudWatchTransport, SQLiteTransport, InMemoryBatchTransport.
    """

    def connect(self) -> None:
        """Establish the session or credentials the backend needs."""
        ...

    def send_batch(self, namespace: str, datums: Sequence[Datum]) -> None:
        """Send one batch of datums to the given namespace.

        Args:
            namespace: Destination namespace.
            datums: At most the backend's per-call maximum of datums.
        """
        ...

    def close(self) -> None:
        """Release backend resources."""
        ...


@runtime_checkable
class KeyedTransportPort(Protocol):
    """Port for queue-style backends that route single messages by key.

    Examples: KafkaTransport, InMemoryKeyedTransport.
    """

    def connect(self) -> None:
        """Establish the producer session."""
        ...

    def send(self, topic: str, key: str | None, payload: bytes) -> None:
        """Send one message, keyed when key is not None."""
        ...

    def close(self) -> None:
        """Release producer resources."""
        ...


@runtime_checkable
class OutputPort(Protocol):
    """Lifecycle shared by every output variant: connect, write, close."""

    def connect(self) -> None:
        """Connect to the backend."""
        ...

    def write(self, records: Sequence[MetricRecord]) -> int:
        """Export records; returns the number of transport calls made."""
        ...

    def close(self) -> None:
        """Close the output. Safe to call more than once."""
        ...


@runtime_checkable
class InputPort(Protocol):
    """Port for anything that produces metric records."""

    def gather(self) -> list[MetricRecord]:
        """Collect one round of metric records."""
        ...
