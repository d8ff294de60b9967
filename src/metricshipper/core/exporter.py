"""Export drivers: turn metric records into transport calls.

BatchExporter builds datums, partitions them to the transport's per-call
limit and sends the partitions in order. RoutedExporter sends one keyed
message per record for queue-style transports.

Both stop at the first failed send. Whatever was delivered before the
failure stays delivered; TransportError.partitions_sent says how much.
Neither exporter retries. Callers must not run two writes on the same
exporter at once.
"""

import enum
import logging
from collections.abc import Callable, Sequence
from types import TracebackType
from typing import Self

from metricshipper.core.config import ExportConfig
from metricshipper.core.datums import build_all_datums
from metricshipper.core.encoding.line_protocol import encode_record
from metricshipper.core.errors import (
    BackendConnectionError,
    ExporterStateError,
    TransportError,
)
from metricshipper.core.models import MetricRecord
from metricshipper.core.partition import partition
from metricshipper.core.ports import BatchTransportPort, KeyedTransportPort

logger = logging.getLogger(__name__)

RecordEncoder = Callable[[MetricRecord], str]


class ExporterState(enum.Enum):
    """Lifecycle states of an exporter."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    CLOSED = "closed"


class _Exporter:
    """Lifecycle shared by the exporters: connect, write, close."""

    def __init__(self, transport: BatchTransportPort | KeyedTransportPort) -> None:
        self._transport = transport
        self._state = ExporterState.DISCONNECTED

    @property
    def state(self) -> ExporterState:
        """Current lifecycle state."""
        return self._state

    def connect(self) -> None:
        """Connect the transport.

        Raises:
            BackendConnectionError: If the transport cannot connect. The
                exporter stays disconnected and nothing is retried.
            ExporterStateError: If the exporter was closed.
        """
        if self._state is ExporterState.CLOSED:
            raise ExporterStateError("cannot connect a closed exporter")
        if self._state is ExporterState.CONNECTED:
            return
        try:
            self._transport.connect()
        except BackendConnectionError:
            raise
        except Exception as e:
            raise BackendConnectionError(f"transport connect failed: {e}") from e
        self._state = ExporterState.CONNECTED
        logger.info("%s connected", type(self._transport).__name__)

    def close(self) -> None:
        """Close the transport once; later calls do nothing."""
        if self._state is ExporterState.CLOSED:
            return
        was_connected = self._state is ExporterState.CONNECTED
        self._state = ExporterState.CLOSED
        if was_connected:
            self._transport.close()
            logger.info("%s closed", type(self._transport).__name__)

    def _require_connected(self) -> None:
        if self._state is not ExporterState.CONNECTED:
            raise ExporterStateError(
                f"write requires a connected exporter (state: {self._state.value})"
            )

    def __enter__(self) -> Self:
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class BatchExporter(_Exporter):
    """Exporter for backends with a per-call datum limit.

    Example:
        ```python
        transport = CloudWatchTransport(region="us-east-1")
        config = ExportConfig(max_batch_size=20, namespace="InfluxData/Telegraf")
        with BatchExporter(transport, config) as exporter:
            exporter.write(records)
        ```
    """

    def __init__(self, transport: BatchTransportPort, config: ExportConfig) -> None:
        super().__init__(transport)
        self._batch_transport = transport
        self.config = config

    def write(self, records: Sequence[MetricRecord]) -> int:
        """Export records as datums, one transport call per partition.

        Args:
            records: Records for this flush. They are not modified.

        Returns:
            Number of partitions sent.

        Raises:
            ExporterStateError: If the exporter is not connected.
            TransportError: On the first failed send; remaining partitions
                are not sent.
        """
        self._require_connected()
        datums = build_all_datums(records, self.config.max_dimensions)
        partitions = partition(self.config.max_batch_size, datums)
        logger.debug(
            "exporting %d records as %d datums in %d partitions",
            len(records),
            len(datums),
            len(partitions),
        )

        sent = 0
        for batch in partitions:
            try:
                self._batch_transport.send_batch(self.config.namespace, batch)
            except Exception as e:
                logger.warning(
                    "send failed after %d of %d partitions: %s",
                    sent,
                    len(partitions),
                    e,
                )
                if isinstance(e, TransportError):
                    e.partitions_sent = sent
                    raise
                raise TransportError(str(e), partitions_sent=sent) from e
            sent += 1
        return sent


class RoutedExporter(_Exporter):
    """Exporter for queue-style backends: one keyed message per record.

    The message key is the value of config.routing_tag on the record; records
    without that tag (or with no routing tag configured) are sent unkeyed.
    Records with nothing to encode are skipped.
    """

    def __init__(
        self,
        transport: KeyedTransportPort,
        config: ExportConfig,
        encoder: RecordEncoder = encode_record,
    ) -> None:
        super().__init__(transport)
        self._keyed_transport = transport
        self.config = config
        self._encoder = encoder

    def routing_key(self, record: MetricRecord) -> str | None:
        """Return the routing key for a record, or None to send unkeyed."""
        if self.config.routing_tag is None:
            return None
        return record.tags.get(self.config.routing_tag)

    def write(self, records: Sequence[MetricRecord]) -> int:
        """Send each record as one message, in order.

        Returns:
            Number of messages sent.

        Raises:
            ExporterStateError: If the exporter is not connected.
            TransportError: On the first failed send.
        """
        self._require_connected()
        sent = 0
        for record in records:
            payload = self._encoder(record)
            if not payload:
                logger.debug("skipping record %s with no encodable fields", record.name)
                continue
            try:
                self._keyed_transport.send(
                    self.config.namespace,
                    self.routing_key(record),
                    payload.encode("utf-8"),
                )
            except Exception as e:
                logger.warning("send failed after %d messages: %s", sent, e)
                if isinstance(e, TransportError):
                    e.partitions_sent = sent
                    raise
                raise TransportError(str(e), partitions_sent=sent) from e
            sent += 1
        return sent
