"""In-memory transports for batches and keyed messages.

Suitable for testing and for inspecting what an exporter would send.
Both can be told to fail on a given call to exercise error paths.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from metricshipper.core.errors import BackendConnectionError, TransportError
from metricshipper.core.models import Datum


@dataclass(frozen=True)
class SentBatch:
    """A batch recorded by InMemoryBatchTransport."""

    namespace: str
    datums: tuple[Datum, ...]


@dataclass(frozen=True)
class SentMessage:
    """A message recorded by InMemoryKeyedTransport."""

    topic: str
    key: str | None
    payload: bytes


class _InMemoryTransport:
    def __init__(
        self,
        fail_on_call: int | None = None,
        fail_connect: bool = False,
    ) -> None:
        """Initialize the transport.

        Args:
            fail_on_call: 1-based index of the send call that should fail.
            fail_connect: Make connect() raise BackendConnectionError.
        """
        self._fail_on_call = fail_on_call
        self._fail_connect = fail_connect
        self._calls = 0
        self.connected = False
        self.close_count = 0

    def connect(self) -> None:
        if self._fail_connect:
            raise BackendConnectionError("in-memory transport refused connection")
        self.connected = True

    def close(self) -> None:
        self.connected = False
        self.close_count += 1

    def _check_call(self) -> None:
        if not self.connected:
            raise TransportError("transport is not connected")
        self._calls += 1
        if self._calls == self._fail_on_call:
            raise TransportError(f"injected failure on call {self._calls}")


class InMemoryBatchTransport(_InMemoryTransport):
    """In-memory implementation of BatchTransportPort."""

    def __init__(
        self,
        fail_on_call: int | None = None,
        fail_connect: bool = False,
    ) -> None:
        super().__init__(fail_on_call, fail_connect)
        self.batches: list[SentBatch] = []

    def send_batch(self, namespace: str, datums: Sequence[Datum]) -> None:
        """Record a batch."""
        self._check_call()
        self.batches.append(SentBatch(namespace=namespace, datums=tuple(datums)))


class InMemoryKeyedTransport(_InMemoryTransport):
    """In-memory implementation of KeyedTransportPort."""

    def __init__(
        self,
        fail_on_call: int | None = None,
        fail_connect: bool = False,
    ) -> None:
        super().__init__(fail_on_call, fail_connect)
        self.messages: list[SentMessage] = []

    def send(self, topic: str, key: str | None, payload: bytes) -> None:
        """Record a message."""
        self._check_call()
        self.messages.append(SentMessage(topic=topic, key=key, payload=payload))
