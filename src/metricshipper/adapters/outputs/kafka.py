"""Kafka output.

Records are not batched: each record becomes one message on the topic,
keyed by the value of the configured routing tag when the record has it.
Sends are synchronous; the producer waits for all in-sync replicas.
"""

import ssl
from collections.abc import Sequence
from typing import Any

from kafka import KafkaProducer
from kafka.errors import KafkaError

from metricshipper.core.config import ExportConfig
from metricshipper.core.encoding import line_protocol, ndjson
from metricshipper.core.errors import (
    BackendConnectionError,
    ConfigurationError,
    ExportError,
    TransportError,
)
from metricshipper.core.exporter import RecordEncoder, RoutedExporter

DEFAULT_BROKERS = ("localhost:9092",)
DEFAULT_TOPIC = "telegraf"
DEFAULT_ROUTING_TAG = "host"

SAMPLE_CONFIG = """
  ## URLs of kafka brokers
  brokers = ["localhost:9092"]
  ## Kafka topic for producer messages
  topic = "telegraf"
  ## Tag to use as a routing key
  ##  ie, if this tag exists, its value will be used as the routing key
  routing_tag = "host"
  ## Payload format, "influx" (line protocol) or "json"
  data_format = "influx"

  ## Optional SSL Config
  # ssl_ca = "/etc/telegraf/ca.pem"
  # ssl_cert = "/etc/telegraf/cert.pem"
  # ssl_key = "/etc/telegraf/key.pem"
  ## Use SSL but skip chain & host verification
  # insecure_skip_verify = false
"""

ENCODERS: dict[str, RecordEncoder] = {
    "influx": line_protocol.encode_record,
    "json": ndjson.encode_record,
}


def build_ssl_context(
    ssl_ca: str | None = None,
    ssl_cert: str | None = None,
    ssl_key: str | None = None,
    insecure_skip_verify: bool = False,
) -> ssl.SSLContext | None:
    """Build the client TLS context, or None when TLS is not configured.

    Raises:
        OSError, ssl.SSLError: If a certificate or key cannot be loaded.
    """
    if not (ssl_ca or ssl_cert or ssl_key or insecure_skip_verify):
        return None
    context = ssl.create_default_context(cafile=ssl_ca)
    if ssl_cert:
        context.load_cert_chain(certfile=ssl_cert, keyfile=ssl_key)
    if insecure_skip_verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def map_kafka_error(e: Exception, connecting: bool = False) -> ExportError:
    """Map a kafka-python, TLS or socket error onto the export error hierarchy."""
    if connecting:
        return BackendConnectionError(f"kafka: unable to connect: {e}")
    return TransportError(f"FAILED to send kafka message: {e}")


class KafkaTransport:
    """KeyedTransportPort implementation backed by kafka-python."""

    description = "Configuration for the Kafka server to send metrics to"
    sample_config = SAMPLE_CONFIG

    def __init__(
        self,
        brokers: Sequence[str] = DEFAULT_BROKERS,
        ssl_ca: str | None = None,
        ssl_cert: str | None = None,
        ssl_key: str | None = None,
        insecure_skip_verify: bool = False,
        acks: str | int = "all",
        retries: int = 10,
        send_timeout: float = 10.0,
        producer: Any | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            brokers: Bootstrap broker addresses.
            ssl_ca: Path to the CA file.
            ssl_cert: Path to the client certificate.
            ssl_key: Path to the client key.
            insecure_skip_verify: Use TLS but skip chain and host verification.
            acks: Producer acknowledgement mode.
            retries: Producer-level retries for a single message.
            send_timeout: Seconds to wait for each broker acknowledgement.
            producer: Pre-built producer with KafkaProducer's send/close API.
        """
        self.brokers = list(brokers)
        self.ssl_ca = ssl_ca
        self.ssl_cert = ssl_cert
        self.ssl_key = ssl_key
        self.insecure_skip_verify = insecure_skip_verify
        self.acks = acks
        self.retries = retries
        self.send_timeout = send_timeout
        self._injected = producer
        self._producer: Any | None = None

    def _producer_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {
            "bootstrap_servers": self.brokers,
            "acks": self.acks,
            "retries": self.retries,
        }
        context = build_ssl_context(
            self.ssl_ca, self.ssl_cert, self.ssl_key, self.insecure_skip_verify
        )
        if context is not None:
            options["security_protocol"] = "SSL"
            options["ssl_context"] = context
        return options

    def connect(self) -> None:
        """Create the producer.

        Raises:
            BackendConnectionError: If TLS material cannot be loaded or no
                broker is reachable.
        """
        if self._injected is not None:
            self._producer = self._injected
            return
        try:
            self._producer = KafkaProducer(**self._producer_options())
        except (KafkaError, OSError, ssl.SSLError) as e:
            raise map_kafka_error(e, connecting=True) from e

    def send(self, topic: str, key: str | None, payload: bytes) -> None:
        """Send one message and wait for the acknowledgement.

        Raises:
            TransportError: If the transport is not connected or the send fails.
        """
        if self._producer is None:
            raise TransportError("kafka transport is not connected")
        encoded_key = key.encode("utf-8") if key is not None else None
        try:
            future = self._producer.send(topic, value=payload, key=encoded_key)
            future.get(timeout=self.send_timeout)
        except KafkaError as e:
            raise map_kafka_error(e) from e

    def close(self) -> None:
        """Flush and close the producer."""
        if self._producer is not None:
            self._producer.close()
            self._producer = None


def kafka_output(
    brokers: Sequence[str] = DEFAULT_BROKERS,
    topic: str = DEFAULT_TOPIC,
    routing_tag: str | None = DEFAULT_ROUTING_TAG,
    data_format: str = "influx",
    ssl_ca: str | None = None,
    ssl_cert: str | None = None,
    ssl_key: str | None = None,
    insecure_skip_verify: bool = False,
    certificate: str | None = None,
    key: str | None = None,
    ca: str | None = None,
    producer: Any | None = None,
) -> RoutedExporter:
    """Build a Kafka output from configuration options.

    certificate, key and ca are legacy aliases; when certificate is given
    they replace ssl_cert, ssl_key and ssl_ca.
    """
    encoder = ENCODERS.get(data_format)
    if encoder is None:
        raise ConfigurationError(
            f"unsupported data format {data_format!r}; must be one of "
            f"{', '.join(sorted(ENCODERS))}"
        )
    if certificate:
        ssl_cert, ssl_key, ssl_ca = certificate, key, ca

    transport = KafkaTransport(
        brokers=brokers,
        ssl_ca=ssl_ca,
        ssl_cert=ssl_cert,
        ssl_key=ssl_key,
        insecure_skip_verify=insecure_skip_verify,
        producer=producer,
    )
    config = ExportConfig(namespace=topic, routing_tag=routing_tag or None)
    return RoutedExporter(transport, config, encoder)
