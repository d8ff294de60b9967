"""AWS CloudWatch output.

PutMetricData accepts at most 20 datums per call and 10 dimensions per
datum, so this transport is always driven through a BatchExporter.
Credentials come from the standard boto3 chain (environment, shared
credentials file, instance role).
"""

import logging
from collections.abc import Sequence
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from metricshipper.core.config import ExportConfig
from metricshipper.core.errors import (
    BackendConnectionError,
    ConfigurationError,
    ExportError,
    TransportError,
)
from metricshipper.core.exporter import BatchExporter
from metricshipper.core.models import Datum

logger = logging.getLogger(__name__)

MAX_DATUMS_PER_CALL = 20
MAX_DIMENSIONS = 10
DEFAULT_REGION = "us-east-1"
DEFAULT_NAMESPACE = "InfluxData/Telegraf"

SAMPLE_CONFIG = """
  ## Amazon REGION
  region = "us-east-1"

  ## Namespace for the CloudWatch MetricDatums
  namespace = "InfluxData/Telegraf"
"""


def map_cloudwatch_error(e: Exception, connecting: bool = False) -> ExportError:
    """Translate a botocore error into the matching export error."""
    if isinstance(e, ClientError):
        code = e.response.get("Error", {}).get("Code", "Unknown")
        message = f"CloudWatch {e.operation_name} failed ({code}): {e}"
    else:
        message = f"CloudWatch request failed: {e}"
    if connecting:
        return BackendConnectionError(message)
    return TransportError(message)


def to_metric_datum(datum: Datum) -> dict[str, Any]:
    """Convert a Datum into a PutMetricData MetricDatum structure."""
    return {
        "MetricName": datum.metric_name,
        "Value": datum.value,
        "Dimensions": [{"Name": d.name, "Value": d.value} for d in datum.dimensions],
        "Timestamp": datum.timestamp,
    }


class CloudWatchTransport:
    """BatchTransportPort implementation backed by the CloudWatch API."""

    description = "Configuration for AWS CloudWatch output."
    sample_config = SAMPLE_CONFIG

    def __init__(
        self,
        region: str = DEFAULT_REGION,
        namespace: str = DEFAULT_NAMESPACE,
        client: Any | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            region: AWS region of the CloudWatch endpoint.
            namespace: Namespace checked by connect() to validate access.
            client: Pre-built boto3 CloudWatch client (mainly for tests).
        """
        self.region = region
        self.namespace = namespace
        self._client = client
        self._svc: Any | None = None

    def connect(self) -> None:
        """Create the client and check it with a read-only ListMetrics call.

        Raises:
            BackendConnectionError: If the client cannot be built or the
                check call fails.
        """
        try:
            svc = self._client or boto3.client("cloudwatch", region_name=self.region)
            svc.list_metrics(Namespace=self.namespace)
        except (BotoCoreError, ClientError) as e:
            logger.error("cloudwatch: error in ListMetrics API call: %s", e)
            raise map_cloudwatch_error(e, connecting=True) from e
        self._svc = svc

    def send_batch(self, namespace: str, datums: Sequence[Datum]) -> None:
        """Send one PutMetricData request.

        Raises:
            TransportError: If the transport is not connected or the call fails.
        """
        if self._svc is None:
            raise TransportError("CloudWatch transport is not connected")
        try:
            self._svc.put_metric_data(
                Namespace=namespace,
                MetricData=[to_metric_datum(d) for d in datums],
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("cloudwatch: unable to write to CloudWatch: %s", e)
            raise map_cloudwatch_error(e) from e

    def close(self) -> None:
        """Drop the client; boto3 clients hold no session to tear down."""
        self._svc = None


def cloudwatch_output(
    region: str = DEFAULT_REGION,
    namespace: str = DEFAULT_NAMESPACE,
    max_batch_size: int = MAX_DATUMS_PER_CALL,
    max_dimensions: int = MAX_DIMENSIONS,
    client: Any | None = None,
) -> BatchExporter:
    """Build a CloudWatch output from configuration options.

    Raises:
        ConfigurationError: If a limit is invalid or max_dimensions exceeds
            what CloudWatch accepts per datum.
    """
    config = ExportConfig(
        max_batch_size=max_batch_size,
        max_dimensions=max_dimensions,
        namespace=namespace,
    )
    if config.max_dimensions > MAX_DIMENSIONS:
        raise ConfigurationError(
            f"max_dimensions must be <= {MAX_DIMENSIONS} for CloudWatch, "
            f"got {max_dimensions}"
        )
    return BatchExporter(CloudWatchTransport(region, namespace, client), config)
