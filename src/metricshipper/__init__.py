"""metricshipper - export metric records to batch-limited metrics backends.

Example:
    ```python
    from metricshipper import BatchExporter, ExportConfig, MetricRecord
    from metricshipper.adapters.outputs import CloudWatchTransport

    exporter = BatchExporter(
        CloudWatchTransport(region="us-east-1"),
        ExportConfig(max_batch_size=20, namespace="InfluxData/Telegraf"),
    )
    with exporter:
        exporter.write([MetricRecord(name="cpu", fields={"usage": 42.0})])
    ```
"""

from metricshipper.core.agent import Agent, FlushResult
from metricshipper.core.coercion import coerce_value
from metricshipper.core.config import (
    AgentConfig,
    ExportConfig,
    PluginConfig,
    load_config,
    parse_config,
)
from metricshipper.core.datums import build_all_datums, build_datums
from metricshipper.core.dimensions import select_dimensions
from metricshipper.core.errors import (
    BackendConnectionError,
    ConfigurationError,
    ExporterStateError,
    ExportError,
    InputError,
    TransportError,
)
from metricshipper.core.exporter import BatchExporter, ExporterState, RoutedExporter
from metricshipper.core.models import Datum, Dimension, MetricRecord
from metricshipper.core.partition import partition
from metricshipper.core.ports import (
    BatchTransportPort,
    InputPort,
    KeyedTransportPort,
    OutputPort,
)
from metricshipper.core.registry import PluginRegistry

__version__ = "0.1.0"
__all__ = [
    # models
    "MetricRecord",
    "Datum",
    "Dimension",
    # engine
    "coerce_value",
    "select_dimensions",
    "build_datums",
    "build_all_datums",
    "partition",
    "BatchExporter",
    "RoutedExporter",
    "ExporterState",
    # ports
    "BatchTransportPort",
    "KeyedTransportPort",
    "OutputPort",
    "InputPort",
    # configuration
    "ExportConfig",
    "AgentConfig",
    "PluginConfig",
    "load_config",
    "parse_config",
    "PluginRegistry",
    "Agent",
    "FlushResult",
    # errors
    "ExportError",
    "ConfigurationError",
    "BackendConnectionError",
    "TransportError",
    "ExporterStateError",
    "InputError",
]
