"""Built-in plugin registries and agent construction.

Registries are populated here, explicitly, when a caller asks for them.
"""

from metricshipper.adapters.inputs.exec import ExecInput
from metricshipper.adapters.outputs.cloudwatch import cloudwatch_output
from metricshipper.adapters.outputs.kafka import kafka_output
from metricshipper.adapters.outputs.sqlite import sqlite_output
from metricshipper.core.agent import Agent
from metricshipper.core.config import AgentConfig
from metricshipper.core.ports import InputPort, OutputPort
from metricshipper.core.registry import PluginRegistry


def default_output_registry() -> PluginRegistry[OutputPort]:
    """Registry with the built-in outputs: cloudwatch, kafka, sqlite."""
    registry: PluginRegistry[OutputPort] = PluginRegistry()
    registry.register("cloudwatch", cloudwatch_output)
    registry.register("kafka", kafka_output)
    registry.register("sqlite", sqlite_output)
    return registry


def default_input_registry() -> PluginRegistry[InputPort]:
    """Registry with the built-in inputs: exec."""
    registry: PluginRegistry[InputPort] = PluginRegistry()
    registry.register("exec", ExecInput)
    return registry


def build_agent(
    config: AgentConfig,
    inputs: PluginRegistry[InputPort] | None = None,
    outputs: PluginRegistry[OutputPort] | None = None,
) -> Agent:
    """Instantiate every configured plugin and wire them into an Agent.

    Raises:
        ConfigurationError: If a plugin kind is unknown or its options are
            invalid.
    """
    if inputs is None:
        inputs = default_input_registry()
    if outputs is None:
        outputs = default_output_registry()
    return Agent(
        inputs=[inputs.create(p.kind, p.options) for p in config.inputs],
        outputs=[outputs.create(p.kind, p.options) for p in config.outputs],
    )
