"""Tests for the built-in registries and agent construction."""

from pathlib import Path

import pytest

from metricshipper.adapters.inputs.exec import ExecInput
from metricshipper.core.config import parse_config
from metricshipper.core.errors import ConfigurationError
from metricshipper.core.exporter import BatchExporter, RoutedExporter
from metricshipper.core.registry import PluginRegistry
from metricshipper.plugins import (
    build_agent,
    default_input_registry,
    default_output_registry,
)


class TestDefaultRegistries:
    """Built-in plugin kinds."""

    @pytest.mark.core
    def test_output_kinds(self) -> None:
        """The built-in outputs are registered."""
        assert default_output_registry().kinds() == ["cloudwatch", "kafka", "sqlite"]

    @pytest.mark.core
    def test_input_kinds(self) -> None:
        """The built-in inputs are registered."""
        assert default_input_registry().kinds() == ["exec"]

    @pytest.mark.core
    def test_each_call_returns_a_fresh_registry(self) -> None:
        """Registries are not shared between calls."""
        assert default_output_registry() is not default_output_registry()


class TestBuildAgent:
    """Tests for build_agent()."""

    @pytest.mark.core
    def test_builds_configured_plugins(self, tmp_path: Path) -> None:
        """Every configured plugin is built with its options."""
        db_path = (tmp_path / "out.db").as_posix()
        config = parse_config(
            f"""
            [[inputs.exec]]
            command = "echo 1"
            data_format = "influx"

            [[outputs.cloudwatch]]
            region = "eu-west-1"
            namespace = "Custom/App"

            [[outputs.kafka]]
            topic = "metrics"
            routing_tag = "host"

            [[outputs.sqlite]]
            db_path = "{db_path}"
            """
        )
        agent = build_agent(config)

        assert isinstance(agent.inputs[0], ExecInput)
        assert agent.inputs[0].data_format == "influx"
        cloudwatch, kafka, sqlite = agent.outputs
        assert isinstance(cloudwatch, BatchExporter)
        assert cloudwatch.config.namespace == "Custom/App"
        assert cloudwatch.config.max_batch_size == 20
        assert isinstance(kafka, RoutedExporter)
        assert kafka.config.namespace == "metrics"
        assert kafka.config.routing_tag == "host"
        assert isinstance(sqlite, BatchExporter)

    @pytest.mark.core
    def test_unknown_output_kind(self) -> None:
        """An unregistered kind is a ConfigurationError."""
        config = parse_config("[[outputs.influxdb]]\nurl = 'http://x'\n")
        with pytest.raises(ConfigurationError, match="unknown plugin kind"):
            build_agent(config)

    @pytest.mark.core
    def test_invalid_limit_is_rejected_at_build_time(self) -> None:
        """Invalid limits fail when the agent is built."""
        config = parse_config("[[outputs.cloudwatch]]\nmax_batch_size = 0\n")
        with pytest.raises(ConfigurationError, match="max_batch_size"):
            build_agent(config)

    @pytest.mark.core
    def test_custom_registries(self) -> None:
        """Caller-supplied registries replace the defaults."""
        outputs: PluginRegistry[BatchExporter] = PluginRegistry()
        config = parse_config("[[outputs.cloudwatch]]\n")
        with pytest.raises(ConfigurationError, match="known: none"):
            build_agent(config, outputs=outputs)  # type: ignore[arg-type]
