"""Configuration models for exporters and the agent.

Exporter limits are validated when the config is constructed, so an invalid
setup is rejected before any write. Agent configuration is read from TOML
files shaped like::

    [[inputs.exec]]
    command = "/usr/bin/mycollector --foo=bar"
    data_format = "json"

    [[outputs.cloudwatch]]
    region = "us-east-1"
    namespace = "InfluxData/Telegraf"
"""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from metricshipper.core.dimensions import DEFAULT_MAX_DIMENSIONS
from metricshipper.core.errors import ConfigurationError


def _check_int(name: str, value: object, minimum: int) -> None:
    """Raise ConfigurationError unless value is an int >= minimum."""
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise ConfigurationError(f"{name} must be an int >= {minimum}, got {value!r}")


@dataclass(frozen=True)
class ExportConfig:
    """Limits and destination for one exporter.

    Attributes:
        max_batch_size: Maximum datums per transport call (>= 1).
        max_dimensions: Maximum dimensions per datum (>= 0).
        namespace: Destination namespace or topic.
        routing_tag: Tag whose value keys routed sends (routed mode only).
    """

    max_batch_size: int = 20
    max_dimensions: int = DEFAULT_MAX_DIMENSIONS
    namespace: str = ""
    routing_tag: str | None = None

    def __post_init__(self) -> None:
        _check_int("max_batch_size", self.max_batch_size, 1)
        _check_int("max_dimensions", self.max_dimensions, 0)


@dataclass(frozen=True)
class PluginConfig:
    """One configured plugin instance: its registered kind and options."""

    kind: str
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AgentConfig:
    """Inputs and outputs the agent should build, in file order."""

    inputs: tuple[PluginConfig, ...] = ()
    outputs: tuple[PluginConfig, ...] = ()


def _parse_section(data: dict[str, Any], section: str) -> tuple[PluginConfig, ...]:
    """Turn an ``[[section.kind]]`` table list into PluginConfig entries."""
    raw = data.get(section, {})
    if not isinstance(raw, dict):
        raise ConfigurationError(f"[{section}] must be a table")

    plugins: list[PluginConfig] = []
    for kind, entries in raw.items():
        # A single [section.kind] table is accepted as one instance
        if isinstance(entries, dict):
            entries = [entries]
        if not isinstance(entries, list):
            raise ConfigurationError(f"[{section}.{kind}] must be a table")
        for options in entries:
            if not isinstance(options, dict):
                raise ConfigurationError(f"[[{section}.{kind}]] entries must be tables")
            plugins.append(PluginConfig(kind=kind, options=dict(options)))
    return tuple(plugins)


def parse_config(text: str) -> AgentConfig:
    """Parse agent configuration from TOML text.

    Raises:
        ConfigurationError: If the text is not valid TOML or is badly shaped.
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"invalid configuration: {e}") from e
    return AgentConfig(
        inputs=_parse_section(data, "inputs"),
        outputs=_parse_section(data, "outputs"),
    )


def load_config(path: str | Path) -> AgentConfig:
    """Read agent configuration from a TOML file.

    Raises:
        ConfigurationError: If the file cannot be read or parsed.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"cannot read configuration {path}: {e}") from e
    return parse_config(text)
