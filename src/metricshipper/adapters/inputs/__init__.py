"""Input adapters producing metric records."""

from metricshipper.adapters.inputs.exec import CommandRunner, ExecInput

__all__ = ["CommandRunner", "ExecInput"]
