"""Exec input: run a command and parse its stdout into metric records."""

import logging
import shlex
import subprocess
from datetime import UTC, datetime
from typing import Protocol

from metricshipper.core.errors import ConfigurationError, InputError
from metricshipper.core.models import MetricRecord
from metricshipper.core.parsing.json_flatten import parse_json_fields
from metricshipper.core.parsing.line_protocol import parse_lines

logger = logging.getLogger(__name__)

DATA_FORMATS = ("json", "influx")

SAMPLE_CONFIG = """
  ## the command to run
  command = "/usr/bin/mycollector --foo=bar"

  ## Data format to consume. This can be "json" or "influx" (line-protocol)
  ## NOTE json only reads numerical measurements, strings and booleans are ignored.
  data_format = "json"

  ## measurement name suffix (for separating different commands)
  name_suffix = "_mycollector"
"""


class Runner(Protocol):
    """Runs a command line and returns its stdout."""

    def run(self, command: str) -> bytes: ...


class CommandRunner:
    """Runner that executes the command as a subprocess, without a shell."""

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout

    def run(self, command: str) -> bytes:
        """Run the command and capture stdout.

        Raises:
            InputError: If the command cannot be parsed, started, or exits
                non-zero.
        """
        try:
            argv = shlex.split(command)
        except ValueError as e:
            raise InputError(f"exec: unable to parse command, {e}") from e
        if not argv:
            raise InputError("exec: unable to parse command, empty command")

        try:
            completed = subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                check=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise InputError(f"exec: {e} for command '{command}'") from e
        return completed.stdout


class ExecInput:
    """InputPort implementation for a single command.

    With data_format "json", the whole output is one flattened record named
    "exec" plus name_suffix. With "influx", each line is one record.
    """

    description = (
        "Read flattened metrics from one or more commands that output JSON to stdout"
    )
    sample_config = SAMPLE_CONFIG

    def __init__(
        self,
        command: str,
        data_format: str = "json",
        name_suffix: str = "",
        runner: Runner | None = None,
    ) -> None:
        if data_format == "":
            data_format = "json"
        if data_format not in DATA_FORMATS:
            raise ConfigurationError(
                f"Unsupported data format: {data_format}. "
                "Must be either json or influx."
            )
        self.command = command
        self.data_format = data_format
        self.name_suffix = name_suffix
        self._runner = runner or CommandRunner()

    def gather(self) -> list[MetricRecord]:
        """Run the command once and parse the output.

        Malformed influx lines are logged and skipped; the rest are returned.

        Raises:
            InputError: If the command fails or its JSON output cannot be parsed.
        """
        out = self._runner.run(self.command)
        now = datetime.now(UTC)

        if self.data_format == "json":
            try:
                fields = parse_json_fields(out)
            except InputError as e:
                raise InputError(
                    f"exec: unable to parse output of '{self.command}' as JSON, {e}"
                ) from e
            name = f"exec{self.name_suffix}"
            records = [MetricRecord(name=name, fields=fields, timestamp=now)]
        else:
            bad_lines: list[InputError] = []
            text = out.decode("utf-8", errors="replace")
            records = [
                MetricRecord(
                    name=f"{r.name}{self.name_suffix}",
                    tags=r.tags,
                    fields=r.fields,
                    timestamp=r.timestamp,
                )
                for r in parse_lines(text, now, errors=bad_lines)
            ]
            for e in bad_lines:
                logger.error("exec: %s from command '%s'", e, self.command)

        logger.debug("exec gathered %d records from %r", len(records), self.command)
        return records
