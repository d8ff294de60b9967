"""Agent: gather records from inputs and flush them to every output.

The agent runs one flush cycle per call. Scheduling, retries and backoff
are left to whatever calls run_once().
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from metricshipper.core.models import MetricRecord
from metricshipper.core.ports import InputPort, OutputPort

logger = logging.getLogger(__name__)


@dataclass
class FlushResult:
    """Outcome of one flush across all outputs.

    Attributes:
        sent: Output index to transport calls made.
        errors: Output index to the exception that stopped its write.
    """

    sent: dict[int, int] = field(default_factory=dict)
    errors: dict[int, Exception] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


class Agent:
    """Drives inputs and outputs through one gather/flush cycle.

    A failing input or output is logged and skipped so the others still run.
    """

    def __init__(
        self,
        inputs: Sequence[InputPort],
        outputs: Sequence[OutputPort],
    ) -> None:
        self.inputs = list(inputs)
        self.outputs = list(outputs)

    def connect(self) -> None:
        """Connect every output.

        If one fails, the outputs connected before it are closed again and
        the error propagates.
        """
        for index, output in enumerate(self.outputs):
            try:
                output.connect()
            except Exception:
                self._close_all(self.outputs[:index])
                raise

    def gather(self) -> list[MetricRecord]:
        """Collect records from all inputs, in input order."""
        records: list[MetricRecord] = []
        for plugin in self.inputs:
            try:
                records.extend(plugin.gather())
            except Exception:
                logger.exception("error gathering from %s", type(plugin).__name__)
        return records

    def flush(self, records: Sequence[MetricRecord]) -> FlushResult:
        """Write records to each output in turn."""
        result = FlushResult()
        for index, output in enumerate(self.outputs):
            try:
                result.sent[index] = output.write(records)
            except Exception as e:
                logger.exception("error writing to %s", type(output).__name__)
                result.errors[index] = e
        return result

    def run_once(self) -> FlushResult:
        """Gather from all inputs and flush to all outputs."""
        records = self.gather()
        logger.debug("gathered %d records", len(records))
        return self.flush(records)

    def close(self) -> None:
        """Close every output; a failing close is logged and skipped."""
        self._close_all(self.outputs)

    def _close_all(self, outputs: Sequence[OutputPort]) -> None:
        for output in outputs:
            try:
                output.close()
            except Exception:
                logger.exception("error closing %s", type(output).__name__)
