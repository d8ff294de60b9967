"""
Exceptions raised by the export engine and its adapters.

Unsupported field values and dimensions beyond the cap are dropped silently
and never surface here.
"""


class ExportError(Exception):
    """Base error for metricshipper."""

    pass


class ConfigurationError(ExportError, ValueError):
    """Invalid limits or plugin settings, rejected before any write."""

    pass


class BackendConnectionError(ExportError, ConnectionError):
    """Establishing the transport session failed."""

    pass


class TransportError(ExportError):
    """A send to the backend failed.

    Attributes:
        partitions_sent: Partitions (or routed records) delivered by the
            same write before the failure. They are not rolled back.
    """

    def __init__(self, message: str, partitions_sent: int = 0) -> None:
        super().__init__(message)
        self.partitions_sent = partitions_sent


class ExporterStateError(ExportError):
    """An exporter was used outside its lifecycle (e.g., write before connect)."""

    pass


class InputError(ExportError):
    """An input failed to run its command or parse its output."""

    pass
