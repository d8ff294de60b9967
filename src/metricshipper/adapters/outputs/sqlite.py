"""SQLite output.

Stores one row per datum, dimensions as a JSON array of [name, value] pairs.
Each batch is written in its own transaction, so a failed batch leaves the
batches before it in place.

The exporter drives the synchronous methods, which use the standard sqlite3
module and are safe to call with or without a running event loop. Stored
datums can be read back asynchronously (aiosqlite) or synchronously.
"""

import calendar
import json
import sqlite3
import threading
from collections.abc import AsyncIterable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite

from metricshipper.core.config import ExportConfig
from metricshipper.core.dimensions import DEFAULT_MAX_DIMENSIONS
from metricshipper.core.errors import (
    BackendConnectionError,
    ExportError,
    TransportError,
)
from metricshipper.core.exporter import BatchExporter
from metricshipper.core.models import Datum, Dimension

DEFAULT_BATCH_SIZE = 500

_DATUMS_SCHEMA = """
CREATE TABLE IF NOT EXISTS datums (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    namespace TEXT NOT NULL,
    metric_name TEXT NOT NULL,
    timestamp REAL NOT NULL,
    value REAL NOT NULL,
    dimensions TEXT NOT NULL DEFAULT '[]'
);
CREATE INDEX IF NOT EXISTS idx_datums_timestamp ON datums(timestamp);
"""

_INSERT_DATUM = """
INSERT INTO datums (namespace, metric_name, timestamp, value, dimensions)
VALUES (?, ?, ?, ?, ?)
"""

_SELECT_DATUMS = """
SELECT namespace, metric_name, timestamp, value, dimensions
FROM datums WHERE timestamp > ? ORDER BY id
"""

_Row = tuple[str, str, float, float, str]


@dataclass(frozen=True)
class StoredDatum:
    """A datum read back from the database with its namespace."""

    namespace: str
    datum: Datum


def unix_time(value: datetime) -> float:
    """Seconds since the epoch; naive datetimes are read as UTC."""
    return calendar.timegm(value.utctimetuple()) + value.microsecond / 1_000_000


def _row(namespace: str, datum: Datum) -> _Row:
    dimensions = [[d.name, d.value] for d in datum.dimensions]
    return (
        namespace,
        datum.metric_name,
        unix_time(datum.timestamp),
        datum.value,
        json.dumps(dimensions),
    )


def _from_row(row: _Row) -> StoredDatum:
    namespace, metric_name, timestamp, value, dimensions = row
    return StoredDatum(
        namespace=namespace,
        datum=Datum(
            metric_name=metric_name,
            value=value,
            dimensions=tuple(Dimension(n, v) for n, v in json.loads(dimensions)),
            timestamp=datetime.fromtimestamp(timestamp, UTC),
        ),
    )


def map_sqlite_error(
    e: sqlite3.Error, db_path: str, connecting: bool = False
) -> ExportError:
    """Map a sqlite3 error onto the export error hierarchy."""
    if connecting:
        return BackendConnectionError(f"cannot open {db_path}: {e}")
    return TransportError(f"SQLite operation on {db_path} failed: {e}")


# @tra: Adapter.SQLiteOutput.ImplementsBatchTransportPort
class SQLiteTransport:
    """BatchTransportPort implementation writing datums to a SQLite file.

    Uses a short-lived connection per batch. In-memory databases are rejected
    since every batch and every read opens a new connection.
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = str(db_path)
        self._initialized = False
        self._lock = threading.Lock()

    def connect(self) -> None:
        """Create the database file and schema.

        Raises:
            BackendConnectionError: If the database cannot be opened.
        """
        if self._db_path == ":memory:":
            raise BackendConnectionError("SQLite output requires a file path")
        try:
            with self._lock:
                db = sqlite3.connect(self._db_path)
                try:
                    db.execute("PRAGMA journal_mode=WAL")
                    db.executescript(_DATUMS_SCHEMA)
                finally:
                    db.close()
        except sqlite3.Error as e:
            raise map_sqlite_error(e, self._db_path, connecting=True) from e
        self._initialized = True

    def send_batch(self, namespace: str, datums: Sequence[Datum]) -> None:
        """Insert one batch in a single transaction.

        Raises:
            TransportError: If the transport is not connected or the insert fails.
        """
        if not self._initialized:
            raise TransportError("SQLite transport is not connected")
        rows = [_row(namespace, d) for d in datums]
        try:
            db = sqlite3.connect(self._db_path)
            try:
                with db:
                    db.executemany(_INSERT_DATUM, rows)
            finally:
                db.close()
        except sqlite3.Error as e:
            raise map_sqlite_error(e, self._db_path) from e

    async def read(self, since: float = 0) -> AsyncIterable[StoredDatum]:
        """Yield stored datums with a timestamp after since, in insert order.

        Raises:
            TransportError: If the database cannot be read.
        """
        try:
            async with aiosqlite.connect(self._db_path) as db:
                async with db.execute(_SELECT_DATUMS, (since,)) as cursor:
                    async for row in cursor:
                        yield _from_row(row)
        except sqlite3.Error as e:
            raise map_sqlite_error(e, self._db_path) from e

    def read_sync(self, since: float = 0) -> list[StoredDatum]:
        """Synchronous version of read().

        Raises:
            TransportError: If the database cannot be read.
        """
        try:
            db = sqlite3.connect(self._db_path)
            try:
                rows = db.execute(_SELECT_DATUMS, (since,)).fetchall()
            finally:
                db.close()
        except sqlite3.Error as e:
            raise map_sqlite_error(e, self._db_path) from e
        return [_from_row(row) for row in rows]

    def close(self) -> None:
        """Nothing is held open between batches."""
        self._initialized = False


def sqlite_output(
    db_path: str,
    namespace: str = "metricshipper",
    max_batch_size: int = DEFAULT_BATCH_SIZE,
    max_dimensions: int = DEFAULT_MAX_DIMENSIONS,
) -> BatchExporter:
    """Build a SQLite output from configuration options."""
    config = ExportConfig(
        max_batch_size=max_batch_size,
        max_dimensions=max_dimensions,
        namespace=namespace,
    )
    return BatchExporter(SQLiteTransport(db_path), config)
