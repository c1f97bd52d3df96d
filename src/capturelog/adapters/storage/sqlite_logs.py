"""SQLite storage adapter for captured logs."""

import json
import sqlite3
from typing import Any

from capturelog.adapters.storage.sqlite_base import SQLiteConnectionManager
from capturelog.core.errors import StoreReadError, StoreWriteError
from capturelog.core.models import LogLevel, LogRecord, Metadata

DEFAULT_DB_PATH = "capturelog.db"

# Ordered schema migrations; SCHEMA_VERSION is the number of entries.
_MIGRATIONS = (
    """
    CREATE TABLE IF NOT EXISTS logs (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        timestamp INTEGER NOT NULL,
        level TEXT NOT NULL,
        message TEXT NOT NULL,
        stack_trace TEXT,
        metadata TEXT
    );
    CREATE INDEX IF NOT EXISTS idx_logs_timestamp ON logs(timestamp);
    CREATE INDEX IF NOT EXISTS idx_logs_level ON logs(level);
    """,
)

SCHEMA_VERSION = len(_MIGRATIONS)

_INSERT_LOG = """
INSERT INTO logs (timestamp, level, message, stack_trace, metadata)
VALUES (?, ?, ?, ?, ?)
"""

_SELECT_LOGS = """
SELECT id, timestamp, level, message, stack_trace, metadata
FROM logs
ORDER BY timestamp DESC, id DESC
"""

_COUNT_LOGS = """
SELECT COUNT(*) FROM logs
"""

_CLEAR_LOGS = """
DELETE FROM logs
"""


def _dump_metadata(metadata: Metadata | None) -> str | None:
    """Serialize metadata to JSON; values JSON cannot express become strings."""
    if metadata is None:
        return None
    return json.dumps(metadata, default=str)


def _safe_json_loads(data: str | None) -> Any:
    """Parse a metadata column, keeping undecodable text as a one-item list."""
    if data is None:
        return None
    try:
        return json.loads(data)
    except json.JSONDecodeError:
        return [data]


class SQLiteLogStore:
    """SQLite implementation of LogStorePort.

    Keeps one aiosqlite connection for the life of the store. Ids come from
    an AUTOINCREMENT primary key, so they are never reused, even after
    clear(). Records are read back newest first through the timestamp index,
    with ties broken by id.

    Example:
        ```python
        store = SQLiteLogStore("logs.db")
        record_id = await store.insert(normalize(LogLevel.INFO, "started"))
        records = await store.scan_all()
        ```
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH) -> None:
        self._manager = SQLiteConnectionManager(db_path, _MIGRATIONS)

    @property
    def db_path(self) -> str:
        return self._manager.db_path

    async def initialize(self) -> None:
        """Open the database and create or upgrade the schema once.

        Raises:
            StoreOpenError: If the database cannot be opened or upgraded.
        """
        await self._manager.initialize()

    def _to_row(self, record: LogRecord) -> tuple[Any, ...]:
        return (
            record.timestamp,
            LogLevel(record.level).value,
            record.message,
            record.stack_trace,
            _dump_metadata(record.metadata),
        )

    def _from_row(self, row: sqlite3.Row | tuple[Any, ...]) -> LogRecord:
        return LogRecord(
            id=row[0],
            timestamp=row[1],
            level=LogLevel(row[2]),
            message=row[3],
            stack_trace=row[4],
            metadata=_safe_json_loads(row[5]),
        )

    async def insert(self, record: LogRecord) -> int:
        """Persist a record and return its assigned id.

        Any id already set on the record is ignored.

        Raises:
            StoreOpenError: If the store cannot be opened.
            StoreWriteError: If the record cannot be written.
        """
        try:
            row = self._to_row(record)
        except (TypeError, ValueError) as exc:
            raise StoreWriteError("Log record cannot be serialized") from exc
        try:
            async with self._manager.transaction() as db:
                cursor = await db.execute(_INSERT_LOG, row)
                record_id = cursor.lastrowid
        except (sqlite3.Error, ValueError) as exc:
            raise StoreWriteError("Failed to insert log record") from exc
        if record_id is None:
            raise StoreWriteError("Store did not assign an id")
        return record_id

    async def scan_all(self) -> list[LogRecord]:
        """Return every record, newest first.

        Raises:
            StoreOpenError: If the store cannot be opened.
            StoreReadError: If the records cannot be read.
        """
        try:
            async with self._manager.snapshot() as db:
                async with db.execute(_SELECT_LOGS) as cursor:
                    return [self._from_row(row) async for row in cursor]
        except (sqlite3.Error, ValueError) as exc:
            raise StoreReadError("Failed to read log records") from exc

    async def count(self) -> int:
        """Return total number of records in the store."""
        try:
            async with self._manager.snapshot() as db:
                async with db.execute(_COUNT_LOGS) as cursor:
                    row = await cursor.fetchone()
                    return row[0] if row else 0
        except (sqlite3.Error, ValueError) as exc:
            raise StoreReadError("Failed to count log records") from exc

    async def clear(self) -> None:
        """Remove every record in one transaction.

        Raises:
            StoreOpenError: If the store cannot be opened.
            StoreWriteError: If the records cannot be deleted.
        """
        try:
            async with self._manager.transaction() as db:
                await db.execute(_CLEAR_LOGS)
        except (sqlite3.Error, ValueError) as exc:
            raise StoreWriteError("Failed to clear log records") from exc

    async def close(self) -> None:
        """Close the connection (tests and shutdown only)."""
        await self._manager.close()
