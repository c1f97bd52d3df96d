"""In-memory storage adapter for captured logs."""

import itertools
from dataclasses import replace

from capturelog.core.models import LogRecord


class InMemoryLogStore:
    """In-memory implementation of LogStorePort.

    Stores records in a dict keyed by id. Suitable for testing and for
    processes where persistence across restarts is not required. Ids keep
    counting up after clear(), as they do in the SQLite store.
    """

    def __init__(self) -> None:
        self._records: dict[int, LogRecord] = {}
        self._ids = itertools.count(1)
        self.initialized = False

    async def initialize(self) -> None:
        self.initialized = True

    async def insert(self, record: LogRecord) -> int:
        """Store a record and return its assigned id."""
        await self.initialize()
        record_id = next(self._ids)
        self._records[record_id] = replace(record, id=record_id)
        return record_id

    async def scan_all(self) -> list[LogRecord]:
        """Return every record ordered by timestamp descending, then id."""
        await self.initialize()
        return sorted(
            self._records.values(),
            key=lambda r: (r.timestamp, r.id),
            reverse=True,
        )

    async def count(self) -> int:
        return len(self._records)

    async def clear(self) -> None:
        """Remove every record."""
        await self.initialize()
        self._records.clear()
