"""Port interfaces for the capture layer.

The core depends only on these protocols; storage adapters such as
SQLiteLogStore and InMemoryLogStore implement them.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

from capturelog.core.models import LogRecord

# Receives the full newest-first log set. May be sync or a coroutine function.
Observer = Callable[[list[LogRecord]], Awaitable[Any] | Any]


@runtime_checkable
class LogStorePort(Protocol):
    """Port for ordered log persistence.

    Implementations assign ids on insert and return records newest first.
    """

    async def initialize(self) -> None:
        """Open the store once; later calls return immediately."""
        ...

    async def insert(self, record: LogRecord) -> int:
        """Persist a record without an id and return the assigned id."""
        ...

    async def scan_all(self) -> list[LogRecord]:
        """Return every record ordered by timestamp descending."""
        ...

    async def clear(self) -> None:
        """Remove every record."""
        ...
