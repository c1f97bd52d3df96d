"""Storage adapters implementing LogStorePort."""

from capturelog.adapters.storage.in_memory import InMemoryLogStore
from capturelog.adapters.storage.sqlite_base import SQLiteConnectionManager
from capturelog.adapters.storage.sqlite_logs import (
    DEFAULT_DB_PATH,
    SCHEMA_VERSION,
    SQLiteLogStore,
)

__all__ = [
    "DEFAULT_DB_PATH",
    "SCHEMA_VERSION",
    "InMemoryLogStore",
    "SQLiteConnectionManager",
    "SQLiteLogStore",
]
