"""Connection management for the SQLite log store."""

import asyncio
import contextlib
import sqlite3
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager

import aiosqlite

from capturelog.core.errors import StoreOpenError


class SQLiteConnectionManager:
    """Owns the single aiosqlite connection of a store.

    The connection is opened lazily on first use and then reused until
    close(). Concurrent callers of initialize() share one in-flight opening
    task, so the database is opened and migrated exactly once.

    Migrations are applied in order: the schema version is the number of
    migrations, tracked in ``PRAGMA user_version``. Opening a database whose
    version is already current runs none of them.
    """

    def __init__(self, db_path: str, migrations: Sequence[str]) -> None:
        self._db_path = db_path
        self._migrations = tuple(migrations)
        self._conn: aiosqlite.Connection | None = None
        self._init_task: asyncio.Task[aiosqlite.Connection] | None = None
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None

    @property
    def db_path(self) -> str:
        return self._db_path

    @property
    def schema_version(self) -> int:
        return len(self._migrations)

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def _get_lock(self) -> asyncio.Lock:
        """Get the operation lock for the running loop (created lazily)."""
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    async def initialize(self) -> aiosqlite.Connection:
        """Open and migrate the database once, returning the shared connection.

        Raises:
            StoreOpenError: If the database cannot be opened or upgraded.
        """
        if self._conn is not None:
            return self._conn
        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._open())
        return await asyncio.shield(self._init_task)

    async def _open(self) -> aiosqlite.Connection:
        conn: aiosqlite.Connection | None = None
        try:
            conn = await aiosqlite.connect(self._db_path)
            if self._db_path != ":memory:":
                await conn.execute("PRAGMA journal_mode=WAL")
            await self._upgrade(conn)
        except (sqlite3.Error, OSError, ValueError) as exc:
            self._init_task = None
            if conn is not None:
                with contextlib.suppress(sqlite3.Error, ValueError):
                    await conn.close()
            raise StoreOpenError(
                f"Failed to open log store at {self._db_path!r}"
            ) from exc
        self._conn = conn
        return conn

    async def _upgrade(self, conn: aiosqlite.Connection) -> None:
        """Apply every migration newer than the stored schema version."""
        async with conn.execute("PRAGMA user_version") as cursor:
            row = await cursor.fetchone()
        current = row[0] if row else 0
        for version, script in enumerate(self._migrations, start=1):
            if version <= current:
                continue
            # Each step commits together with its version bump.
            await conn.executescript(
                f"BEGIN;\n{script}\nPRAGMA user_version = {version};\nCOMMIT;"
            )

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Run a write transaction: commit on success, roll back on error."""
        conn = await self.initialize()
        async with self._get_lock():
            try:
                yield conn
                await conn.commit()
            except BaseException:
                with contextlib.suppress(sqlite3.Error, ValueError):
                    await conn.rollback()
                raise

    @asynccontextmanager
    async def snapshot(self) -> AsyncIterator[aiosqlite.Connection]:
        """Give the connection to a reader, never interleaved with a write."""
        conn = await self.initialize()
        async with self._get_lock():
            yield conn

    async def close(self) -> None:
        """Close the connection. A later call to initialize() reopens it."""
        if self._init_task is not None and not self._init_task.done():
            with contextlib.suppress(StoreOpenError):
                await asyncio.shield(self._init_task)
        self._init_task = None
        if self._conn is not None:
            conn, self._conn = self._conn, None
            await conn.close()
