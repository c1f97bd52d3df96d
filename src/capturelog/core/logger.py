"""Manual capture API and the single persist-and-notify write path."""

import asyncio
import concurrent.futures
from collections.abc import Mapping
from typing import Any

from capturelog.core.capture import normalize
from capturelog.core.errors import CaptureReportingFailure
from capturelog.core.hub import Subscription, SubscriptionHub
from capturelog.core.models import LogLevel, LogRecord
from capturelog.core.ports import LogStorePort, Observer
from capturelog.core.reporting import FailureReporter


class CaptureLogger:
    """Captures events into a store and keeps observers up to date.

    Every producer (manual calls, the logging handler, error boundaries)
    ends up in _persist(): insert the record, then schedule a notification.
    Failures while capturing are reported through the FailureReporter and
    never raised to the producer.

    Example:
        ```python
        logger = CaptureLogger(SQLiteLogStore("logs.db"))
        await logger.info("user signed in", {"user": "admin"})
        try:
            risky()
        except Exception as exc:
            await logger.error(exc)
        ```
    """

    def __init__(
        self,
        store: LogStorePort,
        hub: SubscriptionHub | None = None,
        reporter: FailureReporter | None = None,
    ) -> None:
        if reporter is None:
            reporter = hub.reporter if hub is not None else FailureReporter()
        self._store = store
        self._reporter = reporter
        self._hub = hub or SubscriptionHub(store, reporter)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._pending: set[asyncio.Task[int | None]] = set()
        self._remote: set[concurrent.futures.Future[int | None]] = set()

    @property
    def store(self) -> LogStorePort:
        return self._store

    @property
    def hub(self) -> SubscriptionHub:
        return self._hub

    async def initialize(self) -> None:
        """Open the store eagerly (otherwise it opens on first capture)."""
        self._loop = asyncio.get_running_loop()
        await self._store.initialize()

    # --- Manual API ---

    async def log(
        self,
        level: LogLevel | str,
        primary: Any,
        *auxiliary: Any,
        context: Mapping[str, Any] | None = None,
    ) -> int | None:
        """Capture an event and return its id, or None if it was dropped."""
        draft = normalize(level, primary, *auxiliary, context=context)
        return await self._persist(draft)

    async def info(
        self, message: Any, metadata: Mapping[str, Any] | None = None
    ) -> int | None:
        return await self.log(LogLevel.INFO, message, context=metadata)

    async def warn(
        self, message: Any, metadata: Mapping[str, Any] | None = None
    ) -> int | None:
        return await self.log(LogLevel.WARN, message, context=metadata)

    async def error(
        self, error: BaseException | Any, metadata: Mapping[str, Any] | None = None
    ) -> int | None:
        """Capture an error. Exceptions keep their traceback as stack_trace."""
        return await self.log(LogLevel.ERROR, error, context=metadata)

    def capture_nowait(
        self,
        level: LogLevel | str,
        primary: Any,
        *auxiliary: Any,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        """Capture an event from synchronous code without waiting for storage."""
        self.submit(normalize(level, primary, *auxiliary, context=context))

    def submit(self, draft: LogRecord) -> None:
        """Schedule persistence of an already normalized record.

        Runs as a task on the current event loop, or on the loop this logger
        was last used from when called from another thread. Without any
        running loop the write is run to completion before returning.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is not None:
            task = loop.create_task(self._persist(draft))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
            return
        bound = self._loop
        if bound is not None and bound.is_running() and not bound.is_closed():
            future = asyncio.run_coroutine_threadsafe(self._persist(draft), bound)
            self._remote.add(future)
            future.add_done_callback(self._remote.discard)
            return
        asyncio.run(self._persist(draft, wait_for_observers=True))

    # --- History and observers ---

    async def history(self) -> list[LogRecord]:
        """Return every stored record, newest first."""
        return await self._store.scan_all()

    async def clear(self) -> None:
        """Remove every record and notify observers.

        Raises:
            StoreWriteError: If the store cannot be cleared.
        """
        await self._store.clear()
        self._hub.schedule_notify()

    def subscribe(self, observer: Observer) -> Subscription:
        return self._hub.subscribe(observer)

    async def flush(self) -> None:
        """Wait for scheduled captures and observer deliveries to finish.

        Includes captures submitted from other threads onto this loop.
        """
        while self._pending or self._remote:
            waiting = [
                *self._pending,
                *(asyncio.wrap_future(future) for future in list(self._remote)),
            ]
            await asyncio.gather(*waiting, return_exceptions=True)
        await self._hub.flush()

    # --- Write path ---

    async def _persist(
        self, draft: LogRecord, *, wait_for_observers: bool = False
    ) -> int | None:
        if self._loop is None or self._loop.is_closed():
            self._loop = asyncio.get_running_loop()
        try:
            record_id = await self._store.insert(draft)
        except Exception as exc:  # noqa: BLE001 - capture must never crash the caller
            failure = CaptureReportingFailure("persist", "Failed to persist log")
            failure.__cause__ = exc
            self._reporter.report(failure)
            return None
        if wait_for_observers:
            await self._hub.notify_all()
        else:
            self._hub.schedule_notify()
        return record_id
