"""Publish/subscribe fan-out of the stored log set."""

import asyncio
import inspect
from collections.abc import Coroutine
from types import TracebackType
from typing import Any

from capturelog.core.errors import CaptureReportingFailure
from capturelog.core.models import LogRecord
from capturelog.core.ports import LogStorePort, Observer
from capturelog.core.reporting import FailureReporter


class Subscription:
    """Handle for a registered observer.

    Calling the handle (or leaving it as a context manager) unsubscribes.
    """

    def __init__(self, hub: "SubscriptionHub", observer: Observer) -> None:
        self._hub = hub
        self.observer = observer

    @property
    def active(self) -> bool:
        return self._hub.is_subscribed(self)

    def unsubscribe(self) -> None:
        self._hub.unsubscribe(self)

    def __call__(self) -> None:
        self.unsubscribe()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.unsubscribe()


class SubscriptionHub:
    """Keeps observers in sync with the contents of a store.

    Every delivery is a fresh scan of the store, so observers always receive
    the full newest-first set rather than incremental changes. Scan failures
    and observer exceptions go to the FailureReporter and never reach the
    code that triggered the notification.

    Example:
        ```python
        hub = SubscriptionHub(store)
        subscription = hub.subscribe(lambda records: print(len(records)))
        await store.insert(draft)
        await hub.notify_all()
        subscription.unsubscribe()
        ```
    """

    def __init__(
        self, store: LogStorePort, reporter: FailureReporter | None = None
    ) -> None:
        self._store = store
        self._reporter = reporter or FailureReporter()
        # Insertion-ordered set of live subscriptions.
        self._subscriptions: dict[Subscription, None] = {}
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def reporter(self) -> FailureReporter:
        return self._reporter

    @property
    def observer_count(self) -> int:
        return len(self._subscriptions)

    def is_subscribed(self, subscription: Subscription) -> bool:
        return subscription in self._subscriptions

    def subscribe(self, observer: Observer) -> Subscription:
        """Register an observer and schedule delivery of the current log set.

        Must be called while an event loop is running; the first delivery
        happens asynchronously, even if the store never changes afterwards.
        """
        subscription = Subscription(self, observer)
        self._subscriptions[subscription] = None
        self._spawn(self._deliver_current(subscription))
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove an observer. No-op if it is already removed."""
        self._subscriptions.pop(subscription, None)

    async def notify_all(self) -> None:
        """Re-read the store and deliver the result to every observer."""
        records = await self._scan()
        if records is None:
            return
        for subscription in list(self._subscriptions):
            await self._deliver(subscription, records)

    def schedule_notify(self) -> asyncio.Task[None]:
        """Run notify_all() in the background and return its task."""
        return self._spawn(self.notify_all())

    async def flush(self) -> None:
        """Wait until every scheduled delivery has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _deliver_current(self, subscription: Subscription) -> None:
        records = await self._scan()
        # Skip if the observer went away before the scan finished.
        if records is not None and self.is_subscribed(subscription):
            await self._deliver(subscription, records)

    async def _scan(self) -> list[LogRecord] | None:
        try:
            return await self._store.scan_all()
        except Exception as exc:  # noqa: BLE001 - notification is best-effort
            self._report("notify", "Failed to re-read logs for observers", exc)
            return None

    async def _deliver(
        self, subscription: Subscription, records: list[LogRecord]
    ) -> None:
        try:
            result = subscription.observer(list(records))
            if inspect.isawaitable(result):
                await result
        except Exception as exc:  # noqa: BLE001 - one observer must not starve others
            self._report("observer", "Observer raised while receiving logs", exc)

    def _report(self, stage: str, message: str, exc: Exception) -> None:
        failure = CaptureReportingFailure(stage, message)
        failure.__cause__ = exc
        self._reporter.report(failure)
