"""Shared fakes for capturelog tests."""

from capturelog.adapters.storage.in_memory import InMemoryLogStore
from capturelog.core.errors import (
    CaptureReportingFailure,
    StoreReadError,
    StoreWriteError,
)
from capturelog.core.models import LogRecord
from capturelog.core.reporting import FailureReporter


class RecordingReporter(FailureReporter):
    """FailureReporter that keeps failures instead of logging them."""

    def __init__(self) -> None:
        super().__init__()
        self.failures: list[CaptureReportingFailure] = []

    def report(self, failure: CaptureReportingFailure) -> None:
        self.reported += 1
        self.failures.append(failure)

    @property
    def stages(self) -> list[str]:
        return [failure.stage for failure in self.failures]


class FlakyLogStore(InMemoryLogStore):
    """In-memory store whose operations can be made to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_insert = False
        self.fail_scan = False
        self.fail_clear = False

    async def insert(self, record: LogRecord) -> int:
        if self.fail_insert:
            raise StoreWriteError("insert refused")
        return await super().insert(record)

    async def scan_all(self) -> list[LogRecord]:
        if self.fail_scan:
            raise StoreReadError("scan refused")
        return await super().scan_all()

    async def clear(self) -> None:
        if self.fail_clear:
            raise StoreWriteError("clear refused")
        await super().clear()


class ObserverSpy:
    """Observer that records every delivered log set."""

    def __init__(self) -> None:
        self.deliveries: list[list[LogRecord]] = []

    def __call__(self, records: list[LogRecord]) -> None:
        self.deliveries.append(records)

    @property
    def last(self) -> list[LogRecord]:
        return self.deliveries[-1]
