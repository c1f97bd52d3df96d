"""Shared test fixtures for all test modules."""

import logging
from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest

from capturelog.adapters.storage.sqlite_logs import SQLiteLogStore
from capturelog.core.logger import CaptureLogger
from tests.helpers import FlakyLogStore, ObserverSpy, RecordingReporter


@pytest.fixture
def log_db_path(tmp_path: Path) -> str:
    """Provide a temporary database path for log store tests."""
    return str(tmp_path / "logs.db")


@pytest.fixture
async def sqlite_store(log_db_path: str) -> AsyncGenerator[SQLiteLogStore, None]:
    """File-backed SQLite store, closed after the test."""
    store = SQLiteLogStore(log_db_path)
    yield store
    await store.close()


@pytest.fixture
async def memory_sqlite_store() -> AsyncGenerator[SQLiteLogStore, None]:
    """In-memory SQLite store with proper cleanup."""
    store = SQLiteLogStore(":memory:")
    yield store
    await store.close()


@pytest.fixture
def flaky_store() -> FlakyLogStore:
    return FlakyLogStore()


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def observer() -> ObserverSpy:
    return ObserverSpy()


@pytest.fixture
def capture_logger(
    flaky_store: FlakyLogStore, reporter: RecordingReporter
) -> CaptureLogger:
    """CaptureLogger over an in-memory store that can be made to fail."""
    return CaptureLogger(flaky_store, reporter=reporter)


@pytest.fixture
def app_logger() -> Generator[logging.Logger, None, None]:
    """Isolated application logger that does not reach the root logger."""
    logger = logging.getLogger("tests.app")
    logger.handlers.clear()
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    yield logger
    logger.handlers.clear()
