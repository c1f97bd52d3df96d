"""capturelog - capture logs and failures into an embedded store.

Public API re-exports for convenient imports.
"""

from capturelog.adapters.boundary import ErrorBoundary
from capturelog.adapters.logging import CaptureHandler, install, uninstall
from capturelog.adapters.storage import (
    DEFAULT_DB_PATH,
    SCHEMA_VERSION,
    InMemoryLogStore,
    SQLiteLogStore,
)
from capturelog.core.capture import normalize
from capturelog.core.errors import (
    CaptureError,
    CaptureReportingFailure,
    StoreError,
    StoreOpenError,
    StoreReadError,
    StoreWriteError,
)
from capturelog.core.hub import Subscription, SubscriptionHub
from capturelog.core.logger import CaptureLogger
from capturelog.core.models import LogLevel, LogRecord
from capturelog.core.ports import LogStorePort, Observer
from capturelog.core.reporting import FailureReporter
from capturelog.default import get_logger

__all__ = [
    "DEFAULT_DB_PATH",
    "SCHEMA_VERSION",
    "CaptureError",
    "CaptureHandler",
    "CaptureLogger",
    "CaptureReportingFailure",
    "ErrorBoundary",
    "FailureReporter",
    "InMemoryLogStore",
    "LogLevel",
    "LogRecord",
    "LogStorePort",
    "Observer",
    "SQLiteLogStore",
    "StoreError",
    "StoreOpenError",
    "StoreReadError",
    "StoreWriteError",
    "Subscription",
    "SubscriptionHub",
    "get_logger",
    "install",
    "normalize",
    "uninstall",
]
