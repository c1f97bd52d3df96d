"""Process-wide default capture logger.

The default logger and its store are created on first use and shared by
every caller afterwards. The store itself opens its connection lazily.
"""

import threading

from capturelog.adapters.storage.sqlite_logs import DEFAULT_DB_PATH, SQLiteLogStore
from capturelog.core.logger import CaptureLogger

_lock = threading.Lock()
_default: CaptureLogger | None = None


def get_logger() -> CaptureLogger:
    """Return the process-wide CaptureLogger backed by DEFAULT_DB_PATH."""
    global _default
    if _default is None:
        with _lock:
            if _default is None:
                _default = CaptureLogger(SQLiteLogStore(DEFAULT_DB_PATH))
    return _default


async def reset_logger() -> None:
    """Close and forget the default logger's store (tests and shutdown)."""
    global _default
    with _lock:
        logger, _default = _default, None
    if logger is None:
        return
    await logger.flush()
    if isinstance(logger.store, SQLiteLogStore):
        await logger.store.close()
