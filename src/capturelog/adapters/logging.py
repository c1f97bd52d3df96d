"""Python logging handler adapter for capturelog.

This adapter intercepts records emitted through the standard library
logging module and hands them to a CaptureLogger. Other handlers on the
same logger keep emitting unchanged, so visible output is preserved. When
the handler is the only one a record meets, the record still goes to
logging.lastResort, as it would without capture.
"""

import logging
import traceback
from contextvars import ContextVar
from dataclasses import replace
from typing import Any

from capturelog.core.capture import normalize
from capturelog.core.logger import CaptureLogger
from capturelog.core.models import LogLevel, LogRecord

# Standard LogRecord attributes that should not be treated as extra fields
_STANDARD_LOGRECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)

# Loggers used while persisting a capture; capturing them would recurse.
_IGNORED_LOGGERS = ("capturelog", "aiosqlite", "asyncio")

# Set while a record is being handed to the capture path.
_capturing: ContextVar[bool] = ContextVar("capturelog_capturing", default=False)


def _map_level(levelno: int) -> LogLevel:
    if levelno >= logging.ERROR:
        return LogLevel.ERROR
    if levelno >= logging.WARNING:
        return LogLevel.WARN
    return LogLevel.INFO


class CaptureHandler(logging.Handler):
    """Logging handler that captures log records into a CaptureLogger.

    Example:
        ```python
        capture = CaptureLogger(SQLiteLogStore())
        install(capture)
        logging.getLogger("app").error("payment failed", extra={"order": 42})
        ```
    """

    def __init__(
        self,
        capture_logger: CaptureLogger,
        level: int = logging.NOTSET,
        ignored_loggers: tuple[str, ...] = _IGNORED_LOGGERS,
    ) -> None:
        """Initialize the handler with the logger that persists captures.

        Args:
            capture_logger: Destination of captured records.
            level: Minimum level handled, as for any logging.Handler.
            ignored_loggers: Logger names (and their children) never captured.
        """
        super().__init__(level)
        self._capture_logger = capture_logger
        self._ignored_loggers = ignored_loggers
        self.captures_warnings = False

    def _is_ignored(self, name: str) -> bool:
        return any(
            name == ignored or name.startswith(f"{ignored}.")
            for ignored in self._ignored_loggers
        )

    @property
    def capture_logger(self) -> CaptureLogger:
        return self._capture_logger

    def handle(self, record: logging.LogRecord) -> bool:
        # Python only falls back to lastResort when a record meets no handler.
        if not _reaches_visible_handler(record.name):
            _forward_to_last_resort(record)
        return super().handle(record)

    def emit(self, record: logging.LogRecord) -> None:
        """Capture a log record.

        Args:
            record: The log record to capture.
        """
        if _capturing.get() or self._is_ignored(record.name):
            return
        token = _capturing.set(True)
        try:
            self._capture_logger.submit(self.to_draft(record))
        except Exception:
            self.handleError(record)
        finally:
            _capturing.reset(token)

    def to_draft(self, record: logging.LogRecord) -> LogRecord:
        """Convert a logging record into a LogRecord draft."""
        primary: Any
        if isinstance(record.msg, BaseException) and not record.args:
            primary = record.msg
        else:
            try:
                primary = record.getMessage()
            except Exception:
                primary = record.msg

        # Extra attributes passed via the logging call become metadata
        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_LOGRECORD_ATTRS and not key.startswith("_")
        }
        draft = normalize(_map_level(record.levelno), primary, context=extras or None)

        if record.exc_info and record.exc_info[1] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            draft = replace(
                draft,
                stack_trace="".join(
                    traceback.format_exception(exc_type, exc_value, exc_tb)
                ),
            )
        elif record.stack_info:
            draft = replace(draft, stack_trace=record.stack_info)
        return draft


def _propagation_chain(logger: logging.Logger) -> list[logging.Logger]:
    """Loggers whose handlers see records logged on *logger*, nearest first."""
    chain = [logger]
    while logger.propagate and logger.parent is not None:
        logger = logger.parent
        chain.append(logger)
    return chain


def _reaches_visible_handler(name: str) -> bool:
    return any(
        not isinstance(handler, CaptureHandler)
        for logger in _propagation_chain(logging.getLogger(name))
        for handler in logger.handlers
    )


def _forward_to_last_resort(record: logging.LogRecord) -> None:
    last_resort = logging.lastResort
    if last_resort is not None and record.levelno >= last_resort.level:
        last_resort.handle(record)


def _installed_above(target: logging.Logger) -> CaptureHandler | None:
    for logger in _propagation_chain(target):
        for handler in logger.handlers:
            if isinstance(handler, CaptureHandler):
                return handler
    return None


def _installed_below(
    target: logging.Logger,
) -> list[tuple[logging.Logger, CaptureHandler]]:
    found: list[tuple[logging.Logger, CaptureHandler]] = []
    for logger in list(logging.Logger.manager.loggerDict.values()):
        if not isinstance(logger, logging.Logger) or logger is target:
            continue
        if target not in _propagation_chain(logger):
            continue
        found.extend(
            (logger, handler)
            for handler in logger.handlers
            if isinstance(handler, CaptureHandler)
        )
    return found


def _check_binding(handler: CaptureHandler, capture_logger: CaptureLogger) -> None:
    if handler.capture_logger is not capture_logger:
        raise RuntimeError(
            "A CaptureHandler bound to another CaptureLogger already sees this "
            "logger's records; uninstall it first"
        )


def install(
    capture_logger: CaptureLogger,
    target: logging.Logger | None = None,
    *,
    level: int = logging.NOTSET,
    capture_warnings: bool = False,
) -> CaptureHandler:
    """Attach a CaptureHandler to a logger (the root logger by default).

    Each record is captured at most once. If a handler already sees the
    target's records (on the target itself or on an ancestor it propagates
    to) that handler is returned. Handlers on descendants that propagate
    into the target are replaced by the new one. The logger's own level
    still decides which records reach the handler.

    Args:
        capture_logger: Destination of captured records.
        target: Logger to intercept. Defaults to the root logger.
        level: Minimum level captured by the handler.
        capture_warnings: Also route the warnings module through logging.

    Raises:
        RuntimeError: If a handler for a different CaptureLogger already
            covers the target or one of its descendants.
    """
    target = target if target is not None else logging.getLogger()
    handler = _installed_above(target)
    if handler is not None:
        _check_binding(handler, capture_logger)
    else:
        replaced = _installed_below(target)
        for _, old in replaced:
            _check_binding(old, capture_logger)
        handler = CaptureHandler(capture_logger, level=level)
        for owner, old in replaced:
            owner.removeHandler(old)
            old.close()
            handler.captures_warnings |= old.captures_warnings
        target.addHandler(handler)
    if capture_warnings and not handler.captures_warnings:
        logging.captureWarnings(True)
        handler.captures_warnings = True
    return handler


def uninstall(target: logging.Logger | None = None) -> bool:
    """Detach every CaptureHandler from a logger.

    Only handlers attached to the target itself are removed, not those of
    its ancestors.

    Returns:
        True if a handler was removed.
    """
    target = target if target is not None else logging.getLogger()
    handlers = [h for h in target.handlers if isinstance(h, CaptureHandler)]
    for handler in handlers:
        target.removeHandler(handler)
        handler.close()
        if handler.captures_warnings:
            logging.captureWarnings(False)
    return bool(handlers)


def is_installed(target: logging.Logger | None = None) -> bool:
    """Tell whether records logged on a logger reach a CaptureHandler.

    Args:
        target: Logger to check. Defaults to the root logger.
    """
    target = target if target is not None else logging.getLogger()
    return _installed_above(target) is not None
