"""Normalization of captured events into LogRecord drafts."""

import time
import traceback
from collections.abc import Mapping
from typing import Any

from capturelog.core.models import LogLevel, LogRecord, Metadata


def _safe_str(value: Any) -> str:
    """Convert any value to a string without raising."""
    if value is None:
        return ""
    try:
        return str(value)
    except Exception:
        try:
            return repr(value)
        except Exception:
            return f"<unprintable {type(value).__name__}>"


def _coerce_level(level: LogLevel | str) -> LogLevel:
    if isinstance(level, LogLevel):
        return level
    name = _safe_str(level).upper()
    if name == "WARNING":
        return LogLevel.WARN
    try:
        return LogLevel(name)
    except ValueError:
        return LogLevel.INFO


def _format_traceback(exc: BaseException) -> str | None:
    if exc.__traceback__ is None:
        return None
    try:
        return "".join(traceback.format_exception(exc))
    except Exception:
        return None


def _describe(primary: Any) -> tuple[str, str | None]:
    """Split a primary value into message and optional stack trace.

    Exceptions use their text and traceback. Other error-like objects
    (a string ``message`` plus a ``stack`` attribute) are read the same way.
    """
    if isinstance(primary, BaseException):
        return _safe_str(primary), _format_traceback(primary)
    message = getattr(primary, "message", None)
    if isinstance(message, str) and hasattr(primary, "stack"):
        stack = getattr(primary, "stack", None)
        return message, stack if isinstance(stack, str) and stack else None
    return _safe_str(primary), None


def normalize(
    level: LogLevel | str,
    primary: Any,
    *auxiliary: Any,
    context: Mapping[str, Any] | None = None,
) -> LogRecord:
    """Build a LogRecord draft (no id) from a captured event.

    Args:
        level: Severity, as a LogLevel or its name.
        primary: The main value: an exception, an error-like object or
            anything convertible to a string.
        *auxiliary: Extra values attached verbatim as list metadata.
        context: Key/value metadata. Auxiliary values given alongside it
            are stored under its "args" key.

    Returns:
        LogRecord stamped with the current time in milliseconds.
    """
    try:
        message, stack_trace = _describe(primary)
    except Exception:
        message, stack_trace = _safe_str(primary), None

    metadata: Metadata | None = None
    if context is not None:
        try:
            metadata = dict(context)
        except Exception:
            metadata = [context, *auxiliary]
        else:
            if auxiliary:
                metadata["args"] = list(auxiliary)
    elif auxiliary:
        metadata = list(auxiliary)

    return LogRecord(
        timestamp=int(time.time() * 1000),
        level=_coerce_level(level),
        message=message,
        stack_trace=stack_trace,
        metadata=metadata,
    )
