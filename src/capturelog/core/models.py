"""Core domain models for captured log data."""

from dataclasses import asdict, dataclass, replace
from enum import StrEnum
from typing import Any

# Auxiliary values passed alongside a message, or a free-form key/value map.
Metadata = list[Any] | dict[str, Any]


class LogLevel(StrEnum):
    """Severity of a captured event."""

    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


@dataclass(frozen=True)
class LogRecord:
    """A captured log event.

    Attributes:
        timestamp: Milliseconds since the epoch, stamped at capture time.
        level: Severity of the event.
        message: The log message. Always present, possibly empty.
        stack_trace: Formatted call stack, or None when the event carried none.
        metadata: Auxiliary diagnostic context, or None when none was given.
        id: Store-assigned identifier, or None before the record is persisted.
    """

    timestamp: int
    level: LogLevel
    message: str
    stack_trace: str | None = None
    metadata: Metadata | None = None
    id: int | None = None

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def with_id(self, record_id: int) -> "LogRecord":
        """Return a copy of this record carrying the store-assigned id."""
        return replace(self, id=record_id)

    def to_dict(self) -> dict[str, Any]:
        """Return the record as a plain dict (JSON friendly for primitives)."""
        data = asdict(self)
        data["level"] = self.level.value
        return data
