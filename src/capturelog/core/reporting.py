"""Side channel for failures inside the capture path.

Failures are written to a dedicated logger that does not propagate to the
root logger and writes straight to the interpreter's original stderr, so a
report can never be captured again by the ambient handler.
"""

import logging
import sys

from capturelog.core.errors import CaptureReportingFailure

INTERNAL_LOGGER_NAME = "capturelog.internal"


def _internal_logger() -> logging.Logger:
    logger = logging.getLogger(INTERNAL_LOGGER_NAME)
    logger.propagate = False
    if not logger.handlers:
        handler = logging.StreamHandler(sys.__stderr__)
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s")
        )
        logger.addHandler(handler)
    return logger


class FailureReporter:
    """Reports capture-path failures without raising.

    Example:
        ```python
        reporter = FailureReporter()
        try:
            await store.insert(draft)
        except StoreError as exc:
            failure = CaptureReportingFailure("persist", "insert failed")
            failure.__cause__ = exc
            reporter.report(failure)
        ```
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _internal_logger()
        self.reported: int = 0

    def report(self, failure: CaptureReportingFailure) -> None:
        """Log the failure and its cause to the internal channel."""
        self.reported += 1
        cause = failure.__cause__
        if cause is None:
            self._logger.error("Capture failed: %s", failure)
            return
        self._logger.error(
            "Failed to %s captured log: %s",
            failure.stage,
            cause,
            exc_info=(type(cause), cause, cause.__traceback__),
        )
