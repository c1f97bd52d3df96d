"""Exception types raised by the capture layer."""


class CaptureError(Exception):
    """Base class for all capturelog errors."""


class StoreError(CaptureError):
    """Base class for persistent store failures."""


class StoreOpenError(StoreError):
    """The storage engine failed to open or upgrade its schema."""


class StoreWriteError(StoreError):
    """An insert or clear transaction was aborted."""


class StoreReadError(StoreError):
    """A scan transaction was aborted."""


class CaptureReportingFailure(CaptureError):
    """Persisting or publishing a captured event failed.

    Never raised to the producer of the event. Instances are handed to a
    FailureReporter instead, with the underlying error as ``__cause__``.

    Attributes:
        stage: Where the failure happened: "persist", "notify" or "observer".
    """

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(f"{stage}: {message}")
        self.stage = stage
