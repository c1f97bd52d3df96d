"""Error boundary for units of UI work.

A boundary runs a unit of work (rendering a view, handling a widget
callback, ...) and, if it raises, records the failure at ERROR level and
returns a fallback instead of letting the exception escape.
"""

import traceback
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from capturelog.core.logger import CaptureLogger
from capturelog.core.models import LogLevel

T = TypeVar("T")


class ErrorBoundary(Generic[T]):
    """Catches failures escaping a unit of work and substitutes a fallback.

    Once a failure is caught the boundary stays failed: further renders
    return the fallback without running the unit. reset() is the only way
    back, after which the next render runs the unit again. The fallback is
    either a plain value or a callable receiving the exception.

    Example:
        ```python
        boundary = ErrorBoundary(capture, lambda exc: "Something went wrong.")
        html = boundary.render(render_dashboard, user)
        ```
    """

    def __init__(
        self,
        logger: CaptureLogger,
        fallback: T | Callable[[Exception], T],
        name: str = "component",
    ) -> None:
        self._logger = logger
        self._fallback = fallback
        self.name = name
        self.error: Exception | None = None

    @property
    def has_error(self) -> bool:
        return self.error is not None

    def render(self, unit: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run a synchronous unit of work inside the boundary."""
        if self.error is not None:
            return self._fallback_for(self.error)
        try:
            return unit(*args, **kwargs)
        except Exception as exc:
            self._catch(exc)
            return self._fallback_for(exc)

    async def render_async(
        self, unit: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> T:
        """Run an asynchronous unit of work inside the boundary."""
        if self.error is not None:
            return self._fallback_for(self.error)
        try:
            return await unit(*args, **kwargs)
        except Exception as exc:
            self._catch(exc)
            return self._fallback_for(exc)

    def reset(self) -> None:
        """Leave the failed state so the next render runs the unit again."""
        self.error = None

    def _fallback_for(self, exc: Exception) -> T:
        if callable(self._fallback):
            return self._fallback(exc)
        return self._fallback

    def _catch(self, exc: Exception) -> None:
        self.error = exc
        self._logger.capture_nowait(
            LogLevel.ERROR,
            f"Uncaught exception in {self.name}",
            context={
                "location_trace": "".join(traceback.format_tb(exc.__traceback__)),
                "original_error": str(exc),
                "boundary": self.name,
            },
        )
