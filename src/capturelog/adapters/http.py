"""httpx event hooks that report failed responses.

The hooks do not talk to the capture layer directly: they log through an
ordinary application logger, which the CaptureHandler intercepts like any
other error output. The request details travel as ``extra`` fields.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

_DEFAULT_LOGGER_NAME = "http"


def _body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _report(logger: logging.Logger, response: httpx.Response) -> None:
    request = response.request
    logger.error(
        "HTTP error: %s %s",
        response.status_code,
        response.reason_phrase,
        extra={
            "url": str(request.url),
            "method": request.method,
            "status": response.status_code,
            "status_text": response.reason_phrase,
            "body": _body(response),
        },
    )


def log_http_errors(
    logger: logging.Logger | None = None,
) -> Callable[[httpx.Response], Awaitable[None]]:
    """Build a response hook for httpx.AsyncClient that logs 4xx/5xx responses.

    Example:
        ```python
        client = httpx.AsyncClient(event_hooks={"response": [log_http_errors()]})
        ```
    """
    target = logger or logging.getLogger(_DEFAULT_LOGGER_NAME)

    async def hook(response: httpx.Response) -> None:
        if response.is_error:
            await response.aread()
            _report(target, response)

    return hook


def log_http_errors_sync(
    logger: logging.Logger | None = None,
) -> Callable[[httpx.Response], None]:
    """Build a response hook for httpx.Client that logs 4xx/5xx responses."""
    target = logger or logging.getLogger(_DEFAULT_LOGGER_NAME)

    def hook(response: httpx.Response) -> None:
        if response.is_error:
            response.read()
            _report(target, response)

    return hook
