"""Example script capturing logs from every supported source.

Run with:
    python examples/capture_demo.py

Sources:
    manual         - CaptureLogger.info / warn / error
    ambient        - the standard logging module (CaptureHandler on root)
    boundary       - an ErrorBoundary around a failing unit of work
    network        - an httpx response hook reporting a 500

The records end up in capture_demo.db; an observer prints the newest
entry after every change.
"""

import asyncio
import logging

import httpx

from capturelog import CaptureLogger, ErrorBoundary, SQLiteLogStore, install
from capturelog.adapters.http import log_http_errors
from capturelog.core.models import LogRecord


def print_newest(records: list[LogRecord]) -> None:
    if records:
        newest = records[0]
        print(f"[{len(records):3d}] {newest.level:<5} {newest.message}")


def broken_view() -> str:
    raise RuntimeError("template variable missing")


def fake_backend(request: httpx.Request) -> httpx.Response:
    return httpx.Response(500, json={"detail": "database unavailable"})


async def main() -> None:
    logging.basicConfig(level=logging.INFO)
    store = SQLiteLogStore("capture_demo.db")
    capture = CaptureLogger(store)
    await capture.initialize()
    install(capture)
    subscription = capture.subscribe(print_newest)

    await capture.info("demo started", {"source": "manual"})
    logging.getLogger("demo").warning("cache miss for %s", "user:42")

    boundary = ErrorBoundary(capture, lambda exc: "<fallback>", name="ProfileView")
    print(boundary.render(broken_view))

    async with httpx.AsyncClient(
        transport=httpx.MockTransport(fake_backend),
        base_url="https://api.example",
        event_hooks={"response": [log_http_errors()]},
    ) as client:
        await client.get("/users/42")

    await capture.flush()
    subscription.unsubscribe()
    await store.close()


if __name__ == "__main__":
    asyncio.run(main())
