"""BDD step definitions for capture features.

Each step runs its coroutine to completion with asyncio.run(), flushing
pending deliveries before the loop closes.
"""

import asyncio
from collections.abc import Coroutine
from dataclasses import dataclass, field
from typing import Any

import pytest
from pytest_bdd import given, parsers, then, when

from capturelog.core.hub import Subscription
from capturelog.core.logger import CaptureLogger
from capturelog.core.models import LogLevel
from tests.helpers import FlakyLogStore, ObserverSpy, RecordingReporter


@dataclass
class CaptureScenarioContext:
    """Shared state between steps in a capture scenario."""

    store: FlakyLogStore = field(default_factory=FlakyLogStore)
    reporter: RecordingReporter = field(default_factory=RecordingReporter)
    observer: ObserverSpy = field(default_factory=ObserverSpy)
    logger: CaptureLogger | None = None
    subscription: Subscription | None = None


def run_async(ctx: CaptureScenarioContext, coro: Coroutine[Any, Any, Any]) -> Any:
    """Run a step coroutine and wait for every resulting delivery."""
    assert ctx.logger is not None
    logger = ctx.logger

    async def step() -> Any:
        result = await coro
        await logger.flush()
        return result

    return asyncio.run(step())


@pytest.fixture
def ctx() -> CaptureScenarioContext:
    """Fresh scenario context for each test."""
    return CaptureScenarioContext()


# === Background Steps ===
@given("an in-memory capture logger")
def step_capture_logger(ctx: CaptureScenarioContext) -> None:
    ctx.logger = CaptureLogger(ctx.store, reporter=ctx.reporter)


@given("a subscribed observer")
def step_subscribed_observer(ctx: CaptureScenarioContext) -> None:
    async def subscribe() -> None:
        assert ctx.logger is not None
        ctx.subscription = ctx.logger.subscribe(ctx.observer)

    run_async(ctx, subscribe())


@given("the store rejects writes")
def step_store_rejects_writes(ctx: CaptureScenarioContext) -> None:
    ctx.store.fail_insert = True


# === Action Steps ===
@when(parsers.parse('"{message}" is logged at {level}'))
def step_log_message(ctx: CaptureScenarioContext, message: str, level: str) -> None:
    assert ctx.logger is not None
    run_async(ctx, ctx.logger.log(LogLevel(level), message))


@when("the log is cleared")
def step_clear(ctx: CaptureScenarioContext) -> None:
    assert ctx.logger is not None
    run_async(ctx, ctx.logger.clear())


@when("the observer unsubscribes")
def step_unsubscribe(ctx: CaptureScenarioContext) -> None:
    assert ctx.subscription is not None
    ctx.subscription.unsubscribe()


# === Outcome Steps ===
@then(parsers.parse("the observer last received {count:d} records"))
def step_last_delivery_size(ctx: CaptureScenarioContext, count: int) -> None:
    assert len(ctx.observer.last) == count


@then(parsers.parse("the observer received {count:d} deliveries"))
def step_delivery_count(ctx: CaptureScenarioContext, count: int) -> None:
    assert len(ctx.observer.deliveries) == count


@then(parsers.parse('the newest record is "{message}" at {level}'))
def step_newest_record(ctx: CaptureScenarioContext, message: str, level: str) -> None:
    newest = ctx.observer.last[0]
    assert (newest.message, newest.level) == (message, LogLevel(level))


@then(parsers.parse('the capture reported a "{stage}" failure'))
def step_reported_failure(ctx: CaptureScenarioContext, stage: str) -> None:
    assert ctx.reporter.stages == [stage]
