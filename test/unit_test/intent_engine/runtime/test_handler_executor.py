"""Unit tests for HandlerExecutor deadlines and outcome classification."""

from __future__ import annotations

import asyncio
import time

import pytest

from intent_engine.core.config import Settings
from intent_engine.runtime.executor import HandlerExecutor


async def _slow(params):
    await asyncio.sleep(0.2)
    return {"done": True}


@pytest.mark.asyncio
async def test_async_handler_success() -> None:
    async def handler(params):
        return {"echo": params["x"]}

    result = await HandlerExecutor(1000).execute(handler, {"x": 1})

    assert result.success is True
    assert result.data == {"echo": 1}
    assert result.error is None
    assert result.execution_time >= 0


@pytest.mark.asyncio
async def test_sync_handler_runs_in_worker_thread() -> None:
    def handler(params):
        return params["x"] * 2

    result = await HandlerExecutor(1000).execute(handler, {"x": 21})

    assert result.success is True
    assert result.data == 42


@pytest.mark.asyncio
async def test_sync_handler_returning_awaitable_is_awaited() -> None:
    async def inner():
        return "later"

    result = await HandlerExecutor(1000).execute(lambda params: inner(), {})

    assert result.data == "later"


@pytest.mark.asyncio
async def test_timeout_when_handler_is_slower_than_deadline() -> None:
    result = await HandlerExecutor().execute(_slow, {}, timeout_ms=50)

    assert result.success is False
    assert result.error is not None
    assert result.error.is_timeout is True
    assert result.error.message == "Handler execution timeout after 50ms"
    assert result.execution_time >= 50
    await asyncio.sleep(0.2)


@pytest.mark.asyncio
async def test_success_when_deadline_is_generous() -> None:
    result = await HandlerExecutor().execute(_slow, {}, timeout_ms=500)

    assert result.success is True
    assert result.data == {"done": True}


@pytest.mark.asyncio
async def test_blocking_sync_handler_is_bounded() -> None:
    def blocking(params):
        time.sleep(0.2)
        return "late"

    result = await HandlerExecutor().execute(blocking, {}, timeout_ms=50)

    assert result.error is not None and result.error.is_timeout
    await asyncio.sleep(0.2)


@pytest.mark.asyncio
async def test_exception_becomes_execution_error() -> None:
    boom = ValueError("out of stock")

    async def handler(params):
        raise boom

    result = await HandlerExecutor(1000).execute(handler, {})

    assert result.success is False
    assert result.error.is_timeout is False
    assert result.error.message == "out of stock"
    assert result.error.original_error is boom


@pytest.mark.asyncio
async def test_exception_without_message_gets_default() -> None:
    async def handler(params):
        raise RuntimeError()

    result = await HandlerExecutor(1000).execute(handler, {})

    assert result.error.message == "Unknown error during handler execution"


@pytest.mark.asyncio
async def test_non_callable_handler() -> None:
    result = await HandlerExecutor(1000).execute("nope", {})  # type: ignore[arg-type]

    assert result.success is False
    assert result.error.message == "Handler must be a function"


@pytest.mark.asyncio
async def test_handler_receives_a_copy_of_params() -> None:
    seen = {}

    async def handler(params):
        params["mutated"] = True
        seen.update(params)

    original = {"x": 1}
    await HandlerExecutor(1000).execute(handler, original)

    assert seen == {"x": 1, "mutated": True}
    assert original == {"x": 1}


def test_default_timeout_comes_from_settings() -> None:
    cfg = Settings(_env_file=None, INTENT_ENGINE_DEFAULT_TIMEOUT_MS=1234)

    assert HandlerExecutor(config=cfg).default_timeout_ms == 1234
    assert HandlerExecutor(10, config=cfg).default_timeout_ms == 10
