from __future__ import annotations

"""Bounded handler execution.

``HandlerExecutor`` invokes one handler with a deadline and classifies the
outcome as success, timeout or execution error, measuring wall-clock time from
invocation start in every case.

Coroutine functions run on the event loop. Plain callables run in a worker
thread so the deadline also bounds blocking handlers; if a plain callable
returns an awaitable it is awaited under the same deadline.

A handler that misses its deadline is not cancelled. Its task keeps running
and its eventual result or exception is consumed and dropped, so handlers must
be safe to abandon mid-flight.
"""

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from ..capabilities.base import HandlerFunction
from ..core.config import Settings, settings

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "Unknown error during handler execution"


@dataclass(frozen=True)
class HandlerError:
    message: str
    is_timeout: bool
    original_error: Optional[BaseException] = None


@dataclass(frozen=True)
class HandlerExecutionResult:
    """Raw outcome of one handler invocation.

    Attributes:
        success: True when the handler returned before the deadline.
        execution_time: Elapsed milliseconds since invocation start.
        data: The handler's return value on success.
        error: Failure classification on timeout or exception.
    """

    success: bool
    execution_time: float
    data: Any = None
    error: Optional[HandlerError] = None


def _elapsed_ms(start: float) -> float:
    return (time.monotonic() - start) * 1000.0


def _is_coroutine_callable(handler: Any) -> bool:
    return inspect.iscoroutinefunction(handler) or inspect.iscoroutinefunction(getattr(handler, "__call__", None))


async def _invoke(handler: HandlerFunction, params: Dict[str, Any]) -> Any:
    if _is_coroutine_callable(handler):
        result = handler(params)
    else:
        result = await asyncio.to_thread(handler, params)
    if inspect.isawaitable(result):
        result = await result
    return result


def _discard_outcome(task: "asyncio.Future[Any]") -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug(f"Abandoned handler finished with error after timeout: {exc!r}")
    else:
        logger.debug("Abandoned handler finished after timeout; result discarded")


class HandlerExecutor:
    """Run handlers under a deadline."""

    def __init__(self, default_timeout_ms: Optional[int] = None, *, config: Optional[Settings] = None) -> None:
        """
        Args:
            default_timeout_ms: Deadline used when ``execute`` gets none; falls back
                to ``Settings.default_timeout_ms``.
            config: Settings override; the module-level settings when omitted.
        """
        cfg = config or settings
        self._default_timeout_ms = default_timeout_ms if default_timeout_ms is not None else cfg.default_timeout_ms

    @property
    def default_timeout_ms(self) -> int:
        return self._default_timeout_ms

    @staticmethod
    def validate_handler(handler: Any) -> bool:
        return callable(handler)

    async def execute(
        self,
        handler: HandlerFunction,
        params: Mapping[str, Any],
        timeout_ms: Optional[int] = None,
    ) -> HandlerExecutionResult:
        """
        Invoke ``handler`` with ``params`` and race it against the deadline.

        Args:
            handler: Sync or async callable taking the parameter dict.
            params: Parameters passed to the handler (as a fresh dict).
            timeout_ms: Deadline in milliseconds; the default when omitted.

        Returns:
            The classified outcome. Never raises for handler failures.
        """
        timeout = timeout_ms if timeout_ms is not None else self._default_timeout_ms
        start = time.monotonic()

        if not self.validate_handler(handler):
            return HandlerExecutionResult(
                success=False,
                execution_time=_elapsed_ms(start),
                error=HandlerError(message="Handler must be a function", is_timeout=False),
            )

        task = asyncio.ensure_future(_invoke(handler, dict(params)))
        done, _pending = await asyncio.wait({task}, timeout=timeout / 1000.0)

        if task not in done:
            task.add_done_callback(_discard_outcome)
            elapsed = _elapsed_ms(start)
            logger.warning(f"Handler exceeded its deadline of {timeout}ms; outcome will be discarded")
            return HandlerExecutionResult(
                success=False,
                execution_time=elapsed,
                error=HandlerError(message=f"Handler execution timeout after {timeout}ms", is_timeout=True),
            )

        try:
            data = task.result()
        except Exception as e:
            return HandlerExecutionResult(
                success=False,
                execution_time=_elapsed_ms(start),
                error=HandlerError(message=str(e) or UNKNOWN_ERROR_MESSAGE, is_timeout=False, original_error=e),
            )

        return HandlerExecutionResult(success=True, execution_time=_elapsed_ms(start), data=data)
