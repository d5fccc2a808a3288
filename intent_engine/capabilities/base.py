from __future__ import annotations

"""Callable contracts for handlers and precondition checkers.

A *handler* implements a capability: it receives the intent's parameters and
returns an opaque payload. A *checker* implements a precondition: it receives
the shared application context and returns a truthy value to pass.

Both may be plain functions or coroutine functions; the engine awaits
whatever comes back. Handlers should:

- treat ``params`` as read-only,
- be safe to abandon mid-flight, because a handler that exceeds its deadline
  keeps running while the engine reports a timeout,
- return a mapping with a nested ``data`` mapping when later strategy steps
  should see values in their shared context.
"""

from typing import Any, Awaitable, Callable, Dict, Union

AppContext = Dict[str, Any]

HandlerFunction = Callable[[Dict[str, Any]], Union[Any, Awaitable[Any]]]

PreconditionCheckerFunction = Callable[[AppContext], Union[Any, Awaitable[Any]]]
