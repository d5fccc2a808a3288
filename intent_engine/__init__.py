"""intent-engine.

This package turns planner output into application behaviour: a host
application describes what it can do in a capability manifest, registers a
handler for each capability, and lets the engine validate and dispatch the
intents an AI planner produces.

High-level architecture
-----------------------

- ``intent_engine.schemas``: the manifest model (capabilities, parameters,
  preconditions) and the result envelopes returned to the caller.
- ``intent_engine.validation``: parameter and intent/strategy validation.
- ``intent_engine.capabilities``: capability lookup and the handler table.
- ``intent_engine.runtime``: the single-intent ``Engine`` pipeline
  (validate, check preconditions, run the handler under a deadline, shape the
  result).
- ``intent_engine.strategy``: the ``StrategyExecutor`` that runs an ordered
  list of intents with pause/resume and transactional rollback.
- ``intent_engine.core``: settings, logging and optional Logfire monitoring.

Typical workflow
----------------

1. Load the manifest and build an ``Engine`` with every handler registered.
2. Hand ``Engine.get_capability_graph()`` to the planner.
3. Validate the returned strategy with ``engine.validator``.
4. Run it with ``StrategyExecutor.execute_strategy``.
5. If the result is paused, collect the requested inputs from the user and
   call ``StrategyExecutor.resume_strategy`` with the resume token.
"""

from .errors import IntentEngineError, MissingHandlerError, StrategyValidationError
from .runtime import Engine
from .schemas import (
    ErrorType,
    ExecutionOptions,
    ExecutionResult,
    Intent,
    Manifest,
    StrategyExecutionOptions,
    StrategyResult,
)
from .strategy import StrategyExecutor

__all__ = [
    "Engine",
    "ErrorType",
    "ExecutionOptions",
    "ExecutionResult",
    "Intent",
    "IntentEngineError",
    "Manifest",
    "MissingHandlerError",
    "StrategyExecutionOptions",
    "StrategyExecutor",
    "StrategyResult",
    "StrategyValidationError",
]
