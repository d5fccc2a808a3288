"""Error types for the intent engine package.

The engine reports validation, precondition and handler failures as data in
``ExecutionResult``/``StrategyResult``. Exceptions are reserved for wiring
mistakes that must surface before any intent runs.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence


class IntentEngineError(Exception):
    """Base error for all intent engine exceptions."""


class MissingHandlerError(IntentEngineError, ValueError):
    """Raised at engine construction when handler references are not registered."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing handler registrations: {', '.join(self.missing)}")


class StrategyValidationError(IntentEngineError):
    """A structural or parameter problem found in one intent of a strategy.

    Validators return these as data; ``StrategyValidator.validate_or_raise``
    raises the first one.

    Attributes:
        intent_index: Position of the offending intent, ``-1`` for strategy-level problems.
        field: The intent field at fault (``capabilityId`` or ``parameters``), if any.
        details: Extra context, e.g. the unknown capability id.
    """

    def __init__(
        self,
        message: str,
        intent_index: int,
        field: Optional[str] = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.intent_index = intent_index
        self.field = field
        self.details = details
