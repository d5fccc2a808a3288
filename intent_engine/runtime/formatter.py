from __future__ import annotations

"""Result shaping.

Maps raw outcomes (handler results, precondition failures, validation
messages) plus capability metadata into the uniform ``ExecutionResult``
envelope returned by the engine.
"""

from typing import Any, Dict, List, Optional, Sequence

from ..schemas.domain import ErrorType, ExecutionError, ExecutionResult
from ..schemas.manifest import Capability
from .executor import HandlerExecutionResult


class ResultFormatter:
    def format_success(self, handler_result: HandlerExecutionResult, capability: Capability) -> ExecutionResult:
        return ExecutionResult(
            success=True,
            data=handler_result.data,
            side_effects=self.extract_side_effects(capability),
            execution_time=handler_result.execution_time,
        )

    def format_error(
        self,
        error_type: ErrorType,
        message: str,
        details: Any = None,
        capability_id: str = "",
    ) -> ExecutionResult:
        return ExecutionResult(
            success=False,
            error=ExecutionError(type=error_type, message=message, details=details, capability_id=capability_id),
        )

    def format_handler_error(self, handler_result: HandlerExecutionResult, capability_id: str) -> ExecutionResult:
        """Shape a failed handler outcome as TIMEOUT or EXECUTION_ERROR."""
        error = handler_result.error
        is_timeout = error is not None and error.is_timeout
        return ExecutionResult(
            success=False,
            error=ExecutionError(
                type=ErrorType.timeout if is_timeout else ErrorType.execution_error,
                message=(error.message if error is not None else "") or "Handler execution failed",
                details=self.exception_details(error.original_error if error is not None else None),
                capability_id=capability_id,
            ),
            execution_time=handler_result.execution_time,
        )

    def format_precondition_failure(self, error_message: str, description: str, capability_id: str) -> ExecutionResult:
        return self.format_error(
            ErrorType.precondition_failed,
            error_message,
            details={"description": description},
            capability_id=capability_id,
        )

    def format_validation_error(self, message: str, capability_id: str = "") -> ExecutionResult:
        return self.format_error(ErrorType.validation_error, message, capability_id=capability_id)

    def add_suggestions(self, result: ExecutionResult, suggestions: Sequence[str]) -> ExecutionResult:
        if not suggestions:
            return result
        return result.model_copy(update={"suggestions": list(suggestions)})

    @staticmethod
    def exception_details(exc: Optional[BaseException]) -> Optional[Dict[str, str]]:
        """JSON-safe description of a handler exception; the exception itself stays on ``HandlerError``."""
        if exc is None:
            return None
        return {"exceptionType": type(exc).__name__}

    @staticmethod
    def extract_side_effects(capability: Capability) -> List[str]:
        return [effect.name for effect in capability.side_effects or []]
