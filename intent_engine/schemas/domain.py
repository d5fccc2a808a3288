from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field

from .base import BaseSchema


class ErrorType(str, Enum):
    validation_error = "VALIDATION_ERROR"
    validation_warning = "VALIDATION_WARNING"
    precondition_failed = "PRECONDITION_FAILED"
    handler_not_found = "HANDLER_NOT_FOUND"
    execution_error = "EXECUTION_ERROR"
    timeout = "TIMEOUT"
    capability_not_found = "CAPABILITY_NOT_FOUND"
    invalid_resume_token = "INVALID_RESUME_TOKEN"


class Intent(BaseSchema):
    """A request to invoke one capability with concrete parameter values."""

    model_config = ConfigDict(frozen=True)

    capability_id: str
    parameters: Dict[str, Any] = Field(default_factory=dict)


class ExecutionError(BaseSchema):
    type: ErrorType
    message: str
    details: Any = None
    capability_id: str = ""


class ExecutionResult(BaseSchema):
    """Uniform envelope returned by single-intent dispatch.

    ``execution_time`` is the handler's wall-clock time in milliseconds; it is
    absent when dispatch stopped before the handler was invoked.
    """

    success: bool
    data: Any = None
    error: Optional[ExecutionError] = None
    side_effects: List[str] = Field(default_factory=list)
    suggestions: Optional[List[str]] = None
    execution_time: Optional[float] = None


class ExecutionOptions(BaseSchema):
    timeout_ms: Optional[int] = Field(default=None, gt=0)
    context: Dict[str, Any] = Field(default_factory=dict)


class StrategyExecutionOptions(ExecutionOptions):
    transactional: bool = False
    continue_on_error: bool = False


class ParameterRequest(BaseSchema):
    """Descriptor of an on-demand parameter a paused strategy is waiting for."""

    capability_id: str
    parameter: str
    description: str
    type: str
    is_sensitive: bool = False


class StrategyError(BaseSchema):
    code: ErrorType
    message: str
    step_index: Optional[int] = None


class StrategyResult(BaseSchema):
    success: bool
    results: List[ExecutionResult] = Field(default_factory=list)
    error: Optional[StrategyError] = None
    paused: bool = False
    required_inputs: Optional[List[ParameterRequest]] = None
    resume_token: Optional[str] = None
    completed_steps: int = 0
    rolled_back: Optional[bool] = None
    rollback_errors: Optional[List[str]] = None


class ParameterSummary(BaseSchema):
    name: str
    description: str
    type: str
    is_required: bool
    examples: List[Any] = Field(default_factory=list)


class CapabilitySummary(BaseSchema):
    id: str
    display_name: str
    description: str
    examples: List[str] = Field(default_factory=list)
    parameters: List[ParameterSummary] = Field(default_factory=list)


class CapabilityGraph(BaseSchema):
    """Read-only view of the manifest handed to an external planner."""

    app_name: str
    app_description: str
    capabilities: List[CapabilitySummary] = Field(default_factory=list)
