"""Typed models shared across the engine.

 - ``manifest``: the capability catalog (parsed from the manifest document).
 - ``domain``: intents, execution/strategy results, options and the
   capability graph view.
 """

from .base import BaseSchema
from .domain import (
    CapabilityGraph,
    CapabilitySummary,
    ErrorType,
    ExecutionError,
    ExecutionOptions,
    ExecutionResult,
    Intent,
    ParameterRequest,
    ParameterSummary,
    StrategyError,
    StrategyExecutionOptions,
    StrategyResult,
)
from .manifest import (
    Capability,
    CollectionApproach,
    Entity,
    EnumOption,
    HandlerRef,
    Manifest,
    ManifestMetadata,
    Parameter,
    ParameterType,
    Precondition,
    PreconditionType,
    Validator,
)

__all__ = [
    "BaseSchema",
    "Capability",
    "CapabilityGraph",
    "CapabilitySummary",
    "CollectionApproach",
    "Entity",
    "EnumOption",
    "ErrorType",
    "ExecutionError",
    "ExecutionOptions",
    "ExecutionResult",
    "HandlerRef",
    "Intent",
    "Manifest",
    "ManifestMetadata",
    "Parameter",
    "ParameterRequest",
    "ParameterSummary",
    "ParameterType",
    "Precondition",
    "PreconditionType",
    "StrategyError",
    "StrategyExecutionOptions",
    "StrategyResult",
    "Validator",
]
