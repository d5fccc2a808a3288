"""Single-intent execution runtime.

 The runtime takes one intent and dispatches it through a fixed pipeline:

 - validation (``StrategyValidator``/``ParameterValidator``),
 - precondition gating (``PreconditionChecker``),
 - bounded handler execution (``HandlerExecutor``),
 - result shaping (``ResultFormatter``).

 The main entry point is ``Engine``.
 """

from .engine import Engine
from .executor import HandlerError, HandlerExecutionResult, HandlerExecutor
from .formatter import ResultFormatter
from .preconditions import FailedCondition, PreconditionChecker, PreconditionResult

__all__ = [
    "Engine",
    "FailedCondition",
    "HandlerError",
    "HandlerExecutionResult",
    "HandlerExecutor",
    "PreconditionChecker",
    "PreconditionResult",
    "ResultFormatter",
]
