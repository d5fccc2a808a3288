"""Multi-step strategy execution.

 - ``StrategyExecutor``: runs ordered intents through an ``Engine`` with
   progressive parameter collection (pause/resume) and saga-style rollback.
 - ``ExecutionState``/``ExecutedStep``: the in-memory record of a run.
 """

from .executor import StrategyExecutor
from .models import ExecutedStep, ExecutionState

__all__ = [
    "ExecutedStep",
    "ExecutionState",
    "StrategyExecutor",
]
