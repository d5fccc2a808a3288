from __future__ import annotations

"""Execution state for strategy runs and the LangGraph state wrapper.

- ``ExecutionState`` is the mutable record of one strategy run. It lives for
  the duration of a run and, while the run is paused, in the executor's
  paused-run table under its resume token.
- ``ExecutedStep`` records a step that succeeded, in order, so a transactional
  run can undo them newest-first.
- ``_GraphState`` is the dict passed between LangGraph nodes.
"""

from dataclasses import dataclass, field
from typing import (
    Any,
    Dict,
    List,
    Mapping,
    NotRequired,
    Optional,
    Required,
    Tuple,
    TypedDict,
    Union,
)

from ..schemas.domain import (
    ExecutionResult,
    Intent,
    ParameterRequest,
    StrategyError,
    StrategyExecutionOptions,
    StrategyResult,
)
from ..schemas.manifest import Capability


@dataclass(frozen=True)
class ExecutedStep:
    intent: Intent
    result: ExecutionResult
    capability: Capability


@dataclass
class ExecutionState:
    """Progress of one strategy run.

    Attributes:
        strategy: The ordered intents as supplied, raw mappings included; never
            modified after the run starts.
        options: Options the run was started with; reused on resume.
        current_index: Index of the next step to run.
        results: Per-step results in execution order, failures included.
        accumulated_context: Caller context folded with each step's ``data.data``.
        collected_parameters: Values supplied through resume, keyed by step index.
        executed_steps: Successfully executed steps, oldest first.
        paused_at: Monotonic time the run was parked; ``None`` while running.
    """

    strategy: Tuple[Union[Intent, Mapping[str, Any]], ...]
    options: StrategyExecutionOptions
    current_index: int = 0
    results: List[ExecutionResult] = field(default_factory=list)
    accumulated_context: Dict[str, Any] = field(default_factory=dict)
    collected_parameters: Dict[int, Dict[str, Any]] = field(default_factory=dict)
    executed_steps: List[ExecutedStep] = field(default_factory=list)
    paused_at: Optional[float] = None

    @property
    def is_complete(self) -> bool:
        return self.current_index >= len(self.strategy)


class _GraphState(TypedDict):
    """Mutable LangGraph state for a single strategy run segment.

    Required keys:

    - ``execution``: the run being driven.

    Optional keys:

    - ``_required_inputs``: set when the current step waits for parameters.
    - ``_failure``: set when the current step failed the run.
    - ``_finished``: set when every step has run.
    - ``result``: the outcome, written by the terminal node.
    """

    execution: Required[ExecutionState]
    _required_inputs: NotRequired[List[ParameterRequest]]
    _failure: NotRequired[StrategyError]
    _finished: NotRequired[bool]
    result: NotRequired[StrategyResult]
