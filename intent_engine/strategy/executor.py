from __future__ import annotations

"""LangGraph strategy orchestrator.

``StrategyExecutor`` runs an ordered list of intents (a strategy) through an
``Engine``, one step at a time.

Execution model
---------------

- The executor runs a LangGraph state machine over ``_GraphState``, which wraps
  the mutable ``ExecutionState`` of the run.
- Each pass through the ``execute`` node handles exactly one step at
  ``current_index``:

  1. A structurally malformed intent is handed to the engine as is; the
     engine rejects it with ``VALIDATION_ERROR`` before any handler runs.
     Otherwise resolve the step's capability (``CAPABILITY_NOT_FOUND`` fails
     the run).
  2. If a required on-demand parameter has no value yet, route to ``pause``.
  3. Merge the values collected through resume over the step's parameters and
     dispatch the step through the engine with the accumulated context.
  4. On success record the step and fold ``result.data["data"]`` into the
     accumulated context. On failure either skip the step (``continue_on_error``
     and a non-critical error) or route to ``rollback``.

Pause/resume
------------

A paused run is parked in memory under a one-time ``resume_<hex>`` token. The
caller supplies the missing values through ``resume_strategy``; the token is
consumed and the run continues from the step that paused. Completed steps are
never dispatched again.

Rollback
--------

When a transactional run fails, the undo capability of each executed step is
dispatched newest-first with that step's parameters. A step without an undo
capability is recorded and skipped. A failing undo is recorded and stops the
walk.
"""

import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
from uuid import uuid4

from langgraph.graph import END, StateGraph

from ..capabilities.directory import CapabilityDirectory
from ..core.config import Settings, settings
from ..core.monitoring import log_strategy_event
from ..runtime.engine import Engine
from ..schemas.domain import (
    ErrorType,
    ExecutionOptions,
    ExecutionResult,
    Intent,
    ParameterRequest,
    StrategyError,
    StrategyExecutionOptions,
    StrategyResult,
)
from ..schemas.manifest import Capability
from ..validation.strategy import coerce_intent
from .models import ExecutedStep, ExecutionState, _GraphState

logger = logging.getLogger(__name__)

RESUME_TOKEN_PREFIX = "resume_"
INVALID_RESUME_TOKEN_MESSAGE = "Resume token not found or expired"
INVALID_RESUME_PARAMS_MESSAGE = "Resume parameters must be an object"

_NON_CRITICAL_ERRORS = frozenset({ErrorType.precondition_failed, ErrorType.validation_warning})

# Graph supersteps allowed beyond one per remaining step.
_GRAPH_STEP_OVERHEAD = 10


class StrategyExecutor:
    """Run strategies step by step with pause/resume and saga rollback.

    Paused runs are kept in memory by this instance only. Distinct strategies
    may run concurrently against the same executor.
    """

    def __init__(
        self,
        engine: Engine,
        *,
        directory: Optional[CapabilityDirectory] = None,
        config: Optional[Settings] = None,
    ) -> None:
        """
        Initialize the StrategyExecutor.

        Args:
            engine: Engine used to dispatch every step and every undo.
            directory: Capability lookup; the engine's directory when omitted.
            config: Settings override; the module-level settings when omitted.
        """
        self._engine = engine
        self._directory = directory or engine.directory
        self._token_ttl_seconds = (config or settings).resume_token_ttl_seconds
        self._paused: Dict[str, ExecutionState] = {}
        self._graph = self._build_graph()

    def _build_graph(self):
        """Build and compile the LangGraph state machine."""
        g: StateGraph = StateGraph(_GraphState)
        g.add_node("start", self._node_start)
        g.add_node("execute", self._node_execute_next)
        g.add_node("pause", self._node_pause_for_input)
        g.add_node("rollback", self._node_rollback)
        g.add_node("finish", self._node_finish)

        g.set_entry_point("start")
        g.add_edge("start", "execute")

        g.add_conditional_edges(
            "execute",
            self._route_after_execute,
            {
                "pause": "pause",
                "fail": "rollback",
                "finish": "finish",
                "continue": "execute",
            },
        )
        g.add_edge("pause", END)
        g.add_edge("rollback", END)
        g.add_edge("finish", END)
        return g.compile()

    async def execute_strategy(
        self,
        strategy: Sequence[Union[Intent, Mapping[str, Any]]],
        options: Optional[Union[StrategyExecutionOptions, Mapping[str, Any]]] = None,
    ) -> StrategyResult:
        """
        Run a strategy from its first step.

        The strategy is not validated up front; an unknown capability or an
        invalid parameter surfaces as a failure of the step that carries it.
        Use ``StrategyValidator.validate`` beforehand to reject a plan early.

        Args:
            strategy: Ordered intents, as ``Intent`` models or raw mappings.
            options: Deadline, initial context, ``transactional`` and
                ``continue_on_error``.

        Returns:
            Success, failure (possibly rolled back) or a paused result with a
            resume token.
        """
        if options is None:
            opts = StrategyExecutionOptions()
        elif isinstance(options, StrategyExecutionOptions):
            opts = options
        else:
            opts = StrategyExecutionOptions.model_validate(options)

        execution = ExecutionState(
            strategy=tuple(strategy),
            options=opts,
            accumulated_context=dict(opts.context),
        )
        logger.info(
            f"Starting strategy with {len(execution.strategy)} steps "
            f"(transactional={opts.transactional}, continue_on_error={opts.continue_on_error})"
        )
        log_strategy_event(
            "strategy started",
            steps=len(execution.strategy),
            transactional=opts.transactional,
            continue_on_error=opts.continue_on_error,
        )
        return await self._run(execution)

    async def resume_strategy(self, resume_token: str, additional_params: Mapping[str, Any]) -> StrategyResult:
        """
        Continue a paused strategy.

        The supplied values are merged over anything collected earlier for the
        step that paused. The token is consumed: a second resume with it fails
        with ``INVALID_RESUME_TOKEN``.

        Values that are not a mapping are rejected with ``VALIDATION_ERROR``;
        the run stays parked under the same token.

        Args:
            resume_token: Token returned by the paused result.
            additional_params: Values for the step's missing parameters.
        """
        self._evict_expired()
        execution = self._paused.get(resume_token)
        if execution is None:
            logger.info("Resume requested for an unknown or expired token")
            return StrategyResult(
                success=False,
                error=StrategyError(code=ErrorType.invalid_resume_token, message=INVALID_RESUME_TOKEN_MESSAGE),
                completed_steps=0,
            )

        if not isinstance(additional_params, Mapping):
            logger.info(f"Resume rejected: parameters must be an object, got {type(additional_params).__name__}")
            return StrategyResult(
                success=False,
                results=list(execution.results),
                error=StrategyError(
                    code=ErrorType.validation_error,
                    message=INVALID_RESUME_PARAMS_MESSAGE,
                    step_index=execution.current_index,
                ),
                paused=True,
                required_inputs=self._pending_inputs(execution),
                resume_token=resume_token,
                completed_steps=len(execution.results),
            )

        del self._paused[resume_token]
        collected = execution.collected_parameters.setdefault(execution.current_index, {})
        collected.update(additional_params)
        execution.paused_at = None

        logger.info(f"Resuming strategy at step {execution.current_index}")
        log_strategy_event(
            "strategy resumed",
            step_index=execution.current_index,
            supplied=sorted(additional_params),
        )
        return await self._run(execution)

    def paused_tokens(self) -> List[str]:
        """Tokens of the runs currently parked, oldest first."""
        self._evict_expired()
        return list(self._paused)

    def discard(self, resume_token: str) -> bool:
        """Drop a parked run without resuming it. Returns False for unknown tokens."""
        return self._paused.pop(resume_token, None) is not None

    async def _run(self, execution: ExecutionState) -> StrategyResult:
        state: _GraphState = {"execution": execution}
        remaining = len(execution.strategy) - execution.current_index
        out = await self._graph.ainvoke(state, config={"recursion_limit": remaining + _GRAPH_STEP_OVERHEAD})
        return out["result"]

    async def _node_start(self, state: _GraphState) -> _GraphState:
        """Graph entry node: mark where this run segment begins."""
        execution = state["execution"]
        logger.debug(f"Run segment starting at step {execution.current_index} of {len(execution.strategy)}")
        return state

    async def _node_execute_next(self, state: _GraphState) -> _GraphState:
        """Run the step at ``current_index``, or mark the run finished."""
        execution = state["execution"]
        if execution.is_complete:
            state["_finished"] = True
            return state

        idx = execution.current_index
        step_options = ExecutionOptions(timeout_ms=execution.options.timeout_ms, context=execution.accumulated_context)
        raw = execution.strategy[idx]
        if self._engine.validator.validate_structure(raw, idx):
            # The engine answers a malformed intent with VALIDATION_ERROR without touching a handler.
            result = await self._engine.execute(raw, step_options)
            execution.results.append(result)
            state["_failure"] = self._step_failure(result, idx)
            return state

        intent = coerce_intent(raw, idx)
        capability = self._directory.get_capability(intent.capability_id)
        if capability is None:
            state["_failure"] = StrategyError(
                code=ErrorType.capability_not_found,
                message=f'Capability "{intent.capability_id}" not found',
                step_index=idx,
            )
            return state

        collected = execution.collected_parameters.get(idx)
        missing = self._find_missing_on_demand_params(capability, intent.parameters, collected)
        if missing:
            state["_required_inputs"] = missing
            return state

        merged = self._merge_parameters(intent, collected)
        result = await self._engine.execute(merged, step_options)
        execution.results.append(result)

        if not result.success:
            if execution.options.continue_on_error and self._is_non_critical_error(result):
                logger.info(f"Step {idx} ('{capability.id}') failed non-critically; continuing")
                execution.current_index = idx + 1
                return state
            state["_failure"] = self._step_failure(result, idx)
            return state

        execution.executed_steps.append(ExecutedStep(intent=merged, result=result, capability=capability))
        self._fold_context(execution, result)
        execution.current_index = idx + 1
        return state

    async def _node_pause_for_input(self, state: _GraphState) -> _GraphState:
        """Park the run under a fresh token and describe the missing inputs."""
        execution = state["execution"]
        required = list(state.get("_required_inputs") or [])
        token = self._generate_resume_token()
        execution.paused_at = time.monotonic()
        self._paused[token] = execution

        logger.info(
            f"Strategy paused at step {execution.current_index}; "
            f"waiting for {', '.join(r.parameter for r in required)}"
        )
        log_strategy_event(
            "strategy paused",
            step_index=execution.current_index,
            parameters=[r.parameter for r in required],
        )
        state["result"] = StrategyResult(
            success=False,
            results=list(execution.results),
            paused=True,
            required_inputs=required,
            resume_token=token,
            completed_steps=len(execution.results),
        )
        return state

    async def _node_rollback(self, state: _GraphState) -> _GraphState:
        """Failure node: undo executed steps of transactional runs and report."""
        execution = state["execution"]
        failure = state["_failure"]
        logger.info(f"Strategy failed at step {failure.step_index}: [{failure.code.value}] {failure.message}")
        log_strategy_event(
            "strategy failed",
            step_index=failure.step_index,
            code=failure.code.value,
            transactional=execution.options.transactional,
        )
        state["result"] = await self._handle_failure_with_rollback(execution, failure)
        return state

    async def _node_finish(self, state: _GraphState) -> _GraphState:
        execution = state["execution"]
        logger.info(f"Strategy completed: {len(execution.results)} steps dispatched")
        log_strategy_event("strategy completed", steps=len(execution.results))
        state["result"] = StrategyResult(
            success=True,
            results=list(execution.results),
            completed_steps=len(execution.results),
        )
        return state

    def _route_after_execute(self, state: _GraphState) -> str:
        """Route to pause/fail/finish/continue after executing a step."""
        if state.get("_required_inputs"):
            return "pause"
        if state.get("_failure") is not None:
            return "fail"
        if state.get("_finished"):
            return "finish"
        return "continue"

    async def _handle_failure_with_rollback(self, execution: ExecutionState, failure: StrategyError) -> StrategyResult:
        completed = sum(1 for r in execution.results if r.success)
        if not execution.options.transactional or not execution.executed_steps:
            return StrategyResult(
                success=False,
                results=list(execution.results),
                error=failure,
                completed_steps=completed,
            )

        rollback_errors = await self._rollback(execution)
        if rollback_errors:
            logger.warning(f"Rollback finished with {len(rollback_errors)} error(s): {'; '.join(rollback_errors)}")
        log_strategy_event(
            "strategy rolled back",
            executed_steps=len(execution.executed_steps),
            errors=len(rollback_errors),
        )
        return StrategyResult(
            success=False,
            results=list(execution.results),
            error=failure,
            completed_steps=completed,
            rolled_back=True,
            rollback_errors=rollback_errors,
        )

    async def _rollback(self, execution: ExecutionState) -> List[str]:
        """Undo executed steps newest-first; returns the recorded errors."""
        errors: List[str] = []
        for step in reversed(execution.executed_steps):
            capability_id = step.capability.id
            undo_id = step.capability.undo_capability_id
            if not undo_id:
                errors.append(f'Cannot undo "{capability_id}" - no undoHandler defined')
                continue

            undo_intent = Intent(capability_id=undo_id, parameters=dict(step.intent.parameters))
            try:
                undo_result = await self._engine.execute(
                    undo_intent,
                    ExecutionOptions(timeout_ms=execution.options.timeout_ms, context=execution.accumulated_context),
                )
            except Exception as e:
                logger.exception(f'Undo of "{capability_id}" raised')
                errors.append(f'Exception during undo of "{capability_id}": {str(e) or "Unknown error"}')
                break

            if not undo_result.success:
                message = undo_result.error.message if undo_result.error is not None else "Unknown error"
                errors.append(f'Failed to undo "{capability_id}": {message}')
                break
            logger.debug(f'Undid "{capability_id}" via "{undo_id}"')
        return errors

    @staticmethod
    def _step_failure(result: ExecutionResult, idx: int) -> StrategyError:
        return StrategyError(
            code=result.error.type if result.error is not None else ErrorType.execution_error,
            message=result.error.message if result.error is not None else "Step failed",
            step_index=idx,
        )

    def _pending_inputs(self, execution: ExecutionState) -> List[ParameterRequest]:
        """Inputs the parked step still waits for."""
        intent = coerce_intent(execution.strategy[execution.current_index])
        capability = self._directory.get_capability(intent.capability_id)
        if capability is None:
            return []
        return self._find_missing_on_demand_params(
            capability, intent.parameters, execution.collected_parameters.get(execution.current_index)
        )

    def _find_missing_on_demand_params(
        self,
        capability: Capability,
        provided: Mapping[str, Any],
        collected: Optional[Mapping[str, Any]],
    ) -> List[ParameterRequest]:
        available = {**provided, **(collected or {})}
        return [
            ParameterRequest(
                capability_id=capability.id,
                parameter=p.name,
                description=p.description,
                type=p.type.value,
                is_sensitive=p.is_sensitive,
            )
            for p in capability.parameters
            if p.is_on_demand and p.is_required and available.get(p.name) is None
        ]

    @staticmethod
    def _merge_parameters(intent: Intent, collected: Optional[Mapping[str, Any]]) -> Intent:
        if not collected:
            return intent
        return Intent(capability_id=intent.capability_id, parameters={**intent.parameters, **collected})

    @staticmethod
    def _fold_context(execution: ExecutionState, result: ExecutionResult) -> None:
        data = result.data
        if not isinstance(data, Mapping):
            return
        nested = data.get("data")
        if isinstance(nested, Mapping):
            execution.accumulated_context = {**execution.accumulated_context, **nested}

    @staticmethod
    def _is_non_critical_error(result: ExecutionResult) -> bool:
        return result.error is not None and result.error.type in _NON_CRITICAL_ERRORS

    @staticmethod
    def _generate_resume_token() -> str:
        return f"{RESUME_TOKEN_PREFIX}{uuid4().hex}"

    def _evict_expired(self) -> None:
        if self._token_ttl_seconds is None:
            return
        now = time.monotonic()
        expired = [
            token
            for token, execution in self._paused.items()
            if execution.paused_at is not None and now - execution.paused_at > self._token_ttl_seconds
        ]
        for token in expired:
            del self._paused[token]
        if expired:
            logger.info(f"Evicted {len(expired)} expired paused strategies")
