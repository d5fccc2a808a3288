from __future__ import annotations

"""Single-intent execution engine.

``Engine`` dispatches one intent against a loaded manifest.

Execution model
---------------

Each call to ``execute`` runs a fixed pipeline and stops at the first failing
stage:

1. Validate the intent structure and every parameter against the manifest
   (``VALIDATION_ERROR``; nothing has been attempted yet).
2. Resolve the capability (``VALIDATION_ERROR``).
3. Evaluate the capability's preconditions against the caller's context
   (``PRECONDITION_FAILED``).
4. Resolve the primary handler (``HANDLER_NOT_FOUND``; unreachable unless a
   handler was unregistered after construction).
5. Invoke the handler under a deadline.
6. Shape the outcome (success with side effects, ``EXECUTION_ERROR`` or
   ``TIMEOUT``).

Failures are returned as ``ExecutionResult`` data, never raised. The only
raising path is construction: every capability's primary handler and the
handler of its undo capability must already be registered, so wiring mistakes
surface before any intent runs rather than halfway through a strategy.
"""

import logging
from typing import Any, List, Mapping, Optional, Union

from ..capabilities.base import HandlerFunction, PreconditionCheckerFunction
from ..capabilities.directory import CapabilityDirectory
from ..capabilities.registry import HandlerRegistry
from ..core.config import Settings, settings
from ..errors import MissingHandlerError
from ..schemas.domain import (
    CapabilityGraph,
    CapabilitySummary,
    ErrorType,
    ExecutionOptions,
    ExecutionResult,
    Intent,
    ParameterSummary,
)
from ..schemas.manifest import Manifest
from ..validation.parameters import ParameterValidator
from ..validation.strategy import StrategyValidator, capability_id_of, coerce_intent
from .executor import HandlerExecutor
from .formatter import ResultFormatter
from .preconditions import PreconditionChecker

logger = logging.getLogger(__name__)


class Engine:
    """Validate, gate and execute single intents for one manifest.

    The engine owns its handler and checker tables; hosts mutate them only
    through ``register_*``/``unregister_*``. Distinct ``execute`` calls may run
    concurrently against the same engine.
    """

    def __init__(
        self,
        manifest: Union[Manifest, Mapping[str, Any]],
        handlers: Mapping[str, HandlerFunction],
        checkers: Optional[Mapping[str, PreconditionCheckerFunction]] = None,
        *,
        config: Optional[Settings] = None,
    ) -> None:
        """
        Initialize the Engine.

        Args:
            manifest: An already-validated manifest, as a model or a manifest document.
            handlers: Handler reference -> callable for every capability.
            checkers: Checker reference -> callable for preconditions.
            config: Settings override; the module-level settings when omitted.

        Raises:
            MissingHandlerError: If a primary or undo handler reference is not in ``handlers``.
        """
        self._manifest = manifest if isinstance(manifest, Manifest) else Manifest.model_validate(manifest)
        self._directory = CapabilityDirectory(self._manifest)
        self._validator = StrategyValidator(self._directory, ParameterValidator())
        self._handlers = HandlerRegistry()
        self._preconditions = PreconditionChecker()
        self._executor = HandlerExecutor(config=config or settings)
        self._formatter = ResultFormatter()

        self._handlers.register_many(handlers)
        if checkers:
            self._preconditions.register_many(checkers)

        self._validate_handler_bindings()
        logger.debug(
            f"Engine ready for {self._directory.manifest_key} "
            f"with {len(self._directory.capability_ids())} capabilities"
        )

    @property
    def manifest(self) -> Manifest:
        return self._manifest

    @property
    def directory(self) -> CapabilityDirectory:
        return self._directory

    @property
    def validator(self) -> StrategyValidator:
        """Intent/strategy validator bound to this engine's manifest."""
        return self._validator

    async def execute(
        self,
        intent: Union[Intent, Mapping[str, Any]],
        options: Optional[ExecutionOptions] = None,
    ) -> ExecutionResult:
        """
        Dispatch one intent.

        Args:
            intent: An ``Intent`` or a raw mapping with ``capabilityId`` and ``parameters``.
            options: Deadline override and the context handed to precondition checkers.

        Returns:
            The result envelope; failures are reported in ``error``.
        """
        opts = options or ExecutionOptions()

        errors = self._validator.validate_intent(intent, 0)
        if errors:
            first = errors[0]
            capability_id = capability_id_of(intent)
            logger.debug(f"Intent for '{capability_id}' rejected: {first.message}")
            result = self._formatter.format_validation_error(first.message, capability_id)
            if first.field == "capabilityId" and isinstance(first.details, str):
                suggestion = self._validator.suggest(first.details)
                if suggestion is not None:
                    result = self._formatter.add_suggestions(result, [suggestion])
            return result

        resolved = coerce_intent(intent)
        capability = self._directory.get_capability(resolved.capability_id)
        if capability is None:
            return self._formatter.format_error(
                ErrorType.validation_error,
                f'Capability "{resolved.capability_id}" not found',
                capability_id=resolved.capability_id,
            )

        precondition_result = await self._preconditions.check_all(capability.preconditions, opts.context)
        if not precondition_result.passed and precondition_result.failed_condition is not None:
            failed = precondition_result.failed_condition
            logger.info(f"Precondition failed for '{capability.id}': {failed.description}")
            return self._formatter.format_precondition_failure(failed.error_message, failed.description, capability.id)

        handler_ref = capability.handler.handler_ref
        handler = self._handlers.get(handler_ref)
        if handler is None:
            logger.error(f"Handler '{handler_ref}' for '{capability.id}' is not registered")
            return self._formatter.format_error(
                ErrorType.handler_not_found,
                f'Handler "{handler_ref}" not registered',
                capability_id=capability.id,
            )

        handler_result = await self._executor.execute(handler, resolved.parameters, opts.timeout_ms)
        if handler_result.success:
            logger.debug(f"Capability '{capability.id}' succeeded in {handler_result.execution_time:.1f}ms")
            return self._formatter.format_success(handler_result, capability)

        logger.info(f"Capability '{capability.id}' failed: {handler_result.error.message if handler_result.error else ''}")
        return self._formatter.format_handler_error(handler_result, capability.id)

    def get_capability_graph(self) -> CapabilityGraph:
        """Return the planner-facing view of the manifest.

        Derived from the manifest alone; the same manifest always yields an
        equal graph.
        """
        capabilities = [
            CapabilitySummary(
                id=cap.id,
                display_name=cap.display_name,
                description=cap.description,
                examples=list(cap.examples or []),
                parameters=[
                    ParameterSummary(
                        name=p.name,
                        description=p.description,
                        type=p.type.value,
                        is_required=p.is_required,
                        examples=list(p.examples or []),
                    )
                    for p in cap.parameters
                ],
            )
            for cap in self._manifest.capabilities.values()
        ]
        return CapabilityGraph(
            app_name=self._manifest.metadata.name,
            app_description=self._manifest.metadata.description,
            capabilities=capabilities,
        )

    # Extra handlers and checkers can be wired after construction.

    def register_handler(self, handler_ref: str, handler: HandlerFunction) -> None:
        self._handlers.register(handler_ref, handler)

    def unregister_handler(self, handler_ref: str) -> None:
        self._handlers.unregister(handler_ref)

    def has_handler(self, handler_ref: str) -> bool:
        return self._handlers.has(handler_ref)

    def register_checker(self, checker_ref: str, checker: PreconditionCheckerFunction) -> None:
        self._preconditions.register_checker(checker_ref, checker)

    def unregister_checker(self, checker_ref: str) -> None:
        self._preconditions.unregister_checker(checker_ref)

    def has_checker(self, checker_ref: str) -> bool:
        return self._preconditions.has_checker(checker_ref)

    def get_handler_ref(self, capability_id: str) -> str:
        return self._directory.get_handler_ref(capability_id)

    def _validate_handler_bindings(self) -> None:
        missing: List[str] = []

        def _add(ref: str) -> None:
            if ref not in missing:
                missing.append(ref)

        for capability in self._manifest.capabilities.values():
            handler_ref = capability.handler.handler_ref
            if not self._handlers.has(handler_ref):
                _add(handler_ref)

            if capability.undo_capability_id:
                undo_ref = self._directory.get_handler_ref(capability.undo_capability_id)
                if not undo_ref:
                    _add(f'<undo capability "{capability.undo_capability_id}">')
                elif not self._handlers.has(undo_ref):
                    _add(undo_ref)

        if missing:
            raise MissingHandlerError(missing)
