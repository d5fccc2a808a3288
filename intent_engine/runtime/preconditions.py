from __future__ import annotations

"""Precondition evaluation.

``PreconditionChecker`` owns the checker table (checker reference -> callable)
and evaluates a capability's ordered precondition list against the shared
application context. Evaluation is fail-fast: once a precondition fails, the
ones after it are never called.

A precondition fails when:

- its checker reference is not registered,
- its checker raises,
- its checker returns a falsy value.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

from ..capabilities.base import AppContext, PreconditionCheckerFunction
from ..schemas.manifest import Precondition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FailedCondition:
    description: str
    error_message: str


@dataclass(frozen=True)
class PreconditionResult:
    passed: bool
    failed_condition: Optional[FailedCondition] = None


PASSED = PreconditionResult(passed=True)


class PreconditionChecker:
    """Checker table plus fail-fast evaluation of precondition lists."""

    def __init__(self) -> None:
        self._checkers: Dict[str, PreconditionCheckerFunction] = {}

    def register_checker(self, checker_ref: str, checker: PreconditionCheckerFunction) -> None:
        """
        Register a checker implementation; overwrites an existing one.

        Raises:
            ValueError: If ``checker_ref`` is empty or not a string.
            TypeError: If ``checker`` is not callable.
        """
        if not checker_ref or not isinstance(checker_ref, str):
            raise ValueError("Checker reference must be a non-empty string")
        if not callable(checker):
            raise TypeError(f'Checker for "{checker_ref}" must be a function')
        self._checkers[checker_ref] = checker

    def register_many(self, checkers: Mapping[str, PreconditionCheckerFunction]) -> None:
        for checker_ref, checker in checkers.items():
            self.register_checker(checker_ref, checker)

    def get_checker(self, checker_ref: str) -> Optional[PreconditionCheckerFunction]:
        return self._checkers.get(checker_ref)

    def has_checker(self, checker_ref: str) -> bool:
        return checker_ref in self._checkers

    def unregister_checker(self, checker_ref: str) -> None:
        self._checkers.pop(checker_ref, None)

    def clear(self) -> None:
        self._checkers.clear()

    def registered_refs(self) -> List[str]:
        return list(self._checkers)

    async def check_all(
        self,
        preconditions: Optional[Sequence[Precondition]],
        context: AppContext,
    ) -> PreconditionResult:
        """
        Evaluate preconditions in declaration order, stopping at the first failure.

        Args:
            preconditions: The capability's precondition list; ``None`` or empty passes.
            context: Shared application context handed to every checker.
        """
        if not preconditions:
            return PASSED
        for precondition in preconditions:
            result = await self.check_one(precondition, context)
            if not result.passed:
                return result
        return PASSED

    async def check_one(self, precondition: Precondition, context: AppContext) -> PreconditionResult:
        checker_ref = precondition.checker.handler_ref
        checker = self._checkers.get(checker_ref)

        if checker is None:
            logger.warning(f'Precondition checker "{checker_ref}" is not registered')
            return PreconditionResult(
                passed=False,
                failed_condition=FailedCondition(
                    description=precondition.description,
                    error_message=f'Precondition checker "{checker_ref}" not found',
                ),
            )

        try:
            outcome = checker(context)
            if inspect.isawaitable(outcome):
                outcome = await outcome
        except Exception as e:
            logger.debug(f'Precondition checker "{checker_ref}" raised: {e!r}')
            return PreconditionResult(
                passed=False,
                failed_condition=FailedCondition(
                    description=precondition.description,
                    error_message=f"Precondition check failed: {str(e) or 'Unknown error'}",
                ),
            )

        if not outcome:
            return PreconditionResult(
                passed=False,
                failed_condition=FailedCondition(
                    description=precondition.description,
                    error_message=precondition.error_message,
                ),
            )
        return PASSED
