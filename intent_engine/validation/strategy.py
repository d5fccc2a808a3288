from __future__ import annotations

"""Intent and strategy validation.

``StrategyValidator`` checks the structure of raw intents (mappings coming from
a planner, or ``Intent`` models), resolves their capability in the directory
and validates every parameter through ``ParameterValidator``. A strategy is
validated intent by intent and each error is tagged with its step index.
"""

import difflib
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence

from ..capabilities.directory import CapabilityDirectory
from ..errors import StrategyValidationError
from ..schemas.domain import Intent
from .parameters import ParameterValidator

_MAX_SUGGESTIONS = 3


@dataclass(frozen=True)
class StrategyValidationResult:
    is_valid: bool
    errors: List[StrategyValidationError] = field(default_factory=list)


@dataclass(frozen=True)
class StrategyDetailedValidationResult(StrategyValidationResult):
    suggestions: List[str] = field(default_factory=list)


def capability_id_of(raw: Any) -> str:
    """Best-effort capability id of a raw intent, ``""`` when it has none."""
    if isinstance(raw, Intent):
        return raw.capability_id
    if isinstance(raw, Mapping):
        value = raw.get("capabilityId", raw.get("capability_id"))
        return value if isinstance(value, str) else ""
    return ""


def coerce_intent(raw: Any, index: int = 0) -> Intent:
    """
    Build an ``Intent`` from a raw intent that passed
    ``StrategyValidator.validate_structure``.

    Raises:
        StrategyValidationError: If the intent is malformed.
    """
    if isinstance(raw, Intent):
        return raw
    parameters = raw.get("parameters") if isinstance(raw, Mapping) else None
    capability_id = capability_id_of(raw)
    if not capability_id or not isinstance(parameters, Mapping):
        raise StrategyValidationError("Intent must be an object with capabilityId and parameters", index)
    return Intent(capability_id=capability_id, parameters=dict(parameters))


class StrategyValidator:
    """Validate intents and ordered strategies against one manifest."""

    def __init__(self, directory: CapabilityDirectory, param_validator: Optional[ParameterValidator] = None) -> None:
        self._directory = directory
        self._params = param_validator or ParameterValidator()

    def validate(self, strategy: Any, *, allow_deferred: bool = False) -> StrategyValidationResult:
        """
        Validate an ordered list of intents.

        Args:
            strategy: The candidate strategy (list or tuple of intents).
            allow_deferred: Accept absent on-demand required parameters; they
                will be collected through pause/resume before their step runs.
        """
        if not isinstance(strategy, (list, tuple)):
            return StrategyValidationResult(False, [StrategyValidationError("Strategy must be an array", -1)])
        if not strategy:
            return StrategyValidationResult(False, [StrategyValidationError("Strategy cannot be empty", -1)])

        errors: List[StrategyValidationError] = []
        for index, intent in enumerate(strategy):
            errors.extend(self.validate_intent(intent, index, allow_deferred=allow_deferred))
        return StrategyValidationResult(not errors, errors)

    def validate_intent(
        self, intent: Any, index: int = 0, *, allow_deferred: bool = False
    ) -> List[StrategyValidationError]:
        """
        Validate one intent and return every error found.

        Structural problems stop validation early; parameter problems are all
        reported.
        """
        structural = self.validate_structure(intent, index)
        if structural:
            return structural

        capability_id = capability_id_of(intent)
        parameters = intent.parameters if isinstance(intent, Intent) else intent["parameters"]

        capability = self._directory.get_capability(capability_id)
        if capability is None:
            return [
                StrategyValidationError(
                    f'Capability "{capability_id}" not found in manifest',
                    index,
                    "capabilityId",
                    details=capability_id,
                )
            ]

        skip = None
        if allow_deferred:
            skip = [p.name for p in capability.parameters if p.is_on_demand and parameters.get(p.name) is None]

        result = self._params.validate_all(capability.parameters, parameters, skip=skip)
        return [StrategyValidationError(message, index, "parameters") for message in result.errors]

    def validate_structure(self, intent: Any, index: int = 0) -> List[StrategyValidationError]:
        """Check only the shape of an intent: an object with a capability id and a parameters mapping."""
        if not isinstance(intent, (Intent, Mapping)):
            return [StrategyValidationError("Intent must be an object", index)]
        if not capability_id_of(intent):
            return [StrategyValidationError("Intent missing capabilityId", index, "capabilityId")]
        parameters = intent.parameters if isinstance(intent, Intent) else intent.get("parameters")
        if not isinstance(parameters, Mapping):
            return [StrategyValidationError("Intent missing or invalid parameters object", index, "parameters")]
        return []

    def validate_or_raise(self, strategy: Any, *, allow_deferred: bool = False) -> None:
        """
        Validate a strategy and raise its first error.

        Raises:
            StrategyValidationError: If the strategy is invalid.
        """
        result = self.validate(strategy, allow_deferred=allow_deferred)
        if not result.is_valid:
            raise result.errors[0]

    def validate_with_suggestions(
        self, strategy: Any, *, allow_deferred: bool = False
    ) -> StrategyDetailedValidationResult:
        """Validate a strategy and suggest close capability ids for unknown ones."""
        result = self.validate(strategy, allow_deferred=allow_deferred)
        suggestions: List[str] = []
        for error in result.errors:
            if error.field == "capabilityId" and isinstance(error.details, str):
                suggestion = self.suggest(error.details)
                if suggestion is not None:
                    suggestions.append(suggestion)
        return StrategyDetailedValidationResult(result.is_valid, result.errors, suggestions)

    def suggest(self, capability_id: str) -> Optional[str]:
        similar = self.find_similar_capabilities(capability_id)
        if not similar:
            return None
        return f"Did you mean: {', '.join(similar)}?"

    def find_similar_capabilities(self, query: str) -> List[str]:
        """
        Return up to three capability ids resembling ``query``.

        Substring matches (either direction, case-insensitive) come first,
        followed by close matches by sequence similarity.
        """
        ids: Sequence[str] = self._directory.capability_ids()
        needle = query.lower()
        found = [cid for cid in ids if needle and (needle in cid.lower() or cid.lower() in needle)]
        lowered = {cid.lower(): cid for cid in ids}
        for match in difflib.get_close_matches(needle, list(lowered), n=_MAX_SUGGESTIONS, cutoff=0.6):
            if lowered[match] not in found:
                found.append(lowered[match])
        return found[:_MAX_SUGGESTIONS]
