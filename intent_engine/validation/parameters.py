from __future__ import annotations

"""Parameter validation.

Checks one provided value against one declared ``Parameter``: presence, then
the declared type, then (only when the type matched) the constraint set.
``validate_all`` applies this to every declared parameter of a capability and
never stops at the first bad parameter, so a caller sees every problem at once.
"""

import os
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time
from numbers import Real
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from ..schemas.manifest import Parameter, ParameterType, Validator

_DATE = TypeAdapter(date)
_DATETIME = TypeAdapter(datetime)
_TIME = TypeAdapter(time)

_TEMPORAL_ADAPTERS = {
    ParameterType.date: (_DATE, _DATETIME),
    ParameterType.datetime: (_DATETIME, _DATE),
    ParameterType.time: (_TIME, _DATETIME),
}

# Native values accepted per temporal kind; datetime is a subclass of date.
_TEMPORAL_TYPES = {
    ParameterType.date: (date,),
    ParameterType.datetime: (date,),
    ParameterType.time: (time, datetime),
}


@dataclass(frozen=True)
class ParameterValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)


def _is_absent(value: Any) -> bool:
    return value is None


def _fmt(bound: float) -> str:
    return str(int(bound)) if float(bound).is_integer() else str(bound)


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _parses_as(value: str, adapters: Iterable[TypeAdapter]) -> bool:
    for adapter in adapters:
        try:
            adapter.validate_python(value)
        except ValidationError:
            continue
        return True
    return False


class ParameterValidator:
    """Validate parameter values against their declared contracts."""

    def validate(self, param: Parameter, value: Any) -> ParameterValidationResult:
        """
        Validate a single value.

        Args:
            param: The declared parameter contract.
            value: The provided value; ``None`` counts as absent.

        Returns:
            A result with every error found for this parameter.
        """
        if _is_absent(value):
            if param.is_required:
                return ParameterValidationResult(False, [f'Parameter "{param.name}" is required'])
            return ParameterValidationResult(True, [])

        errors: List[str] = []
        type_error = self._validate_type(param, value)
        if type_error is not None:
            errors.append(type_error)

        if param.validator is not None and not errors:
            errors.extend(self._validate_constraints(param.name, param.validator, value))

        return ParameterValidationResult(not errors, errors)

    def validate_all(
        self,
        params: Sequence[Parameter],
        provided: Mapping[str, Any],
        *,
        skip: Optional[Iterable[str]] = None,
    ) -> ParameterValidationResult:
        """
        Validate every declared parameter and concatenate the errors.

        Args:
            params: The capability's parameter contracts.
            provided: Parameter name -> provided value.
            skip: Names of parameters to leave out (used for deferred
                on-demand parameters when pre-validating a strategy).
        """
        skipped = set(skip or ())
        errors: List[str] = []
        for param in params:
            if param.name in skipped:
                continue
            errors.extend(self.validate(param, provided.get(param.name)).errors)
        return ParameterValidationResult(not errors, errors)

    def _validate_type(self, param: Parameter, value: Any) -> Optional[str]:
        kind = param.type
        name = param.name
        if kind == ParameterType.string:
            return None if isinstance(value, str) else f'Parameter "{name}" must be a string'
        if kind == ParameterType.number:
            return None if _is_number(value) else f'Parameter "{name}" must be a number'
        if kind == ParameterType.boolean:
            return None if isinstance(value, bool) else f'Parameter "{name}" must be a boolean'
        if kind == ParameterType.array:
            return None if isinstance(value, (list, tuple)) else f'Parameter "{name}" must be an array'
        if kind == ParameterType.object:
            return None if isinstance(value, Mapping) else f'Parameter "{name}" must be an object'
        if kind in (ParameterType.enum, ParameterType.any):
            return None
        if kind in _TEMPORAL_ADAPTERS:
            return self._validate_temporal(name, kind, value)
        if kind == ParameterType.file:
            if isinstance(value, (str, bytes, os.PathLike)) or callable(getattr(value, "read", None)):
                return None
            return f'Parameter "{name}" must be a file path, bytes or a readable file object'
        return f"Unknown type: {kind}"

    def _validate_temporal(self, name: str, kind: ParameterType, value: Any) -> Optional[str]:
        if isinstance(value, _TEMPORAL_TYPES[kind]):
            return None
        if isinstance(value, str):
            if _parses_as(value, _TEMPORAL_ADAPTERS[kind]):
                return None
            return f'Parameter "{name}" has an invalid {kind.value} format'
        return f'Parameter "{name}" must be a {kind.value} string or a {kind.value} object'

    def _validate_constraints(self, name: str, validator: Validator, value: Any) -> List[str]:
        errors: List[str] = []

        if _is_number(value):
            if validator.min is not None and value < validator.min:
                errors.append(f'Parameter "{name}" must be at least {_fmt(validator.min)}')
            if validator.max is not None and value > validator.max:
                errors.append(f'Parameter "{name}" must be at most {_fmt(validator.max)}')

        if isinstance(value, str):
            if validator.min is not None and len(value) < validator.min:
                errors.append(f'Parameter "{name}" must be at least {_fmt(validator.min)} characters')
            if validator.max is not None and len(value) > validator.max:
                errors.append(f'Parameter "{name}" must be at most {_fmt(validator.max)} characters')
            if validator.pattern:
                try:
                    matched = re.search(validator.pattern, value) is not None
                except re.error:
                    errors.append(f'Parameter "{name}" has an invalid pattern constraint')
                else:
                    if not matched:
                        errors.append(f'Parameter "{name}" does not match required pattern')

        if validator.enum is not None:
            allowed = [option.value for option in validator.enum]
            if value not in allowed:
                errors.append(f'Parameter "{name}" must be one of: {", ".join(allowed)}')

        return errors
