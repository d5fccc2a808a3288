"""Input validation for intents and strategies.

 - ``ParameterValidator``: one value against one parameter contract.
 - ``StrategyValidator``: intent structure, capability resolution and full
   parameter validation, per intent or for an ordered strategy.
 """

from .parameters import ParameterValidationResult, ParameterValidator
from .strategy import (
    StrategyDetailedValidationResult,
    StrategyValidationResult,
    StrategyValidator,
    capability_id_of,
    coerce_intent,
)

__all__ = [
    "ParameterValidationResult",
    "ParameterValidator",
    "StrategyDetailedValidationResult",
    "StrategyValidationResult",
    "StrategyValidator",
    "capability_id_of",
    "coerce_intent",
]
