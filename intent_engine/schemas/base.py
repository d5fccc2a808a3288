"""Pydantic base schema utilities for intent engine models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """
    Base Pydantic model for all engine schemas.

    Configures common Pydantic behaviors:
    - ``alias_generator=to_camel``: Manifest documents and planner payloads use camelCase keys
      (``handlerRef``, ``isRequired``); Python code uses the snake_case field names.
    - ``populate_by_name=True``: Allow initialization by alias or field name.
    - ``extra="forbid"``: Prevent unknown fields from slipping into the model, ensuring strict validation.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )
