from __future__ import annotations

"""Manifest models.

A manifest is the host application's catalog of capabilities. The engine
consumes an already-validated manifest: these models only parse the document
into typed objects (camelCase keys as in the JSON form, snake_case attributes
in Python). Semantic checks such as semver rules are the job of the tooling
that produces the manifest.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field

from .base import BaseSchema


class ParameterType(str, Enum):
    string = "string"
    number = "number"
    boolean = "boolean"
    enum = "enum"
    object = "object"
    array = "array"
    file = "file"
    date = "date"
    datetime = "datetime"
    time = "time"
    any = "any"


class CollectionApproach(str, Enum):
    """When a parameter value is expected from the caller.

    Attributes:
        upfront: Must be supplied with the initiating intent.
        on_demand: May be deferred and collected later through pause/resume
            (typically sensitive input such as a card CVV).
    """

    upfront = "upfront"
    on_demand = "on-demand"


class PreconditionType(str, Enum):
    state = "state"
    permission = "permission"
    rate_limit = "rateLimit"
    custom = "custom"


class HandlerRef(BaseSchema):
    """Named reference to a callable registered with the engine."""

    name: str
    handler_ref: str = Field(min_length=1)


class Entity(BaseSchema):
    """A domain entity a capability declares it touches (its side effect)."""

    name: str = Field(min_length=1)
    properties: Dict[str, Any] = Field(default_factory=dict)


class EnumOption(BaseSchema):
    value: str
    label: str


class Validator(BaseSchema):
    """
    Constraint set attached to a parameter.

    ``min``/``max`` bound numbers by value and strings by length. ``pattern`` is
    a regular expression searched in string values. ``enum`` restricts the value
    to a fixed set. ``custom`` is carried for manifest completeness; the engine
    does not evaluate it.
    """

    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[str] = None
    enum: Optional[List[EnumOption]] = None
    custom: Optional[HandlerRef] = None
    is_async: Optional[bool] = None


class Parameter(BaseSchema):
    name: str
    type: ParameterType
    is_required: bool
    description: str = ""
    default_value: Any = None
    validator: Optional[Validator] = None
    examples: Optional[List[Any]] = None
    is_sensitive: bool = False
    collection_approach: CollectionApproach = CollectionApproach.upfront

    @property
    def is_on_demand(self) -> bool:
        return self.collection_approach == CollectionApproach.on_demand


class Precondition(BaseSchema):
    type: PreconditionType = PreconditionType.custom
    checker: HandlerRef
    description: str
    error_message: str
    is_async: Optional[bool] = None


class Capability(BaseSchema):
    """
    A named, parameterized action exposed by the host application.

    Attributes:
        id: Unique, stable key of the capability within the manifest.
        handler: Reference to the primary handler in the handler table.
        parameters: Parameter contracts validated before dispatch.
        preconditions: Ordered gates evaluated against the shared context.
        side_effects: Entities the capability changes; reported on success.
        undo_capability_id: Id of another capability that compensates this one
            during transactional rollback.
    """

    id: str = Field(min_length=1)
    display_name: str
    description: str
    examples: Optional[List[str]] = None
    category: Optional[str] = None

    handler: HandlerRef
    parameters: List[Parameter] = Field(default_factory=list)
    preconditions: Optional[List[Precondition]] = None
    side_effects: Optional[List[Entity]] = None
    requires_confirmation: Optional[bool] = None

    undo_capability_id: Optional[str] = None

    is_async: Optional[bool] = None


class ManifestMetadata(BaseSchema):
    name: str
    description: str
    author: Optional[str] = None


class Manifest(BaseSchema):
    schema_url: str = Field(default="", alias="$schema")
    version: str
    metadata: ManifestMetadata
    capabilities: Dict[str, Capability]
    definitions: Optional[Dict[str, Any]] = None
    context: Optional[Dict[str, Any]] = None
