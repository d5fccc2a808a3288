from __future__ import annotations

"""Handler registry.

The registry maps a handler reference (``Capability.handler.handler_ref``) to
the host-supplied callable that implements it.

The engine uses this registry to resolve a capability's primary handler at
dispatch time and to verify at construction time that every primary and undo
handler is wired.
"""

from typing import Dict, List, Mapping, Optional

from .base import HandlerFunction


class HandlerRegistry:
    """
    In-memory mapping of handler references to callables.

    One registry is owned by one ``Engine``. It stays mutable after
    construction so hosts can add handlers for capabilities they introduce later.

    Notes:
        - ``register`` overwrites any existing mapping for the reference (last writer wins).
        - ``get`` returns ``None`` when the reference is missing.
    """

    def __init__(self) -> None:
        """Initialize an empty handler registry."""
        self._handlers: Dict[str, HandlerFunction] = {}

    def register(self, handler_ref: str, handler: HandlerFunction) -> None:
        """
        Register a handler implementation.

        Args:
            handler_ref: Non-empty reference used by manifests to name the handler.
            handler: The callable invoked with the intent parameters.

        Raises:
            ValueError: If ``handler_ref`` is empty or not a string.
            TypeError: If ``handler`` is not callable.
        """
        if not handler_ref or not isinstance(handler_ref, str):
            raise ValueError("Handler reference must be a non-empty string")
        if not callable(handler):
            raise TypeError(f'Handler for "{handler_ref}" must be a function')
        self._handlers[handler_ref] = handler

    def register_many(self, handlers: Mapping[str, HandlerFunction]) -> None:
        for handler_ref, handler in handlers.items():
            self.register(handler_ref, handler)

    def get(self, handler_ref: str) -> Optional[HandlerFunction]:
        return self._handlers.get(handler_ref)

    def has(self, handler_ref: str) -> bool:
        return handler_ref in self._handlers

    def unregister(self, handler_ref: str) -> None:
        """Remove a handler; unknown references are ignored."""
        self._handlers.pop(handler_ref, None)

    def clear(self) -> None:
        self._handlers.clear()

    def registered_refs(self) -> List[str]:
        return list(self._handlers)

    def __contains__(self, handler_ref: object) -> bool:
        return handler_ref in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)
