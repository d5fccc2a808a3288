"""Capability lookup and handler wiring.

 - ``CapabilityDirectory``: capability id -> definition from the manifest.
 - ``HandlerRegistry``: handler reference -> host callable.
 - ``HandlerFunction``/``PreconditionCheckerFunction``: callable contracts.
 """

from .base import AppContext, HandlerFunction, PreconditionCheckerFunction
from .directory import CapabilityDirectory
from .registry import HandlerRegistry

__all__ = [
    "AppContext",
    "CapabilityDirectory",
    "HandlerFunction",
    "HandlerRegistry",
    "PreconditionCheckerFunction",
]
