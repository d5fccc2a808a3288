from __future__ import annotations

"""Capability directory.

Read-only lookup of capability definitions in a loaded manifest. Both the
engine and the strategy executor resolve intents through it.
"""

from typing import List, Optional

from ..schemas.manifest import Capability, Manifest


class CapabilityDirectory:
    """Resolve capabilities of one manifest by id."""

    def __init__(self, manifest: Manifest) -> None:
        self._manifest = manifest

    @property
    def manifest(self) -> Manifest:
        return self._manifest

    @property
    def manifest_key(self) -> str:
        """Identify the loaded manifest as ``<name>@<version>``."""
        return f"{self._manifest.metadata.name}@{self._manifest.version}"

    def get_capability(self, capability_id: str) -> Optional[Capability]:
        return self._manifest.capabilities.get(capability_id)

    def has_capability(self, capability_id: str) -> bool:
        return capability_id in self._manifest.capabilities

    def capability_ids(self) -> List[str]:
        return list(self._manifest.capabilities)

    def get_handler_ref(self, capability_id: str) -> str:
        """
        Return the handler reference of the capability whose ``id`` matches.

        Matching is done on ``Capability.id`` rather than the manifest key, so an
        undo capability is found even when it is keyed differently. Returns an
        empty string when no capability matches.
        """
        for capability in self._manifest.capabilities.values():
            if capability.id == capability_id:
                return capability.handler.handler_ref
        return ""
