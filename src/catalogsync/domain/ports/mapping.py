"""Port for the durable identity mapping table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from .catalog import RemoteIds


@dataclass
class IdentityMapping:
    """Row correlating one identity key with its remote product and variant."""

    identity_key: str
    product_id: int
    variant_id: int

    @property
    def remote_ids(self) -> RemoteIds:
        return RemoteIds(product_id=self.product_id, variant_id=self.variant_id)


@runtime_checkable
class IdentityMappingRepository(Protocol):
    """Session-scoped access to mapping rows."""

    def get(self, identity_key: str) -> IdentityMapping | None: ...

    def upsert(self, mapping: IdentityMapping) -> None: ...

    def count(self) -> int: ...


@runtime_checkable
class IdentityMappingStore(Protocol):
    """Durable store; ``upsert`` returns only once the row survives a process exit."""

    def lookup(self, identity_key: str) -> RemoteIds | None: ...

    def upsert(self, identity_key: str, product_id: int, variant_id: int) -> None: ...


__all__ = ["IdentityMapping", "IdentityMappingRepository", "IdentityMappingStore"]
