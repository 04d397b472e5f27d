"""Port for the remote commerce catalog."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from catalogsync.domain.records import NormalizedRecord


@dataclass(frozen=True, slots=True)
class RemoteIds:
    """Identifiers of a remote product and its single variant."""

    product_id: int
    variant_id: int


@runtime_checkable
class CatalogGateway(Protocol):
    """Remote catalog operations; each coroutine issues exactly one remote request."""

    async def create_entity(self, record: NormalizedRecord) -> RemoteIds: ...

    async def update_product(self, product_id: int, record: NormalizedRecord) -> None: ...

    async def update_variant(self, variant_id: int, record: NormalizedRecord) -> None: ...

    async def find_by_sku(self, sku: str) -> RemoteIds | None: ...


__all__ = ["CatalogGateway", "RemoteIds"]
