"""In-memory identity mapping stores for engine tests."""

from __future__ import annotations

from catalogsync.domain.errors import MappingStoreError
from catalogsync.domain.ports.catalog import RemoteIds
from catalogsync.domain.ports.mapping import IdentityMappingStore


class InMemoryMappingStore(IdentityMappingStore):
    def __init__(self, rows: dict[str, RemoteIds] | None = None) -> None:
        self.rows: dict[str, RemoteIds] = dict(rows or {})
        self.upserts: list[str] = []

    def lookup(self, identity_key: str) -> RemoteIds | None:
        return self.rows.get(identity_key)

    def upsert(self, identity_key: str, product_id: int, variant_id: int) -> None:
        self.upserts.append(identity_key)
        self.rows[identity_key] = RemoteIds(product_id=product_id, variant_id=variant_id)

    def count(self) -> int:
        return len(self.rows)


class UnavailableMappingStore(IdentityMappingStore):
    """Store whose backing database is gone."""

    def lookup(self, identity_key: str) -> RemoteIds | None:
        raise MappingStoreError(f"Lookup failed for {identity_key}: disk I/O error")

    def upsert(self, identity_key: str, product_id: int, variant_id: int) -> None:
        raise MappingStoreError(f"Upsert failed for {identity_key}: disk I/O error")


class ReadOnlyMappingStore(InMemoryMappingStore):
    """Store that answers lookups but cannot persist new rows."""

    def upsert(self, identity_key: str, product_id: int, variant_id: int) -> None:
        raise MappingStoreError(
            f"Upsert failed for {identity_key}: attempt to write a readonly database"
        )
