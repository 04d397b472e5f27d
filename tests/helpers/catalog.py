"""In-memory catalog double recording every remote call."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from catalogsync.domain.errors import CatalogHTTPError, CatalogThrottledError
from catalogsync.domain.ports.catalog import CatalogGateway, RemoteIds
from catalogsync.domain.records import derive_sku

if TYPE_CHECKING:
    from collections.abc import Iterable

    from catalogsync.domain.records import NormalizedRecord


@dataclass(slots=True)
class CatalogCall:
    operation: str
    target: str | int
    started_at: float


@dataclass
class FakeCatalog(CatalogGateway):
    """Catalog double recording every call.

    ``failing_keys`` answer every call for them with HTTP 422. ``throttled_keys``
    answer the first ``throttle_count`` calls for them with HTTP 429.
    """

    latency: float = 0.0
    failing_keys: Iterable[str] = ()
    throttled_keys: Iterable[str] = ()
    throttle_count: int = 1
    sku_prefix: str = "AWG-"
    calls: list[CatalogCall] = field(default_factory=list)
    products: dict[str, RemoteIds] = field(default_factory=dict)
    in_flight: int = 0
    max_in_flight: int = 0
    _next_id: int = 1000
    _throttled: dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.failing_keys = frozenset(self.failing_keys)
        self.throttled_keys = frozenset(self.throttled_keys)

    def operations(self, name: str) -> list[CatalogCall]:
        return [call for call in self.calls if call.operation == name]

    def seed_product(self, identity_key: str) -> RemoteIds:
        """Register a product that exists remotely without a local mapping."""
        ids = self._mint()
        self.products[derive_sku(identity_key, self.sku_prefix)] = ids
        return ids

    async def create_entity(self, record: NormalizedRecord) -> RemoteIds:
        await self._call("create_entity", record.identity_key, record.identity_key)
        ids = self._mint()
        self.products[derive_sku(record.identity_key, self.sku_prefix)] = ids
        return ids

    async def update_product(self, product_id: int, record: NormalizedRecord) -> None:
        await self._call("update_product", product_id, record.identity_key)

    async def update_variant(self, variant_id: int, record: NormalizedRecord) -> None:
        await self._call("update_variant", variant_id, record.identity_key)

    async def find_by_sku(self, sku: str) -> RemoteIds | None:
        await self._call("find_by_sku", sku, None)
        return self.products.get(sku)

    def _mint(self) -> RemoteIds:
        self._next_id += 2
        return RemoteIds(product_id=self._next_id, variant_id=self._next_id + 1)

    async def _call(self, operation: str, target: str | int, identity_key: str | None) -> None:
        loop = asyncio.get_running_loop()
        self.calls.append(CatalogCall(operation, target, loop.time()))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.latency)
        finally:
            self.in_flight -= 1
        if identity_key is not None and identity_key in self.throttled_keys:
            seen = self._throttled.get(identity_key, 0)
            if seen < self.throttle_count:
                self._throttled[identity_key] = seen + 1
                raise CatalogThrottledError(
                    f"{operation} throttled for {identity_key}",
                    status_code=429,
                    retry_after=0.0,
                )
        if identity_key is not None and identity_key in self.failing_keys:
            raise CatalogHTTPError(
                f"{operation} rejected for {identity_key}",
                status_code=422,
                body='{"errors": "unprocessable"}',
            )
