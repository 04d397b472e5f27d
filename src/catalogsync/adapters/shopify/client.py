"""Shopify Admin API catalog client."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from catalogsync.adapters.http_resilience import ResilientClient, retry_after_seconds
from catalogsync.config.sync import DEFAULT_SKU_PREFIX
from catalogsync.domain.errors import (
    CatalogHTTPError,
    CatalogResponseError,
    CatalogThrottledError,
    CatalogTransportError,
)
from catalogsync.domain.ports.catalog import CatalogGateway, RemoteIds
from catalogsync.domain.records import derive_sku

from .schema import GraphQLVariantsResponse, ProductEnvelope, VariantEnvelope
from .translator import (
    build_create_payload,
    build_product_update_payload,
    build_variant_update_payload,
    parse_gid,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from catalogsync.config.http_resilience import ResilienceConfig
    from catalogsync.config.shopify import ShopifyConfig
    from catalogsync.domain.records import NormalizedRecord

log = getLogger(__name__)

_BODY_EXCERPT = 300
_THROTTLE_STATUSES = frozenset({httpx.codes.TOO_MANY_REQUESTS, httpx.codes.SERVICE_UNAVAILABLE})

FIND_VARIANT_BY_SKU = """
query($q: String!) {
  productVariants(first: 1, query: $q) {
    edges {
      node {
        id
        sku
        product { id }
      }
    }
  }
}
"""


class ShopifyCatalogClient(CatalogGateway):
    """Stateless translator between normalized records and Shopify REST calls.

    Every coroutine issues exactly one HTTP request so the caller can put each
    one behind the shared rate limiter.
    """

    def __init__(
        self,
        *,
        config: ShopifyConfig,
        sku_prefix: str = DEFAULT_SKU_PREFIX,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._sku_prefix = sku_prefix
        self._client_factory = client_factory or ResilientClient

    def sku_for(self, record: NormalizedRecord) -> str:
        return derive_sku(record.identity_key, self._sku_prefix)

    async def create_entity(self, record: NormalizedRecord) -> RemoteIds:
        payload = build_create_payload(record, sku=self.sku_for(record))
        body = await self._send("POST", "products.json", payload)
        try:
            product = ProductEnvelope.model_validate(body).product
        except ValidationError as exc:
            raise CatalogResponseError(f"Malformed product response: {exc}") from exc
        if not product.variants:
            raise CatalogResponseError(f"Product {product.id} was created without a variant")
        ids = RemoteIds(product_id=product.id, variant_id=product.variants[0].id)
        log.debug("Created product %s for %s", ids.product_id, record.identity_key)
        return ids

    async def update_product(self, product_id: int, record: NormalizedRecord) -> None:
        payload = build_product_update_payload(product_id, record)
        body = await self._send("PUT", f"products/{product_id}.json", payload)
        try:
            ProductEnvelope.model_validate(body)
        except ValidationError as exc:
            raise CatalogResponseError(f"Malformed product response: {exc}") from exc

    async def update_variant(self, variant_id: int, record: NormalizedRecord) -> None:
        payload = build_variant_update_payload(variant_id, record, sku=self.sku_for(record))
        body = await self._send("PUT", f"variants/{variant_id}.json", payload)
        try:
            VariantEnvelope.model_validate(body)
        except ValidationError as exc:
            raise CatalogResponseError(f"Malformed variant response: {exc}") from exc

    async def find_by_sku(self, sku: str) -> RemoteIds | None:
        payload = {"query": FIND_VARIANT_BY_SKU, "variables": {"q": sku_search_query(sku)}}
        body = await self._send("POST", "graphql.json", payload)
        try:
            response = GraphQLVariantsResponse.model_validate(body)
        except ValidationError as exc:
            raise CatalogResponseError(f"Malformed GraphQL response: {exc}") from exc
        if response.errors:
            messages = "; ".join(error.message for error in response.errors)
            raise CatalogResponseError(f"GraphQL errors: {messages}")
        if response.data is None:
            raise CatalogResponseError("GraphQL response without data")

        for edge in response.data.product_variants.edges:
            node = edge.node
            # Shopify's search is fuzzy; only an exact SKU counts
            if node.sku != sku:
                continue
            try:
                return RemoteIds(
                    product_id=parse_gid(node.product.id),
                    variant_id=parse_gid(node.id),
                )
            except ValueError as exc:
                raise CatalogResponseError(str(exc)) from exc
        return None

    async def _send(self, method: str, path: str, payload: dict[str, object]) -> object:
        if self._resilience.base_url is None:
            raise CatalogResponseError("Missing Shopify base_url in resilience configuration")
        try:
            async with self._client_factory(self._resilience) as client:
                response = await client.request(method, path, json=payload)
        except httpx.HTTPError as exc:
            raise CatalogTransportError(f"{method} {path} failed: {exc!r}") from exc

        if response.status_code in _THROTTLE_STATUSES:
            raise CatalogThrottledError(
                f"{method} {path} throttled by Shopify (HTTP {response.status_code})",
                status_code=response.status_code,
                body=response.text[:_BODY_EXCERPT],
                retry_after=retry_after_seconds(response),
            )
        if response.is_error:
            raise CatalogHTTPError(
                f"{method} {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text[:_BODY_EXCERPT],
            )
        try:
            return response.json()
        except ValueError as exc:
            raise CatalogResponseError(f"{method} {path} returned non-JSON body") from exc


def sku_search_query(sku: str) -> str:
    """Build a Shopify search term matching ``sku`` as one quoted phrase."""
    escaped = sku.replace("\\", "\\\\").replace('"', '\\"')
    return f'sku:"{escaped}"'
