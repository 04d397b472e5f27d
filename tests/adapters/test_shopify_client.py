from __future__ import annotations

import asyncio
import json
from collections.abc import Callable  # noqa: TC003
from itertools import pairwise

import httpx
import pytest

from catalogsync.adapters.http_resilience import ResilientClient
from catalogsync.adapters.shopify import ShopifyCatalogClient
from catalogsync.adapters.shopify.client import sku_search_query
from catalogsync.config import MissingConfigurationError, get_shopify_config
from catalogsync.config.http_resilience import ResilienceConfig, RetryPolicy
from catalogsync.domain.errors import (
    CatalogHTTPError,
    CatalogResponseError,
    CatalogThrottledError,
    CatalogTransportError,
)
from catalogsync.domain.outcomes import BatchResult
from catalogsync.domain.ports.catalog import RemoteIds
from catalogsync.domain.rate_limiting import RateLimiter
from catalogsync.domain.sync_engine import SyncEngine
from tests.helpers.mapping_store import InMemoryMappingStore
from tests.helpers.records import make_record

Handler = Callable[[httpx.Request], httpx.Response]


def _make_client_factory(handler: Handler) -> Callable[[ResilienceConfig], ResilientClient]:
    def factory(resilience: ResilienceConfig) -> ResilientClient:
        return ResilientClient(resilience, transport=httpx.MockTransport(handler))

    return factory


@pytest.fixture
def shopify_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SHOPIFY_SHOP", "dealer.myshopify.com")
    monkeypatch.setenv("SHOPIFY_ADMIN_TOKEN", "shpat_test")
    monkeypatch.delenv("SHOPIFY_API_VERSION", raising=False)


def _client(handler: Handler, *, retry: RetryPolicy | None = None) -> ShopifyCatalogClient:
    config = get_shopify_config(retry=retry or RetryPolicy(total=0))
    return ShopifyCatalogClient(config=config, client_factory=_make_client_factory(handler))


def _product_body(product_id: int = 111, variant_id: int = 222) -> dict[str, object]:
    return {
        "product": {
            "id": product_id,
            "title": "Volkswagen Golf 2.0 TDI",
            "handle": "volkswagen-golf",
            "variants": [{"id": variant_id, "product_id": product_id, "sku": "AWG-1001"}],
        }
    }


@pytest.mark.usefixtures("shopify_env")
def test_create_entity_posts_product_and_returns_ids() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json=_product_body())

    ids = asyncio.run(_client(handler).create_entity(make_record("1001")))

    assert ids == RemoteIds(product_id=111, variant_id=222)
    request = seen[0]
    assert request.method == "POST"
    assert request.url == "https://dealer.myshopify.com/admin/api/2024-04/products.json"
    assert request.headers["X-Shopify-Access-Token"] == "shpat_test"
    payload = json.loads(request.content)
    variant = payload["product"]["variants"][0]
    assert variant["sku"] == "AWG-1001"
    assert variant["price"] == "12345.60"
    assert "compare_at_price" not in variant


@pytest.mark.usefixtures("shopify_env")
def test_update_calls_target_product_then_variant() -> None:
    seen: list[tuple[str, str, dict[str, object]]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        seen.append((request.method, request.url.path, payload))
        if request.url.path.endswith("/variants/222.json"):
            return httpx.Response(200, json={"variant": {"id": 222}})
        return httpx.Response(200, json=_product_body())

    async def scenario() -> None:
        client = _client(handler)
        record = make_record("1001")
        await client.update_product(111, record)
        await client.update_variant(222, record)

    asyncio.run(scenario())

    assert [(method, path) for method, path, _ in seen] == [
        ("PUT", "/admin/api/2024-04/products/111.json"),
        ("PUT", "/admin/api/2024-04/variants/222.json"),
    ]
    product_payload = seen[0][2]["product"]
    assert isinstance(product_payload, dict)
    assert product_payload["id"] == 111
    assert "variants" not in product_payload
    assert seen[1][2] == {"variant": {"id": 222, "sku": "AWG-1001", "price": "12345.60"}}


@pytest.mark.usefixtures("shopify_env")
@pytest.mark.parametrize("status", [429, 503])
def test_throttled_response_surfaces_once_with_retry_after(status: int) -> None:
    attempts = 0

    def handler(_request: httpx.Request) -> httpx.Response:
        nonlocal attempts
        attempts += 1
        return httpx.Response(status, headers={"Retry-After": "2"}, text="Exceeded 2 calls/s")

    client = ShopifyCatalogClient(
        config=get_shopify_config(),
        client_factory=_make_client_factory(handler),
    )
    with pytest.raises(CatalogThrottledError) as excinfo:
        asyncio.run(client.create_entity(make_record("1001")))

    assert attempts == 1
    assert excinfo.value.status_code == status
    assert excinfo.value.retry_after == 2.0
    assert "Exceeded" in excinfo.value.body


@pytest.mark.usefixtures("shopify_env")
def test_throttled_retries_keep_limiter_spacing() -> None:
    loop_times: list[float] = []
    throttled: set[str] = set()

    def handler(request: httpx.Request) -> httpx.Response:
        loop_times.append(asyncio.get_running_loop().time())
        payload = json.loads(request.content)
        sku = payload["product"]["variants"][0]["sku"]
        if sku not in throttled:
            throttled.add(sku)
            return httpx.Response(429, headers={"Retry-After": "0.1"})
        return httpx.Response(201, json=_product_body())

    async def scenario() -> BatchResult:
        engine = SyncEngine(
            store=InMemoryMappingStore(),
            catalog=ShopifyCatalogClient(
                config=get_shopify_config(),
                client_factory=_make_client_factory(handler),
            ),
            limiter=RateLimiter(max_concurrent=2, min_interval=0.5),
        )
        return await engine.sync_batch([make_record("1"), make_record("2")])

    result = asyncio.run(scenario())

    assert result.created == 2
    assert len(loop_times) == 4
    for earlier, later in pairwise(sorted(loop_times)):
        assert later - earlier >= 0.5 - 0.01


@pytest.mark.usefixtures("shopify_env")
def test_validation_failure_is_not_retried() -> None:
    attempts = 0

    def handler(_request: httpx.Request) -> httpx.Response:
        nonlocal attempts
        attempts += 1
        return httpx.Response(422, json={"errors": {"title": ["can't be blank"]}})

    client = _client(handler, retry=RetryPolicy(total=3))
    with pytest.raises(CatalogHTTPError) as excinfo:
        asyncio.run(client.create_entity(make_record("1001")))

    assert attempts == 1
    assert excinfo.value.status_code == 422
    assert not isinstance(excinfo.value, CatalogThrottledError)


@pytest.mark.usefixtures("shopify_env")
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(201, json={"product": {"id": 111, "variants": []}}),
        httpx.Response(201, json={"product": {"title": "no id"}}),
        httpx.Response(201, text="<html>maintenance</html>"),
    ],
)
def test_malformed_create_response_raises_response_error(response: httpx.Response) -> None:
    client = _client(lambda _request: response)

    with pytest.raises(CatalogResponseError):
        asyncio.run(client.create_entity(make_record("1001")))


@pytest.mark.usefixtures("shopify_env")
def test_network_failure_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(CatalogTransportError):
        asyncio.run(_client(handler).create_entity(make_record("1001")))


@pytest.mark.usefixtures("shopify_env")
def test_find_by_sku_matches_exact_sku_only() -> None:
    queries: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        queries.append(payload["variables"]["q"])
        return httpx.Response(
            200,
            json={
                "data": {
                    "productVariants": {
                        "edges": [
                            {
                                "node": {
                                    "id": "gid://shopify/ProductVariant/222",
                                    "sku": "AWG-1001",
                                    "product": {"id": "gid://shopify/Product/111"},
                                }
                            }
                        ]
                    }
                }
            },
        )

    async def scenario() -> tuple[RemoteIds | None, RemoteIds | None]:
        client = _client(handler)
        return await client.find_by_sku("AWG-1001"), await client.find_by_sku("AWG-100")

    exact, fuzzy = asyncio.run(scenario())

    assert exact == RemoteIds(product_id=111, variant_id=222)
    assert fuzzy is None
    assert queries == ['sku:"AWG-1001"', 'sku:"AWG-100"']


@pytest.mark.parametrize(
    ("sku", "expected"),
    [
        ("AWG-1001", 'sku:"AWG-1001"'),
        ("AWG-O'Neil", "sku:\"AWG-O'Neil\""),
        ('AWG-12"x', r'sku:"AWG-12\"x"'),
        ("AWG-a\\b", r'sku:"AWG-a\\b"'),
    ],
)
def test_sku_search_query_quotes_the_sku(sku: str, expected: str) -> None:
    assert sku_search_query(sku) == expected


@pytest.mark.usefixtures("shopify_env")
def test_find_by_sku_reports_graphql_errors() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"errors": [{"message": "Access denied"}]})

    with pytest.raises(CatalogResponseError, match="Access denied"):
        asyncio.run(_client(handler).find_by_sku("AWG-1001"))


def test_missing_credentials_are_a_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SHOPIFY_SHOP", "dealer.myshopify.com")
    monkeypatch.delenv("SHOPIFY_ADMIN_TOKEN", raising=False)

    with pytest.raises(MissingConfigurationError, match="SHOPIFY_ADMIN_TOKEN"):
        get_shopify_config()
