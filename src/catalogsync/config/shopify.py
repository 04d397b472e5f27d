"""Shopify Admin API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import ResilienceConfig, RetryPolicy

DEFAULT_SHOPIFY_API_VERSION = "2024-04"
SHOPIFY_TIMEOUT_SECONDS = 30.0

# Throttled calls are retried by the sync engine so every attempt passes the
# rate limiter again; the transport only retries requests that never connected.
SHOPIFY_RETRY_POLICY = RetryPolicy(status_forcelist=frozenset())


@dataclass(frozen=True, slots=True)
class ShopifyConfig:
    shop_domain: str
    access_token: str
    api_version: str
    resilience: ResilienceConfig


def shopify_base_url(shop_domain: str, api_version: str) -> str:
    domain = shop_domain.removeprefix("https://").removeprefix("http://").rstrip("/")
    return f"https://{domain}/admin/api/{api_version}/"


def get_shopify_config(*, retry: RetryPolicy | None = None) -> ShopifyConfig:
    values = require_env_vars(("SHOPIFY_SHOP", "SHOPIFY_ADMIN_TOKEN"))
    shop_domain = values["SHOPIFY_SHOP"]
    token = values["SHOPIFY_ADMIN_TOKEN"]
    api_version = optional_env_var("SHOPIFY_API_VERSION") or DEFAULT_SHOPIFY_API_VERSION

    resilience = ResilienceConfig(
        name="shopify",
        base_url=shopify_base_url(shop_domain, api_version),
        timeout_seconds=SHOPIFY_TIMEOUT_SECONDS,
        retry=retry or SHOPIFY_RETRY_POLICY,
        default_headers={
            "X-Shopify-Access-Token": token,
            "Content-Type": "application/json",
        },
    )
    return ShopifyConfig(
        shop_domain=shop_domain,
        access_token=token,
        api_version=api_version,
        resilience=resilience,
    )
