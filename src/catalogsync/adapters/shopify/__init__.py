"""Public interface for the Shopify catalog adapter."""

from __future__ import annotations

from .client import ShopifyCatalogClient
from .translator import (
    build_create_payload,
    build_metafields,
    build_product_update_payload,
    build_tags,
    build_variant_update_payload,
    format_money,
)

__all__ = [
    "ShopifyCatalogClient",
    "build_create_payload",
    "build_metafields",
    "build_product_update_payload",
    "build_tags",
    "build_variant_update_payload",
    "format_money",
]
