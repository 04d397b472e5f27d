"""Shopify Admin API request and response schemas."""

from __future__ import annotations

import logging
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)

METAFIELD_NAMESPACE = "specs"


class ShopifyBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow")
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.debug(
            "Shopify %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


# Requests --------------------------------------------------------------------


class ShopifyInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    def to_payload(self) -> dict[str, object]:
        # absent prices must not reach Shopify as null
        return self.model_dump(exclude_none=True)


class MetafieldInput(ShopifyInput):
    namespace: str = METAFIELD_NAMESPACE
    key: str
    value: str
    type: str


class ImageInput(ShopifyInput):
    src: str
    alt: str | None = None


class VariantInput(ShopifyInput):
    id: int | None = None
    sku: str
    price: str | None = None
    compare_at_price: str | None = None
    inventory_quantity: int | None = None
    inventory_management: str | None = None


class ProductInput(ShopifyInput):
    id: int | None = None
    title: str
    vendor: str
    product_type: str
    body_html: str
    tags: str
    images: list[ImageInput] = Field(default_factory=list)
    metafields: list[MetafieldInput] = Field(default_factory=list)
    variants: list[VariantInput] | None = None


# Responses -------------------------------------------------------------------


class ShopifyVariant(ShopifyBaseModel):
    id: int
    product_id: int | None = None
    sku: str | None = None


class ShopifyProduct(ShopifyBaseModel):
    id: int
    title: str | None = None
    variants: list[ShopifyVariant] = Field(default_factory=list)


class ProductEnvelope(ShopifyBaseModel):
    product: ShopifyProduct


class VariantEnvelope(ShopifyBaseModel):
    variant: ShopifyVariant


class GraphQLProductRef(ShopifyBaseModel):
    id: str


class GraphQLVariantNode(ShopifyBaseModel):
    id: str
    sku: str | None = None
    product: GraphQLProductRef


class GraphQLVariantEdge(ShopifyBaseModel):
    node: GraphQLVariantNode


class GraphQLVariantConnection(ShopifyBaseModel):
    edges: list[GraphQLVariantEdge] = Field(default_factory=list)


class GraphQLVariantsData(ShopifyBaseModel):
    product_variants: GraphQLVariantConnection = Field(alias="productVariants")


class GraphQLError(ShopifyBaseModel):
    message: str


class GraphQLVariantsResponse(ShopifyBaseModel):
    data: GraphQLVariantsData | None = None
    errors: list[GraphQLError] | None = None
