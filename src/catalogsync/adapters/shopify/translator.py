"""Translate normalized records into Shopify Admin API payloads."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import TYPE_CHECKING, Final

from .schema import ImageInput, MetafieldInput, ProductInput, VariantInput

if TYPE_CHECKING:
    from catalogsync.domain.records import NormalizedRecord

_CENTS: Final = Decimal("0.01")

TEXT_FIELD = "single_line_text_field"
INTEGER_FIELD = "number_integer"
URL_FIELD = "url"


def format_money(value: float | None) -> str | None:
    """Render an amount with exactly two decimals, or ``None`` when it is unusable.

    Halves round away from zero on the decimal literal of the float, so
    ``19999.995`` becomes ``"20000.00"`` even though its binary value is
    slightly below the midpoint.
    """

    if value is None or isinstance(value, bool):
        return None
    if not math.isfinite(value):
        return None
    amount = Decimal(repr(value))
    with localcontext() as context:
        # quantizing needs every integer digit plus the two cents
        context.prec = max(context.prec, amount.adjusted() + 3)
        return str(amount.quantize(_CENTS, rounding=ROUND_HALF_UP))


def build_tags(record: NormalizedRecord) -> list[str]:
    """Union of features and categorical attributes, first occurrence wins."""

    seen: dict[str, None] = {}
    for raw in (*record.features, *record.categorical_attributes):
        tag = raw.strip()
        if tag:
            seen.setdefault(tag, None)
    return list(seen)


def build_body_html(record: NormalizedRecord) -> str:
    if not record.features:
        return ""
    return f"<p>{', '.join(record.features)}</p>"


def build_images(record: NormalizedRecord) -> list[ImageInput]:
    return [
        ImageInput(src=media.src, alt=media.alt if media.alt is not None else record.title)
        for media in record.media
    ]


def build_metafields(record: NormalizedRecord) -> list[MetafieldInput]:
    fields: list[MetafieldInput] = []

    def push(key: str, value: object, field_type: str) -> None:
        if value is None or value == "":
            return
        fields.append(MetafieldInput(key=key, value=str(value), type=field_type))

    push("stock_id", record.identity_key, TEXT_FIELD)
    push("vat", record.vat_type, TEXT_FIELD)
    push("year", record.year, INTEGER_FIELD)
    push("mileage_km", record.mileage_km, INTEGER_FIELD)
    push("horsepower", record.horsepower, INTEGER_FIELD)
    push("displacement_cc", record.displacement_cc, INTEGER_FIELD)
    push("fuel", record.fuel, TEXT_FIELD)
    push("transmission", record.transmission, TEXT_FIELD)
    push("drivetrain", record.drivetrain, TEXT_FIELD)
    push("body", record.body, TEXT_FIELD)
    push("url", record.url, URL_FIELD)
    return fields


def _product_fields(record: NormalizedRecord) -> dict[str, object]:
    return {
        "title": record.title,
        "vendor": record.brand or "",
        "product_type": record.body or "",
        "body_html": build_body_html(record),
        "tags": ", ".join(build_tags(record)),
        "images": build_images(record),
        "metafields": build_metafields(record),
    }


def build_variant_input(
    record: NormalizedRecord,
    *,
    sku: str,
    variant_id: int | None = None,
) -> VariantInput:
    if variant_id is not None:
        return VariantInput(
            id=variant_id,
            sku=sku,
            price=format_money(record.price),
            compare_at_price=format_money(record.compare_at_price),
        )
    return VariantInput(
        sku=sku,
        price=format_money(record.price),
        compare_at_price=format_money(record.compare_at_price),
        inventory_quantity=1,
        inventory_management="shopify",
    )


def build_create_payload(record: NormalizedRecord, *, sku: str) -> dict[str, object]:
    product = ProductInput(
        **_product_fields(record),
        variants=[build_variant_input(record, sku=sku)],
    )
    return {"product": product.to_payload()}


def build_product_update_payload(product_id: int, record: NormalizedRecord) -> dict[str, object]:
    product = ProductInput(id=product_id, **_product_fields(record))
    return {"product": product.to_payload()}


def build_variant_update_payload(
    variant_id: int,
    record: NormalizedRecord,
    *,
    sku: str,
) -> dict[str, object]:
    variant = build_variant_input(record, sku=sku, variant_id=variant_id)
    return {"variant": variant.to_payload()}


def parse_gid(gid: str) -> int:
    """Extract the numeric id from ``gid://shopify/<Type>/<id>``."""

    tail = gid.rsplit("/", 1)[-1]
    try:
        return int(tail)
    except ValueError as exc:
        raise ValueError(f"Unexpected Shopify global id: {gid!r}") from exc
