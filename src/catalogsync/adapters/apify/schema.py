"""Schema of the crawler's dataset rows as served by the Apify API."""

from __future__ import annotations

import logging
import math
import re
from typing import Annotated, ClassVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

log = logging.getLogger(__name__)


def _blank_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


_CURRENCY_NOISE = re.compile(r"\s|€|EUR", re.IGNORECASE)


def _normalize_separators(text: str) -> str:
    """Turn ``"12.345,60"``, ``"12,345.60"`` or ``"12.500"`` into a plain decimal string.

    The last of ``,`` and ``.`` is the decimal mark, unless it occurs more than
    once or is the only separator with exactly three digits after it; then it
    groups thousands.
    """

    decimal_mark = "," if text.rfind(",") > text.rfind(".") else "."
    if decimal_mark not in text:
        return text
    grouping = "." if decimal_mark == "," else ","
    integer, _, fraction = text.rpartition(decimal_mark)
    if decimal_mark in integer or (grouping not in integer and len(fraction) == 3):
        return text.replace(decimal_mark, "")
    return f"{integer.replace(grouping, '')}.{fraction}"


def _lenient_amount(value: object) -> object:
    """Accept ``"12.345,60 €"`` style strings; unparsable or non-finite amounts become absent."""

    value = _blank_to_none(value)
    if isinstance(value, str):
        cleaned = _normalize_separators(_CURRENCY_NOISE.sub("", value))
        try:
            value = float(cleaned)
        except ValueError:
            return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _lenient_count(value: object) -> object:
    """Accept ``"120.000 km"`` style strings by keeping the digits only."""

    value = _blank_to_none(value)
    if isinstance(value, str):
        digits = "".join(char for char in value if char.isdigit())
        return int(digits) if digits else None
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    return value


OptionalText = Annotated[str | None, BeforeValidator(_blank_to_none)]
OptionalAmount = Annotated[float | None, BeforeValidator(_lenient_amount)]
OptionalCount = Annotated[int | None, BeforeValidator(_lenient_count)]


class ApifyBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, str_strip_whitespace=True)
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.warning(
            "Apify %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class DatasetImage(ApifyBaseModel):
    src: str
    alt: OptionalText = None


class DatasetItem(ApifyBaseModel):
    stock_id: OptionalText = Field(default=None, alias="stockId")
    title: str = ""
    url: OptionalText = None
    brand: OptionalText = None
    model: OptionalText = None
    year: OptionalCount = None
    mileage_km: OptionalCount = Field(default=None, alias="mileageKm")
    horsepower: OptionalCount = None
    displacement_cc: OptionalCount = Field(default=None, alias="displacementCc")
    fuel: OptionalText = None
    transmission: OptionalText = None
    drivetrain: OptionalText = None
    body: OptionalText = None
    price_eur: OptionalAmount = Field(default=None, alias="priceEur")
    compare_at_price_eur: OptionalAmount = Field(default=None, alias="compareAtPriceEur")
    vat_type: OptionalText = Field(default=None, alias="vatType")
    color: OptionalText = None
    vin: OptionalText = None
    features: list[str] = Field(default_factory=list)
    extra_description: OptionalText = Field(default=None, alias="extraDescription")
    images: list[DatasetImage] = Field(default_factory=list)

    @field_validator("stock_id", mode="before")
    @classmethod
    def _stringify_stock_id(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("title", mode="before")
    @classmethod
    def _default_title(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("features", mode="before")
    @classmethod
    def _drop_empty_features(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, list):
            return [item for item in value if isinstance(item, str) and item.strip()]
        return value

    @field_validator("images", mode="before")
    @classmethod
    def _drop_sourceless_images(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, list):
            return [item for item in value if isinstance(item, dict) and item.get("src")]
        return value
