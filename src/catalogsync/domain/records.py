"""Normalized inventory records handed to the sync engine."""

from __future__ import annotations

from dataclasses import dataclass, field

from .errors import RecordValidationError


@dataclass(frozen=True, slots=True)
class MediaReference:
    """Remote image the catalog fetches by itself."""

    src: str
    alt: str | None = None


@dataclass(frozen=True, slots=True)
class NormalizedRecord:
    """One physical item as discovered by the crawler, validated once at ingestion."""

    identity_key: str
    title: str = ""
    url: str | None = None
    brand: str | None = None
    model: str | None = None
    price: float | None = None
    compare_at_price: float | None = None
    year: int | None = None
    mileage_km: int | None = None
    horsepower: int | None = None
    displacement_cc: int | None = None
    fuel: str | None = None
    transmission: str | None = None
    drivetrain: str | None = None
    body: str | None = None
    vat_type: str | None = None
    color: str | None = None
    vin: str | None = None
    extra_description: str | None = None
    features: tuple[str, ...] = field(default_factory=tuple)
    media: tuple[MediaReference, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.identity_key or not self.identity_key.strip():
            raise RecordValidationError("Record is missing its identity key")

    @property
    def categorical_attributes(self) -> tuple[str, ...]:
        """Attributes that double as catalog tags, in tag order."""

        values = (self.fuel, self.transmission, self.drivetrain)
        return tuple(value for value in values if value)


def derive_sku(identity_key: str, prefix: str) -> str:
    return f"{prefix}{identity_key}"
