"""Validate dataset rows and translate them into normalized records."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from catalogsync.domain.errors import RecordValidationError
from catalogsync.domain.records import MediaReference, NormalizedRecord

from .schema import DatasetItem

if TYPE_CHECKING:
    from collections.abc import Iterable

log = getLogger(__name__)


@dataclass(slots=True)
class IngestResult:
    records: list[NormalizedRecord] = field(default_factory=list)
    skipped: int = 0


def translate_item(item: DatasetItem) -> NormalizedRecord:
    if item.stock_id is None:
        raise RecordValidationError("Dataset item has no stockId")
    return NormalizedRecord(
        identity_key=item.stock_id,
        title=item.title,
        url=item.url,
        brand=item.brand,
        model=item.model,
        price=item.price_eur,
        compare_at_price=item.compare_at_price_eur,
        year=item.year,
        mileage_km=item.mileage_km,
        horsepower=item.horsepower,
        displacement_cc=item.displacement_cc,
        fuel=item.fuel,
        transmission=item.transmission,
        drivetrain=item.drivetrain,
        body=item.body,
        vat_type=item.vat_type,
        color=item.color,
        vin=item.vin,
        extra_description=item.extra_description,
        features=tuple(item.features),
        media=tuple(MediaReference(src=image.src, alt=image.alt) for image in item.images),
    )


def parse_record(row: object) -> NormalizedRecord:
    """Validate one raw row; raise ``RecordValidationError`` if it cannot be synced."""

    try:
        item = DatasetItem.model_validate(row)
    except ValidationError as exc:
        raise RecordValidationError(f"Invalid dataset item: {exc.error_count()} error(s)") from exc
    return translate_item(item)


def parse_records(rows: Iterable[object]) -> IngestResult:
    """Translate rows, dropping the ones without an identity key or with a broken shape.

    Dropped rows are counted but never reach the engine.
    """

    result = IngestResult()
    for index, row in enumerate(rows):
        try:
            result.records.append(parse_record(row))
        except RecordValidationError as exc:
            result.skipped += 1
            log.warning("Skipping dataset row %d: %s", index, exc)
    return result
