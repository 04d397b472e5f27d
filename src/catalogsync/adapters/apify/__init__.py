"""Public interface for the Apify dataset adapter."""

from __future__ import annotations

from .client import ApifyDatasetSource, DatasetSourceError
from .schema import DatasetImage, DatasetItem
from .translator import IngestResult, parse_record, parse_records, translate_item

__all__ = [
    "ApifyDatasetSource",
    "DatasetImage",
    "DatasetItem",
    "DatasetSourceError",
    "IngestResult",
    "parse_record",
    "parse_records",
    "translate_item",
]
