"""HTTP client for Apify dataset items."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from catalogsync.adapters.http_resilience import ResilientClient
from catalogsync.domain.ports.source import DatasetSource

if TYPE_CHECKING:
    from collections.abc import Callable

    from catalogsync.config.apify import ApifyConfig
    from catalogsync.config.http_resilience import ResilienceConfig

log = getLogger(__name__)


class DatasetSourceError(RuntimeError):
    """Raised when a dataset cannot be downloaded; fatal for the run."""


class ApifyDatasetSource(DatasetSource):
    def __init__(
        self,
        *,
        config: ApifyConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    async def fetch_items(self, dataset_id: str) -> list[object]:
        dataset_id = dataset_id.strip()
        if not dataset_id:
            raise DatasetSourceError("Dataset id must not be empty")
        path = f"datasets/{dataset_id}/items"
        params = {"clean": "true", "format": "json"}
        try:
            async with self._client_factory(self._resilience) as client:
                response = await client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise DatasetSourceError(f"Failed to download dataset {dataset_id}: {exc!r}") from exc

        if response.is_error:
            raise DatasetSourceError(
                f"Apify returned HTTP {response.status_code} for dataset {dataset_id}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise DatasetSourceError(f"Dataset {dataset_id} is not valid JSON") from exc
        if not isinstance(payload, list):
            raise DatasetSourceError(f"Dataset {dataset_id} did not return a JSON array")

        log.info("Downloaded %d item(s) from dataset %s", len(payload), dataset_id)
        return payload
