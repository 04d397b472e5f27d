"""Port for fetching raw dataset rows produced by the crawler."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class DatasetSource(Protocol):
    async def fetch_items(self, dataset_id: str) -> list[object]: ...


__all__ = ["DatasetSource"]
