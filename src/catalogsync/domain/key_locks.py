"""Per-key mutual exclusion for overlapping sync operations."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


@dataclass(slots=True)
class _KeyEntry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


class KeyedLock:
    """Map from key to a lock, alive only while someone holds or waits on it.

    Share one instance between every engine that writes to the same mapping
    store; two instances give no exclusion between each other.
    """

    def __init__(self) -> None:
        self._entries: dict[str, _KeyEntry] = {}

    @property
    def in_flight(self) -> frozenset[str]:
        """Keys currently being processed or waited on."""
        return frozenset(self._entries)

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = _KeyEntry()
        entry.holders += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.holders -= 1
            if entry.holders == 0:
                del self._entries[key]
