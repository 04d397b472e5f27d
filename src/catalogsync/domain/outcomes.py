"""Per-record outcomes and batch aggregates."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ports.catalog import RemoteIds


class SyncStatus(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    FAILED = "failed"


class FailureKind(StrEnum):
    REMOTE = "remote"
    STORAGE = "storage"
    INTERNAL = "internal"


@dataclass(frozen=True, slots=True)
class SyncOutcome:
    identity_key: str
    status: SyncStatus
    product_id: int | None = None
    variant_id: int | None = None
    reason: str | None = None
    failure_kind: FailureKind | None = None

    @classmethod
    def created(cls, identity_key: str, ids: RemoteIds) -> SyncOutcome:
        return cls(identity_key, SyncStatus.CREATED, ids.product_id, ids.variant_id)

    @classmethod
    def updated(cls, identity_key: str, ids: RemoteIds) -> SyncOutcome:
        return cls(identity_key, SyncStatus.UPDATED, ids.product_id, ids.variant_id)

    @classmethod
    def failed(cls, identity_key: str, reason: str, kind: FailureKind) -> SyncOutcome:
        return cls(identity_key, SyncStatus.FAILED, reason=reason, failure_kind=kind)

    @property
    def ok(self) -> bool:
        return self.status is not SyncStatus.FAILED


@dataclass(frozen=True, slots=True)
class RecordFailure:
    identity_key: str
    reason: str


@dataclass(slots=True)
class BatchResult:
    """Aggregate of one run: counts plus enough detail to diagnose failures."""

    outcomes: list[SyncOutcome] = field(default_factory=list)
    skipped: int = 0

    def add(self, outcome: SyncOutcome) -> None:
        self.outcomes.append(outcome)

    def _count(self, status: SyncStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def created(self) -> int:
        return self._count(SyncStatus.CREATED)

    @property
    def updated(self) -> int:
        return self._count(SyncStatus.UPDATED)

    @property
    def failed(self) -> int:
        return self._count(SyncStatus.FAILED)

    @property
    def failures(self) -> list[RecordFailure]:
        return [
            RecordFailure(outcome.identity_key, outcome.reason or "unknown error")
            for outcome in self.outcomes
            if outcome.status is SyncStatus.FAILED
        ]

    def as_dict(self) -> dict[str, object]:
        return {
            "total": self.total,
            "created": self.created,
            "updated": self.updated,
            "failed": self.failed,
            "skipped": self.skipped,
            "failures": [
                {"key": failure.identity_key, "reason": failure.reason}
                for failure in self.failures
            ],
        }
