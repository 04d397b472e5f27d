"""Reconcile normalized records with the remote catalog.

Per record the engine looks up the stored mapping and either creates the
remote product (recording the new ids) or updates the mapped product and its
variant. Every remote request goes through the shared :class:`RateLimiter`,
and a throttled request is retried through it again so retries keep the
limiter's spacing. Records sharing an identity key are serialized by a
:class:`KeyedLock`.
"""

from __future__ import annotations

import asyncio
from functools import partial
from logging import WARNING, getLogger
from typing import TYPE_CHECKING, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from .errors import BatchAbortedError, CatalogError, CatalogThrottledError, MappingStoreError
from .key_locks import KeyedLock
from .outcomes import BatchResult, FailureKind, SyncOutcome
from .records import derive_sku

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from .ports.catalog import CatalogGateway, RemoteIds
    from .ports.mapping import IdentityMappingStore
    from .rate_limiting import RateLimiter
    from .records import NormalizedRecord

log = getLogger(__name__)

T = TypeVar("T")


class SyncEngine:
    def __init__(
        self,
        *,
        store: IdentityMappingStore,
        catalog: CatalogGateway,
        limiter: RateLimiter,
        locks: KeyedLock | None = None,
        adopt_by_sku: bool = False,
        sku_prefix: str = "AWG-",
        max_storage_failures: int = 3,
        throttle_retries: int = 3,
        throttle_backoff: float = 0.5,
        max_throttle_wait: float = 30.0,
    ) -> None:
        if max_storage_failures < 1:
            raise ValueError("max_storage_failures must be at least 1")
        if throttle_retries < 0:
            raise ValueError("throttle_retries must be non-negative")
        self.store = store
        self.catalog = catalog
        self.limiter = limiter
        self.locks = locks if locks is not None else KeyedLock()
        self.adopt_by_sku = adopt_by_sku
        self.sku_prefix = sku_prefix
        self.max_storage_failures = max_storage_failures
        self.throttle_retries = throttle_retries
        self._throttle_wait = _ThrottleWait(throttle_backoff, max_throttle_wait)

    async def sync_record(self, record: NormalizedRecord) -> SyncOutcome:
        """Create or update the remote entity for ``record``; never raises for record errors."""

        key = record.identity_key
        try:
            async with self.locks.hold(key):
                return await self._reconcile(record)
        except CatalogError as exc:
            outcome = SyncOutcome.failed(key, _describe(exc), FailureKind.REMOTE)
        except MappingStoreError as exc:
            outcome = SyncOutcome.failed(key, _describe(exc), FailureKind.STORAGE)
        except Exception as exc:
            log.exception("Unexpected error while syncing %s", key)
            outcome = SyncOutcome.failed(key, _describe(exc), FailureKind.INTERNAL)
        log.warning("Sync failed for %s: %s", key, outcome.reason)
        return outcome

    async def sync_batch(
        self,
        records: Iterable[NormalizedRecord],
        *,
        skipped: int = 0,
    ) -> BatchResult:
        """Sync every record concurrently and aggregate the outcomes.

        Outcomes are collected in completion order. ``skipped`` carries the
        number of rows dropped before reaching the engine.

        Raises:
            BatchAbortedError: ``max_storage_failures`` storage failures occurred
                with no successful record in between. Unfinished records are
                cancelled and the partial result is attached to the error.
        """

        result = BatchResult(skipped=skipped)
        tasks = [asyncio.create_task(self.sync_record(record)) for record in records]
        log.info("Syncing %d record(s)", len(tasks))

        storage_streak = 0
        try:
            for next_done in asyncio.as_completed(tasks):
                outcome = await next_done
                result.add(outcome)
                if outcome.failure_kind is FailureKind.STORAGE:
                    storage_streak += 1
                    if storage_streak >= self.max_storage_failures:
                        raise BatchAbortedError(
                            f"Mapping store failed {storage_streak} times in a row; "
                            f"aborting after {result.total} of {len(tasks)} record(s)",
                            result=result,
                        )
                elif outcome.ok:
                    storage_streak = 0
        finally:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        log.info(
            "Sync finished: total=%d created=%d updated=%d failed=%d skipped=%d",
            result.total,
            result.created,
            result.updated,
            result.failed,
            result.skipped,
        )
        return result

    async def _reconcile(self, record: NormalizedRecord) -> SyncOutcome:
        key = record.identity_key
        ids = self.store.lookup(key)
        if ids is None and self.adopt_by_sku:
            ids = await self._adopt(record)

        if ids is None:
            ids = await self._dispatch(partial(self.catalog.create_entity, record))
            try:
                self.store.upsert(key, ids.product_id, ids.variant_id)
            except MappingStoreError as exc:
                raise MappingStoreError(
                    f"created product {ids.product_id} but could not record its mapping: {exc}"
                ) from exc
            log.info("Created %s as product %s", key, ids.product_id)
            return SyncOutcome.created(key, ids)

        await self._dispatch(partial(self.catalog.update_product, ids.product_id, record))
        await self._dispatch(partial(self.catalog.update_variant, ids.variant_id, record))
        log.debug("Updated %s (product %s)", key, ids.product_id)
        return SyncOutcome.updated(key, ids)

    async def _dispatch(self, call: Callable[[], Awaitable[T]]) -> T:
        """Run ``call`` through the limiter, rescheduling it while the catalog throttles."""

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.throttle_retries + 1),
            wait=self._throttle_wait,
            retry=retry_if_exception_type(CatalogThrottledError),
            before_sleep=before_sleep_log(log, WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self.limiter.schedule(call)
        raise RuntimeError("Retry loop finished without a result")

    async def _adopt(self, record: NormalizedRecord) -> RemoteIds | None:
        sku = derive_sku(record.identity_key, self.sku_prefix)
        found = await self._dispatch(partial(self.catalog.find_by_sku, sku))
        if found is None:
            return None
        self.store.upsert(record.identity_key, found.product_id, found.variant_id)
        log.info(
            "Adopted existing product %s for %s via SKU %s",
            found.product_id,
            record.identity_key,
            sku,
        )
        return found


class _ThrottleWait:
    """Exponential backoff with jitter that defers to the catalog's ``Retry-After``."""

    def __init__(self, backoff: float, max_wait: float) -> None:
        self._max_wait = max_wait
        self._backoff = wait_exponential_jitter(initial=backoff, max=max_wait, jitter=backoff)

    def __call__(self, retry_state: RetryCallState) -> float:
        outcome = retry_state.outcome
        exc = outcome.exception() if outcome is not None else None
        if isinstance(exc, CatalogThrottledError) and exc.retry_after is not None:
            return min(exc.retry_after, self._max_wait)
        return self._backoff(retry_state)


def _describe(exc: Exception) -> str:
    message = str(exc)
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__
