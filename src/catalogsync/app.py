"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from catalogsync.adapters.apify import ApifyDatasetSource, parse_records
from catalogsync.adapters.shopify import ShopifyCatalogClient
from catalogsync.adapters.sqlalchemy.repositories import SqlAlchemyIdentityMappingStore
from catalogsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from catalogsync.config import get_apify_config, get_shopify_config, get_sync_config
from catalogsync.domain.key_locks import KeyedLock
from catalogsync.domain.rate_limiting import RateLimiter
from catalogsync.domain.sync_engine import SyncEngine

if TYPE_CHECKING:
    from catalogsync.config.sync import SyncConfig
    from catalogsync.domain.outcomes import BatchResult
    from catalogsync.domain.ports.catalog import CatalogGateway, RemoteIds
    from catalogsync.domain.ports.mapping import IdentityMappingStore
    from catalogsync.domain.ports.source import DatasetSource

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ImportReport:
    dataset_id: str
    result: BatchResult

    def as_dict(self) -> dict[str, object]:
        return {"ok": True, "datasetId": self.dataset_id, **self.result.as_dict()}


def _ensure_storage() -> None:
    if not is_started():
        startup()


def build_mapping_store() -> SqlAlchemyIdentityMappingStore:
    _ensure_storage()
    return SqlAlchemyIdentityMappingStore(SqlAlchemyUnitOfWork)


def build_engine(
    *,
    config: SyncConfig | None = None,
    store: IdentityMappingStore | None = None,
    catalog: CatalogGateway | None = None,
    limiter: RateLimiter | None = None,
    locks: KeyedLock | None = None,
) -> SyncEngine:
    """Wire configuration, adapters and the shared limiter into one engine.

    Build a single engine per process and reuse it: the limiter and the
    per-key locks only coordinate the work that goes through them.
    """

    sync_config = config or get_sync_config()
    effective_catalog = catalog or ShopifyCatalogClient(
        config=get_shopify_config(),
        sku_prefix=sync_config.sku_prefix,
    )
    effective_store = store or build_mapping_store()
    effective_limiter = limiter or RateLimiter(
        max_concurrent=sync_config.max_concurrent,
        min_interval=sync_config.min_interval_seconds,
    )
    log.debug(
        "Engine limits: max_concurrent=%s, min_interval=%ss, adopt_by_sku=%s",
        effective_limiter.max_concurrent,
        effective_limiter.min_interval,
        sync_config.adopt_by_sku,
    )
    return SyncEngine(
        store=effective_store,
        catalog=effective_catalog,
        limiter=effective_limiter,
        locks=locks or KeyedLock(),
        adopt_by_sku=sync_config.adopt_by_sku,
        sku_prefix=sync_config.sku_prefix,
        max_storage_failures=sync_config.max_storage_failures,
        throttle_retries=sync_config.throttle_retries,
    )


async def run_import(
    dataset_id: str,
    *,
    source: DatasetSource | None = None,
    engine: SyncEngine | None = None,
) -> ImportReport:
    """Download a dataset, validate its rows and sync them to the catalog."""

    effective_engine = engine or build_engine()
    effective_source = source or ApifyDatasetSource(config=get_apify_config())
    log.info("Starting import of dataset %s", dataset_id)

    rows = await effective_source.fetch_items(dataset_id)
    ingest = parse_records(rows)
    result = await effective_engine.sync_batch(ingest.records, skipped=ingest.skipped)

    log.info(
        f"Finished import of dataset {dataset_id}: total={result.total}, "
        f"created={result.created}, updated={result.updated}, failed={result.failed}, "
        f"skipped={result.skipped}"
    )
    return ImportReport(dataset_id=dataset_id, result=result)


def show_mapping(identity_key: str) -> RemoteIds | None:
    """Return the stored remote ids for ``identity_key``."""

    return build_mapping_store().lookup(identity_key)
