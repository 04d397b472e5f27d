"""Synchronization defaults for catalog sync runs."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_int, optional_env_var
from .errors import ConfigurationError

# Shopify basic plans allow two requests per second.
DEFAULT_MAX_CONCURRENT = 2
DEFAULT_MIN_INTERVAL_MS = 500
DEFAULT_SKU_PREFIX = "AWG-"
DEFAULT_MAX_STORAGE_FAILURES = 3
DEFAULT_THROTTLE_RETRIES = 3


@dataclass(frozen=True, slots=True)
class SyncConfig:
    max_concurrent: int = DEFAULT_MAX_CONCURRENT
    min_interval_seconds: float = DEFAULT_MIN_INTERVAL_MS / 1000
    adopt_by_sku: bool = False
    sku_prefix: str = DEFAULT_SKU_PREFIX
    max_storage_failures: int = DEFAULT_MAX_STORAGE_FAILURES
    throttle_retries: int = DEFAULT_THROTTLE_RETRIES

    def __post_init__(self) -> None:
        if self.max_concurrent < 1:
            raise ConfigurationError("max_concurrent must be at least 1")
        if self.min_interval_seconds < 0:
            raise ConfigurationError("min_interval_seconds must be non-negative")
        if self.max_storage_failures < 1:
            raise ConfigurationError("max_storage_failures must be at least 1")
        if self.throttle_retries < 0:
            raise ConfigurationError("throttle_retries must be non-negative")


def get_sync_config() -> SyncConfig:
    prefix = optional_env_var("SYNC_SKU_PREFIX")
    return SyncConfig(
        max_concurrent=env_int("SYNC_MAX_CONCURRENT", DEFAULT_MAX_CONCURRENT, minimum=1),
        min_interval_seconds=env_int("SYNC_MIN_INTERVAL_MS", DEFAULT_MIN_INTERVAL_MS, minimum=0)
        / 1000,
        adopt_by_sku=env_bool("SYNC_ADOPT_BY_SKU", default=False),
        sku_prefix=prefix if prefix is not None else DEFAULT_SKU_PREFIX,
        max_storage_failures=env_int(
            "SYNC_MAX_STORAGE_FAILURES", DEFAULT_MAX_STORAGE_FAILURES, minimum=1
        ),
        throttle_retries=env_int("SYNC_THROTTLE_RETRIES", DEFAULT_THROTTLE_RETRIES, minimum=0),
    )
