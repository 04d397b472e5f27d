"""Application configuration helpers."""

from __future__ import annotations

from .apify import ApifyConfig, get_apify_config
from .env import env_bool, env_int, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .server import ServerConfig, get_server_config
from .shopify import ShopifyConfig, get_shopify_config, shopify_base_url
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .sync import SyncConfig, get_sync_config

__all__ = [
    "ApifyConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "ResilienceConfig",
    "RetryPolicy",
    "ServerConfig",
    "ShopifyConfig",
    "StorageConfig",
    "SyncConfig",
    "configure_logging",
    "env_bool",
    "env_int",
    "get_apify_config",
    "get_database_config",
    "get_server_config",
    "get_shopify_config",
    "get_storage_config",
    "get_sync_config",
    "optional_env_var",
    "require_env_vars",
    "shopify_base_url",
]
