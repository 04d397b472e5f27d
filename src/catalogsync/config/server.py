"""HTTP trigger configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_int, optional_env_var

DEFAULT_HOST = "0.0.0.0"  # noqa: S104
DEFAULT_PORT = 8080


@dataclass(frozen=True, slots=True)
class ServerConfig:
    auth_token: str | None = None
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT


def get_server_config() -> ServerConfig:
    return ServerConfig(
        auth_token=optional_env_var("IMPORT_AUTH_TOKEN"),
        host=optional_env_var("HOST") or DEFAULT_HOST,
        port=env_int("PORT", DEFAULT_PORT, minimum=1),
    )
