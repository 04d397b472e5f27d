"""Apify dataset configuration values."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from .env import optional_env_var
from .http_resilience import ResilienceConfig, RetryPolicy

APIFY_BASE_URL = "https://api.apify.com/v2/"
APIFY_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class ApifyConfig:
    token: str | None
    resilience: ResilienceConfig


def get_apify_config() -> ApifyConfig:
    token = optional_env_var("APIFY_TOKEN")
    headers = {"Authorization": f"Bearer {token}"} if token else None
    return ApifyConfig(
        token=token,
        resilience=ResilienceConfig(
            name="apify",
            base_url=APIFY_BASE_URL,
            timeout_seconds=APIFY_TIMEOUT_SECONDS,
            retry=RetryPolicy(
                total=4,
                allowed_methods=frozenset({"GET"}),
                status_forcelist=frozenset({429, 500, 502, 503, 504}),
                retry_on_exceptions=(
                    httpx.TimeoutException,
                    httpx.NetworkError,
                    httpx.RemoteProtocolError,
                ),
            ),
            default_headers=headers,
        ),
    )
