"""HTTP trigger for import runs (FastAPI)."""

from __future__ import annotations

import hmac
from contextlib import asynccontextmanager
from logging import getLogger
from typing import TYPE_CHECKING, Any

import uvicorn
from fastapi import FastAPI, Header, Request, status
from fastapi.responses import JSONResponse

from catalogsync.app import build_engine, run_import
from catalogsync.config import get_server_config

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from catalogsync.config.server import ServerConfig
    from catalogsync.domain.ports.source import DatasetSource
    from catalogsync.domain.sync_engine import SyncEngine

log = getLogger(__name__)


def extract_dataset_id(body: object) -> str | None:
    """Find the dataset id in a direct request or an actor-run webhook payload."""

    if not isinstance(body, dict):
        return None
    candidates: list[Any] = [
        body.get("datasetId"),
        _nested(body, "resource", "defaultDatasetId"),
        _nested(body, "payload", "resource", "defaultDatasetId"),
    ]
    for candidate in candidates:
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return None


def _nested(body: dict[str, Any], *path: str) -> object:
    current: object = body
    for part in path:
        if not isinstance(current, dict):
            return None
        current = current.get(part)
    return current


def _authorized(expected_token: str | None, authorization: str | None) -> bool:
    if not expected_token:
        return True
    if authorization is None:
        return False
    return hmac.compare_digest(authorization, f"Bearer {expected_token}")


def create_app(
    *,
    config: ServerConfig | None = None,
    engine_factory: Callable[[], SyncEngine] = build_engine,
    source_factory: Callable[[], DatasetSource] | None = None,
) -> FastAPI:
    """Build the trigger app; every request shares the engine built at startup."""

    server_config = config or get_server_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.engine = engine_factory()
        log.info("Import trigger ready")
        yield

    app = FastAPI(title="catalogsync", lifespan=lifespan)

    @app.get("/healthz")
    async def healthz() -> dict[str, bool]:
        return {"ok": True}

    @app.post("/import")
    async def trigger_import(
        request: Request,
        authorization: str | None = Header(default=None),
    ) -> JSONResponse:
        if not _authorized(server_config.auth_token, authorization):
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"ok": False, "error": "unauthorized"},
            )

        try:
            body = await request.json()
        except ValueError:
            body = None
        dataset_id = extract_dataset_id(body)
        if dataset_id is None:
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"ok": False, "error": "datasetId missing"},
            )

        source = source_factory() if source_factory is not None else None
        try:
            report = await run_import(dataset_id, source=source, engine=request.app.state.engine)
        except Exception as exc:
            log.exception("Import of dataset %s failed", dataset_id)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"ok": False, "error": str(exc) or type(exc).__name__},
            )
        return JSONResponse(content=report.as_dict())

    return app


def serve(config: ServerConfig | None = None) -> None:
    server_config = config or get_server_config()
    app = create_app(config=server_config)
    log.info("Listening on %s:%s", server_config.host, server_config.port)
    uvicorn.run(app, host=server_config.host, port=server_config.port, log_config=None)
