# dailyproxy/main.py
from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from functools import partial

import httpx
from fastapi import FastAPI

from dailyproxy.config import Settings
from dailyproxy.downstream import fetch_sample
from dailyproxy.handler import DataHandler
from dailyproxy.logging_conf import setup_logging

# --- Observability ---
from dailyproxy.observability import metrics_endpoint, timing_middleware

# --- Routers ---
from dailyproxy.routes_data import router as data_router
from dailyproxy.schemas import HealthResponse, VersionResponse
from dailyproxy.store import KVStore, build_store
from dailyproxy.utils import to_iso, utc_now
from dailyproxy.version import SERVICE_VERSION, version_payload


def create_app(
    settings: Settings | None = None,
    store: KVStore | None = None,
    *,
    clock: Callable[[], datetime] = utc_now,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the app; tests pass their own settings, store, clock and HTTP transport."""
    settings = settings or Settings.from_env()
    store = store if store is not None else build_store(settings)

    app = FastAPI(title="dailyproxy", version=SERVICE_VERSION)
    app.state.settings = settings
    app.state.store = store
    app.state.data_handler = DataHandler(
        settings,
        store,
        partial(fetch_sample, settings, transport=transport),
        clock=clock,
    )

    # --- Include routers ---
    app.include_router(data_router)

    # --- Observability ---
    app.middleware("http")(timing_middleware)

    # --- Utility endpoints ---
    @app.get("/health", response_model=HealthResponse)
    def health():
        configured = bool(settings.api_key)
        return HealthResponse(
            status="ok" if configured else "degraded",
            as_of=to_iso(clock()),
            store=store.backend,
            credential_configured=configured,
        )

    @app.get("/version", response_model=VersionResponse)
    def version():
        return VersionResponse(**version_payload())

    @app.get("/metrics")
    def metrics():
        return metrics_endpoint()

    return app


def build_app() -> FastAPI:
    """Entry point for uvicorn: ``uvicorn dailyproxy.main:build_app --factory``."""
    setup_logging()
    return create_app()
