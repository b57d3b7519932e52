from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import (
    analytics_router,
    contacts_router,
    events_router,
    session_router,
    sites_router,
)
from .config import get_settings
from .db.database import get_database
from .db.migrations import init_db
from .log import setup_logging

logger = logging.getLogger(__name__)


def _resolve_cors_options() -> tuple[list[str], bool, list[str], list[str]]:
    settings = get_settings()
    allow_origins = settings.cors_allow_origins or ["*"]
    allow_credentials = settings.cors_allow_credentials

    if "*" in allow_origins and allow_credentials:
        logger.warning(
            "CORS_ALLOW_CREDENTIALS is true while CORS_ALLOW_ORIGINS contains '*'; forcing credentials=false"
        )
        allow_credentials = False

    return (
        allow_origins,
        allow_credentials,
        settings.cors_allow_methods or ["*"],
        settings.cors_allow_headers or ["*"],
    )


@asynccontextmanager
async def _lifespan(_: FastAPI):
    settings = get_settings()
    if settings.store_backend == "sql":
        init_db(get_database())
    logger.info("WeShare API started (backend=%s)", settings.store_backend)
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_dir, settings.log_level)
    app = FastAPI(title="WeShare API", lifespan=_lifespan)

    allow_origins, allow_credentials, allow_methods, allow_headers = _resolve_cors_options()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=allow_credentials,
        allow_methods=allow_methods,
        allow_headers=allow_headers,
    )

    app.include_router(session_router)
    app.include_router(sites_router)
    app.include_router(contacts_router)
    app.include_router(analytics_router)
    app.include_router(events_router)

    @app.get("/health")
    def health() -> dict:
        checks: dict[str, str] = {}
        overall = "ok"
        current = get_settings()
        checks["backend"] = current.store_backend

        if current.store_backend == "sql":
            try:
                get_database().ping()
                checks["database"] = "ok"
            except Exception as exc:
                checks["database"] = f"error: {exc}"
                overall = "degraded"
        else:
            has_credentials = bool(current.supabase_url and current.supabase_anon_key)
            checks["supabase"] = "ok" if has_credentials else "missing"
            if not has_credentials:
                overall = "degraded"

        return {"status": overall, "checks": checks}

    return app


app = create_app()

__all__ = ["create_app", "app"]
