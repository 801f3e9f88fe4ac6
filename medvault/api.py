# -*- coding: utf-8 -*-
"""
Health records metadata API.

Per-principal registry of pointers to encrypted health documents stored elsewhere.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from .config import Settings, settings as default_settings
from .identity.api import router as identity_router
from .logging_config import setup_logging
from .records.api import router as records_router
from .records.errors import RecordError
from .records.service import RecordService
from .records.storage import RecordStore

logger = logging.getLogger(__name__)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RecordError)
    async def record_error_handler(request: Request, exc: RecordError):
        if exc.http_status >= 500:
            logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
        else:
            logger.warning("%s on %s: %s", exc.code, request.url.path, exc.message)
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())


def create_app(config: Optional[Settings] = None) -> FastAPI:
    config = config or default_settings
    setup_logging(config.log_level)

    app = FastAPI(
        title="Health Records Backend",
        description="Per-principal metadata store for encrypted health documents",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    store = RecordStore(config.db_path)
    app.state.settings = config
    app.state.record_store = store
    app.state.record_service = RecordService(store)

    @app.on_event("startup")
    def _startup_init_store() -> None:
        store.init()

    _register_error_handlers(app)

    @app.get("/api/health", response_class=PlainTextResponse)
    def health() -> str:
        return RecordService.health_check()

    app.include_router(identity_router)
    app.include_router(records_router)
    return app


app = create_app()


def run() -> None:
    """Console entry point (used by pyproject [project.scripts])."""
    import uvicorn

    uvicorn.run("medvault.api:app", host=default_settings.host, port=default_settings.port, reload=False)
