"""
delta.api.main — FastAPI application entry point
==================================================

Run with::

    uvicorn delta.api.main:app --reload --port 3000

or ``python -m delta`` to use the port from ``config.yaml``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from delta import __version__  # noqa: E402
from delta.api.auth import router as auth_router  # noqa: E402
from delta.api.deps import get_config  # noqa: E402
from delta.api.errors import (  # noqa: E402
    ApiError,
    api_error_handler,
    validation_error_handler,
)
from delta.api.routes.guilds import router as guilds_router  # noqa: E402
from delta.api.routes.settings import router as settings_router  # noqa: E402
from delta.database.engine import create_db_engine, init_db  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the DB pool and the shared Discord HTTP client; close both on exit."""
    cfg = get_config()

    engine = create_db_engine(pool_size=cfg.db_pool_size)
    init_db(engine)
    app.state.engine = engine

    app.state.http = httpx.AsyncClient(timeout=cfg.http_timeout_seconds)
    logger.info("Delta API started — engine ready (%s)", engine.url.database)
    try:
        yield
    finally:
        logger.info("Delta API shutting down")
        await app.state.http.aclose()
        engine.dispose()


def create_app() -> FastAPI:
    cfg = get_config()

    app = FastAPI(
        title="Delta Dashboard API",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS: dashboard origins only
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.allowed_origins),
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(auth_router, prefix="/api")
    app.include_router(guilds_router, prefix="/api")
    app.include_router(settings_router, prefix="/api")

    @app.get("/api/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
