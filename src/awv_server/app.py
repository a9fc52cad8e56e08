"""FastAPI application for conducting annual wellness visits.

``create_app()`` wires the pieces together:
  - a lifespan hook that loads the templates and builds one shared
    :class:`VisitEngine`, and closes the database pool on shutdown
  - CORS for the browser front end
  - exception handlers mapping SDK errors to HTTP status codes
  - the ``/api/v1`` routers and a ``/health`` probe

``cli()`` backs the ``awv-server`` console script.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from awv_db.engine import dispose_engine, get_engine
from awv_visits.engine import VisitEngine
from awv_visits.templates import TemplateStore

from awv_server.config import ServerSettings, load_settings
from awv_server.errors import install_error_handlers
from awv_server.routes import register_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: ServerSettings = app.state.settings

    store = TemplateStore(template_dir=settings.template_dir)
    store.load()
    active = store.list_templates(active_only=True)
    if not active:
        logger.warning("No active templates loaded; visits cannot be created")

    app.state.store = store
    app.state.engine = VisitEngine(store)
    logger.info("AWV server ready: %d active template(s)", len(active))

    try:
        yield
    finally:
        await dispose_engine()


async def health(request: Request) -> JSONResponse:
    """Readiness probe: 200 when the database answers, 503 otherwise."""
    templates = len(request.app.state.store.templates)
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        logger.error("Health check failed: %s", exc)
        return JSONResponse(
            status_code=503,
            content={"status": "error", "templates": templates, "detail": str(exc)},
        )
    return JSONResponse(content={"status": "ok", "templates": templates})


def create_app(settings: ServerSettings | None = None) -> FastAPI:
    """Build the configured application (settings default to the environment)."""
    settings = settings or load_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="AWV API Server",
        description="Conduct annual wellness visits with skip logic and care plans",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)

    app.add_api_route("/health", health, methods=["GET"], include_in_schema=False)
    register_routes(app)
    return app


# ASGI entry point for ``uvicorn awv_server.app:app``
app = create_app()


def cli() -> None:
    """Run the server with uvicorn using the environment settings."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "awv_server.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
