"""Route registration — mounts all routers under ``/api/v1``."""

from fastapi import FastAPI

from awv_server.routes.recommendations import router as recommendations_router
from awv_server.routes.steps import router as steps_router
from awv_server.routes.templates import router as templates_router
from awv_server.routes.visits import router as visits_router

API_PREFIX = "/api/v1"


def register_routes(app: FastAPI) -> None:
    """Include all sub-routers under the versioned API prefix."""
    app.include_router(templates_router, prefix=API_PREFIX)
    app.include_router(visits_router, prefix=API_PREFIX)
    app.include_router(steps_router, prefix=API_PREFIX)
    app.include_router(recommendations_router, prefix=API_PREFIX)
