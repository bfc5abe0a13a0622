"""
Main entrypoint for the Recycle Points API.

This module assembles the FastAPI application, sets up logging,
registers the error handler for domain errors and includes versioned
routers.  The ``create_app`` function builds and configures the app,
which is then instantiated at module import time as ``app``::

    uvicorn recycle_points_api.app.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .core.config import settings
from .core.logging_config import setup_logging
from .core.errors import PointsError
from .api.v1.router import router as v1_router
from .core.db import init_db


logger = logging.getLogger(__name__)


async def points_error_handler(request: Request, exc: PointsError) -> JSONResponse:
    """Render a ``PointsError`` as the structured error body."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Logging first so that everything below can log.
    setup_logging(settings.log_level, settings.log_file)

    app = FastAPI(title=settings.project_name, version=settings.api_version)
    app.add_exception_handler(PointsError, points_error_handler)

    app.include_router(v1_router, prefix="/api/v1")
    # Existing web and mobile clients call the unversioned paths
    # (``/points``, ``/items``).  Both prefixes expose identical endpoints.
    app.include_router(v1_router, include_in_schema=False)

    @app.on_event("startup")
    async def startup_event() -> None:
        # Creates the database file if missing and applies migrations.
        init_db()

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
