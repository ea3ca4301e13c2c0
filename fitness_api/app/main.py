"""
Main entrypoint for the fitness API.

This module assembles the FastAPI application: it sets up logging,
installs the CORS and compression middleware, maps service errors to
HTTP responses and includes the versioned routers.  ``create_app``
builds the app, which is then instantiated at import time as ``app``
so it can be served directly::

    uvicorn fitness_api.app.main:app --reload

On startup the MongoDB indexes are created and, when
``SEED_ON_STARTUP`` is enabled, the initial administrator accounts are
seeded.  The shared MongoDB client is closed on shutdown.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import close_client, init_db
from .core.exceptions import ServiceError
from .core.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Logging first so that everything below can log.
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    app.include_router(v1_router, prefix="/api/v1")

    @app.on_event("startup")
    def startup_event() -> None:
        init_db()
        if settings.seed_on_startup:
            from .services.seed_service import SeedService

            SeedService.seed_initial_users()

    @app.on_event("shutdown")
    def shutdown_event() -> None:
        close_client()

    return app


app = create_app()
