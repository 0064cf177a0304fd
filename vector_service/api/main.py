"""
FastAPI application with assembled routers.

Initializes the FastAPI app, wires the service container, starts the
change-stream watcher for the lifetime of the process and configures the
uvicorn server.

Dependencies: fastapi, uvicorn, vector_service.api.routers
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vector_service import __version__
from vector_service.api.deps.dependencies import ServiceCache
from vector_service.api.routers import health_router, sync_router, vectors_router
from vector_service.models.common import ErrorResponse
from vector_service.observability.logger import configure_logging
from vector_service.observability.middleware import (
    CorrelationMiddleware,
    RequestLoggingMiddleware,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Starts the change-stream watcher when change streams are enabled and the
    source is writable; stops it and releases connections on shutdown.
    """
    cache: ServiceCache = app.state.service_cache
    source_cfg = cache.settings.source_store

    if cache.watcher_enabled:
        cache.watcher.start()
        logger.info(f"{__name__}:lifespan - Change stream watcher started")
    elif source_cfg.read_only:
        logger.info(f"{__name__}:lifespan - Source is read-only, change stream watcher disabled")
    else:
        logger.info(f"{__name__}:lifespan - Change streams disabled")

    yield

    cache.clear()
    logger.info(f"{__name__}:lifespan - Service cache cleared")


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render HTTPException with the common error body."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(),
        headers=exc.headers,
    )


def create_app(cache: ServiceCache | None = None) -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Args:
        cache: Service container (built from environment settings when None)

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    cache = cache or ServiceCache()
    configure_logging(cache.settings.log_level)

    app = FastAPI(
        title="Vector Sync Service",
        description="Keeps a vector index in sync with a document store and serves similarity queries",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.service_cache = cache

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cache.settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    app.add_exception_handler(HTTPException, http_exception_handler)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(vectors_router, prefix="/api/v1")
    app.include_router(sync_router, prefix="/api/v1")

    return app


def main() -> None:
    uvicorn.run(
        "vector_service.api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
    )


if __name__ == "__main__":
    main()
