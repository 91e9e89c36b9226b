"""
FastAPI Application Factory

Assembles the optional HTTP surface over a ServiceContainer:
- Routes (instances, properties, inputs, text runs, cache, logger)
- CORS middleware
- Exception handlers mapping binding-layer errors to JSON

The same factory is used by hosts and by the tests (with a container built
around a fake engine).
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from animbind.api.dependencies import set_service_container
from animbind.api.middleware.error_handler import register_exception_handlers
from animbind.api.routes import cache, instances, logger as logger_routes
from animbind.services.service_container import ServiceContainer
from animbind.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SYSTEM)

API_VERSION = "1.0.0"


def create_app(
    services: ServiceContainer,
    title: Optional[str] = None,
    description: Optional[str] = None,
    version: str = API_VERSION,
    docs_enabled: Optional[bool] = None,
    cors_origins: Optional[list[str]] = None
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        services: Container whose registry the routes operate on
        title: API title (default: api.title from config)
        description: API description (default: api.description from config)
        version: API version
        docs_enabled: Enable /docs and /redoc (default: api.docs_enabled)
        cors_origins: CORS allowed origins (default: api.cors_origins)

    Returns:
        Configured FastAPI application ready to run
    """
    settings = services.config_manager.settings.api
    title = title or settings.title
    description = description or settings.description
    docs_enabled = settings.docs_enabled if docs_enabled is None else docs_enabled
    if cors_origins is None:
        cors_origins = list(settings.cors_origins)

    set_service_container(services)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("FastAPI app starting up")
        yield
        log.info("FastAPI app shutting down")

    app = FastAPI(
        title=title,
        description=description,
        version=version,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )

    log.info(f"Creating FastAPI app: {title} v{version}")

    # =========================================================================
    # CORS Configuration
    # =========================================================================

    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        log.debug("CORS enabled", origins=", ".join(cors_origins))

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    register_exception_handlers(app)

    # =========================================================================
    # Routes
    # =========================================================================

    app.include_router(instances.router, prefix="/api/v1")
    app.include_router(cache.router, prefix="/api/v1")
    app.include_router(logger_routes.router, prefix="/api/v1")

    log.debug("Routes registered: instances (/api/v1/instances), cache (/api/v1/cache), "
              "logger (/api/v1/logger)")

    @app.get(
        "/api/health",
        tags=["System"],
        summary="Health check",
        description="Check if API is running and responding"
    )
    async def health_check():
        """Simple health check endpoint for monitoring"""
        return {
            "status": "healthy",
            "service": "animbind",
            "version": version,
            "instances": len(services.registry)
        }

    @app.get("/", include_in_schema=False)
    async def root():
        return JSONResponse(
            {
                "message": title,
                "docs": "/docs" if docs_enabled else None,
                "health": "/api/health"
            }
        )

    return app
