"""GeoMind API - Main FastAPI Application.

This module provides the FastAPI application for the GeoMind explorer.
It includes:
- CORS middleware configuration
- API versioning (/api/v1)
- Health check endpoints
- Shop, Session, Chat and Map endpoints
- Container startup and shutdown in the lifespan

Usage:
    # Run with uvicorn
    uvicorn geomind.api.main:app --reload

    # Or run directly
    python -m geomind.api.main
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

import structlog
from fastapi import APIRouter, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from geomind import __version__
from geomind.api.dependencies import reset_dependencies, set_container
from geomind.api.models import ErrorResponse, ValidationErrorDetail, ValidationErrorResponse
from geomind.api.routes.chat import router as chat_router
from geomind.api.routes.health import router as health_router, set_server_start_time
from geomind.api.routes.map import router as map_router
from geomind.api.routes.session import router as session_router
from geomind.api.routes.shops import router as shops_router
from geomind.config.settings import Settings, get_settings
from geomind.core.container import DependencyContainer
from geomind.core.exceptions import (
    InvalidTransitionError,
    NotificationNotFoundError,
    ShopNotFoundError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

# API metadata for OpenAPI documentation
API_TITLE = "GeoMind API"
API_DESCRIPTION = """
## Street-Food Map Explorer

GeoMind keeps a curated list of legendary street-food spots, lets shop owners
register their own vendor entries with a menu, and answers questions about the
neighbourhood through a location-aware assistant.

### Getting Started

1. **Browse**: `GET /api/v1/shops?q=mess` lists legend and vendor shops
2. **Explore**: `POST /api/v1/session/select/{shop_id}` focuses a shop
3. **Chat**: `POST /api/v1/chat/messages` then poll `GET /api/v1/chat/messages`
4. **Register**: `POST /api/v1/session/registration`, then `POST /api/v1/shops`
"""

OPENAPI_TAGS = [
    {"name": "Health", "description": "System health and status endpoints"},
    {"name": "Shops", "description": "Legend and vendor shop directory"},
    {"name": "Session", "description": "Shop selection and registration state"},
    {"name": "Chat", "description": "Conversation with the location-aware assistant"},
    {"name": "Map", "description": "Map frame and map interaction events"},
]


# =============================================================================
# Exception Handlers
# =============================================================================


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors with detailed response."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors.append(ValidationErrorDetail(
            field=field,
            message=error["msg"],
            value=error.get("input"),
        ))

    response = ValidationErrorResponse(errors=errors)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=response.model_dump(mode="json"),
    )


async def input_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Report rejected registration input against the field that caused it."""
    value = exc.value if isinstance(exc.value, (str, int, float, bool, type(None))) else None
    response = ValidationErrorResponse(
        message=exc.message,
        errors=[ValidationErrorDetail(field=exc.field, message=exc.message, value=value)],
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=response.model_dump(mode="json"),
    )


async def not_found_exception_handler(request: Request, exc: ShopNotFoundError) -> JSONResponse:
    response = ErrorResponse(
        error="shop_not_found",
        message=exc.message,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=response.model_dump(mode="json"),
    )


async def notification_not_found_handler(
    request: Request, exc: NotificationNotFoundError
) -> JSONResponse:
    response = ErrorResponse(
        error="notification_not_found",
        message=exc.message,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=response.model_dump(mode="json"),
    )


async def transition_exception_handler(
    request: Request, exc: InvalidTransitionError
) -> JSONResponse:
    response = ErrorResponse(
        error="invalid_transition",
        message=exc.message,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=response.model_dump(mode="json"),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
    )

    response = ErrorResponse(
        error="internal_server_error",
        message="An unexpected error occurred",
        detail=str(exc) if get_settings().debug else None,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=response.model_dump(mode="json"),
    )


# =============================================================================
# Application Factory
# =============================================================================


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[DependencyContainer] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Application settings. Defaults to get_settings().
        container: Pre-built container; one is created from settings otherwise.

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        Application lifespan manager.

        - Startup: build the container, start the map event consumer
        - Shutdown: stop the consumer, cancel in-flight assistant replies
        """
        logger.info("application_starting", environment=settings.app_env, version=__version__)
        set_server_start_time()

        app_container = container or DependencyContainer(settings=settings)
        await app_container.initialize()
        set_container(app_container)
        logger.info("application_started")

        yield

        logger.info("application_stopping")
        try:
            await app_container.shutdown()
        except Exception as e:
            logger.error("container_shutdown_error", error=str(e))
        reset_dependencies()
        logger.info("application_stopped")

    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        openapi_tags=OPENAPI_TAGS,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, input_exception_handler)
    app.add_exception_handler(ShopNotFoundError, not_found_exception_handler)
    app.add_exception_handler(NotificationNotFoundError, notification_not_found_handler)
    app.add_exception_handler(InvalidTransitionError, transition_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "name": API_TITLE,
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
            "api": "/api/v1",
        }

    # Health endpoints at root level
    app.include_router(health_router)

    api_v1_router = APIRouter(prefix="/api/v1")
    api_v1_router.include_router(shops_router)
    api_v1_router.include_router(session_router)
    api_v1_router.include_router(chat_router)
    api_v1_router.include_router(map_router)
    app.include_router(api_v1_router)

    return app


app = create_app()


# =============================================================================
# Development Server
# =============================================================================


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()

    uvicorn.run(
        "geomind.api.main:app",
        host=_settings.api_host,
        port=_settings.api_port,
        reload=_settings.is_development,
        log_level=_settings.log_level.lower(),
    )
