"""OrderDrop - Main FastAPI Application

Buyer file collection for online orders: upload links per order, a buyer
upload form, delivery into a seller-shared folder, and a reset workflow.

This module creates and configures the FastAPI application, including:
- Routers (intake, webhook, uploads, resets, observability)
- Middleware (request ID correlation, CORS)
- Exception handlers mapping lifecycle errors to JSON responses
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .bootstrap import AppContainer
from .config import Settings, get_settings
from .domain.requests.errors import OrderDropError, StorageError
from .intake.router import router as intake_router
from .observability.logging_config import configure_logging
from .observability.middleware import RequestIDMiddleware
from .observability.router import router as observability_router
from .resets.router import router as resets_router
from .uploads.router import router as uploads_router
from .webhooks.router import router as webhooks_router

logger = logging.getLogger(__name__)


def _error_body(code: str, message: str) -> dict:
    return {"success": False, "error": code, "message": message}


async def orderdrop_exception_handler(request: Request, exc: OrderDropError) -> JSONResponse:
    """Map lifecycle errors to their status code and machine-readable code.

    Request store failures get a generic message so internals never leak.
    """
    if isinstance(exc, StorageError) or exc.status_code >= 500:
        logger.error(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.error_code} on {request.method} {request.url.path}: {exc.message}")

    message = exc.message
    if isinstance(exc, StorageError):
        message = "A storage error occurred. Please try again later."
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.error_code, message))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Validation error on {request.method} {request.url.path}")
    body = _error_body("validation_error", "Request validation failed")
    body["details"] = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg")} for error in exc.errors()
    ]
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: full details are logged but not exposed to the client."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("internal_error", "An unexpected error occurred. Please try again later."),
    )


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[AppContainer] = None,
) -> FastAPI:
    """Application factory.

    Args:
        settings: Defaults to get_settings()
        container: Pre-built wiring (tests). When omitted, the lifespan builds
            one at startup and closes it at shutdown.
    """
    settings = settings or (container.settings if container else get_settings())
    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"OrderDrop API starting up (environment={settings.ENVIRONMENT})")
        owns_container = container is None
        app.state.container = container or AppContainer.build(settings)
        try:
            yield
        finally:
            if owns_container:
                app.state.container.close()
            logger.info("OrderDrop API shutting down...")

    is_production = settings.ENVIRONMENT == "production"
    app = FastAPI(
        title="OrderDrop API",
        description="Collects order files from buyers into a folder shared with the seller",
        version=__version__,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
        lifespan=lifespan,
    )
    if container is not None:
        app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    # Added last so it runs first
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(OrderDropError, orderdrop_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(observability_router)
    app.include_router(intake_router)
    app.include_router(webhooks_router)
    app.include_router(uploads_router)
    app.include_router(resets_router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, Any]:
        return {"name": "OrderDrop API", "version": __version__, "status": "running"}

    return app


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "orderdrop.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=_settings.ENVIRONMENT == "development",
        log_level=_settings.LOG_LEVEL.lower(),
    )
