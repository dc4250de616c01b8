"""FastAPI application for the certificate renderer service."""

import logging
from contextlib import asynccontextmanager

import fastapi
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.config import Settings, get_settings
from core.logger import configure_logging
from core.middleware import OriginPolicyMiddleware
from rendering.browser import PlaywrightLauncher
from routes import certificates_router, health_router

configure_logging()
logger = logging.getLogger(__name__)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for unhandled exceptions."""
    logger.exception(
        "unhandled.exception",
        extra={
            "exc_type": type(exc).__name__,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "message": str(exc)},
    )


async def validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Handler for request validation errors (malformed or non-object bodies)."""
    if not isinstance(exc, RequestValidationError):
        return JSONResponse(status_code=500, content={"error": "Unexpected error"})

    errors = exc.errors()
    logger.warning(
        "request.validation_error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_count": len(errors),
        },
    )
    detail = errors[0].get("msg", "invalid value") if errors else "invalid value"
    return JSONResponse(
        status_code=400,
        content={"error": f"Invalid request body: {detail}"},
    )


@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    settings: Settings = app.state.settings
    logger.info(
        "server.started",
        extra={
            "port": settings.port,
            "template_path": str(settings.certificate_template_path),
            "assets_path": str(settings.certificate_assets_path),
            "health_check": f"http://localhost:{settings.port}/health",
        },
    )
    yield
    logger.info("server.stopped")


def create_app(settings: Settings | None = None) -> fastapi.FastAPI:
    """Build the application around a frozen settings object."""
    settings = settings or get_settings()

    app = fastapi.FastAPI(
        title="Certificate Renderer",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    app.state.settings = settings
    app.state.browser_launcher = PlaywrightLauncher(settings.browser_executable_path)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    app.add_middleware(OriginPolicyMiddleware, settings=settings)

    app.include_router(health_router)
    app.include_router(certificates_router)
    return app


app = create_app()
