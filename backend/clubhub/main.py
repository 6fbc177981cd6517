"""FastAPI application entry point.

This module creates and configures the FastAPI application, including:
- Server context (settings, database, identity verifier)
- Middleware (CORS, identity, request log, security headers)
- Exception handlers for API errors
- API router mounting at /api
- Static app shell for every other path
"""

import logging
from pathlib import Path

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from clubhub.api.router import router as api_router
from clubhub.core.config import settings
from clubhub.core.context import ServerContext, build_context
from clubhub.core.errors import APIError, NotFoundError, UpstreamError
from clubhub.core.middleware import (
    IdentityMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from clubhub.core.rate_limiting import limiter, rate_limit_exceeded_handler
from clubhub.core.responses import ErrorDetail, ErrorResponse

logger = structlog.get_logger()

# Service modules log through stdlib logging
logging.basicConfig(level=settings.log_level)


def api_error_handler(_request: Request, exc: APIError) -> JSONResponse:
    """Return the error envelope for a typed API error."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=exc.code,
                message=exc.message,
                details=exc.details,
            )
        ).model_dump(),
    )


def validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Convert FastAPI's request validation errors to a 400 envelope."""
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=ErrorDetail(
                code="VALIDATION_ERROR",
                message="Request validation failed",
                details=[
                    {"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]}
                    for e in exc.errors()
                ],
            )
        ).model_dump(),
    )


def persistence_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Database failures: 500 with a generic message, details to the log."""
    logger.error(
        "Persistence failure",
        exc_info=exc,
        path=str(request.url.path),
    )
    return api_error_handler(request, UpstreamError("Site storage is unavailable"))


def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions. Never exposes stack traces."""
    logger.exception("Unhandled exception", exc_info=exc, path=str(request.url.path))

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred",
            )
        ).model_dump(),
    )


def _mount_app_shell(app: FastAPI, static_dir: Path) -> None:
    """Serve the built editor: /assets/* as files, everything else index.html."""
    assets = static_dir / "assets"
    if assets.is_dir():
        app.mount("/assets", StaticFiles(directory=assets), name="assets")

    index = static_dir / "index.html"

    @app.get("/{full_path:path}", include_in_schema=False)
    async def app_shell(full_path: str) -> FileResponse:  # noqa: ARG001
        """Client-side routing: every non-API path loads the editor."""
        if not index.is_file():
            raise NotFoundError("App shell")
        return FileResponse(index)


def create_app(context: ServerContext | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        context: Server context; built from environment settings when None.
            Tests pass their own database and identity verifier here.

    Returns:
        Configured FastAPI application instance.
    """
    context = context or build_context(settings)

    app = FastAPI(
        title="ClubHub API",
        version="1.0.0",
        description="Club website builder backend",
    )
    app.state.context = context
    app.state.limiter = limiter

    # Middleware order: Starlette uses LIFO, so the LAST added runs FIRST.
    # CORS must run first to handle preflight requests, so add it last.
    app.add_middleware(IdentityMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=context.settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept"],
    )

    # Specific handlers first, then catch-all
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(SQLAlchemyError, persistence_error_handler)
    app.add_exception_handler(Exception, internal_error_handler)

    app.include_router(api_router, prefix="/api")

    @app.get("/health")
    def health_check() -> dict:
        """Health check endpoint for monitoring."""
        return {"status": "healthy"}

    _mount_app_shell(app, context.settings.static_dir)

    return app


# Used by uvicorn: uvicorn clubhub.main:app
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
