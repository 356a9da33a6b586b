"""FastAPI application entry point.

This module creates and configures the FastAPI application, including:
- Lifespan: logging, table creation, engine disposal
- Per-app state: settings, session registry, database session factory
- Exception handlers producing the {"error": ..., "code": ...} envelope
- Root and health check endpoints
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from weatherdesk.api.router import router
from weatherdesk.core.config import Settings
from weatherdesk.core.database import create_engine, create_session_factory, init_models
from weatherdesk.core.errors import APIError
from weatherdesk.core.logging import configure_logging
from weatherdesk.core.rate_limiting import limiter, rate_limit_exceeded_handler
from weatherdesk.core.responses import ErrorResponse
from weatherdesk.core.sessions import SessionRegistry

logger = structlog.get_logger()

# Responses under these prefixes carry per-user data and must not be cached
_NO_STORE_PREFIXES = ("/api/", "/auth/", "/me", "/history")

_HTTP_ERROR_MESSAGES = {
    404: ("NOT_FOUND", "Not found"),
    405: ("METHOD_NOT_ALLOWED", "Method not allowed"),
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses.

    Headers added:
    - X-Frame-Options: Prevents clickjacking attacks
    - X-Content-Type-Options: Prevents MIME sniffing
    - Referrer-Policy: Controls referrer information leakage
    - Cache-Control: Prevents caching of per-user responses
    - Content-Security-Policy: Restricts resource loading (API returns no HTML)
    - Strict-Transport-Security: Forces HTTPS (production only)
    """

    def __init__(self, app, *, environment: str) -> None:  # noqa: ANN001
        super().__init__(app)
        self._environment = environment

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Add security headers to response."""
        response = await call_next(request)

        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if request.url.path.startswith(_NO_STORE_PREFIXES):
            response.headers["Cache-Control"] = "no-store, max-age=0"

        response.headers["Content-Security-Policy"] = (
            "default-src 'none'; frame-ancestors 'none'"
        )

        # HSTS only in production (assumes HTTPS via reverse proxy)
        if self._environment == "production":
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response


def api_error_handler(_request: Request, exc: APIError) -> JSONResponse:
    """Handle custom API errors.

    Args:
        request: The incoming request.
        exc: The APIError that was raised.

    Returns:
        JSONResponse with error envelope and appropriate status code.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=exc.message,
            code=exc.code,
            details=exc.details,
        ).to_content(),
    )


def _field_name(loc: tuple | list) -> str:
    # ("body", "password") -> "password"; ("body",) -> "body"
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header")]
    if parts:
        return ".".join(parts)
    return str(loc[0]) if loc else "request"


def validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors from FastAPI.

    The message names the first offending field; all errors are listed in
    details.

    Args:
        request: The incoming request.
        exc: The RequestValidationError from Pydantic.

    Returns:
        JSONResponse with VALIDATION_ERROR code (400).
    """
    errors = exc.errors()
    if errors:
        first = errors[0]
        message = f"{_field_name(first['loc'])}: {first['msg']}"
    else:
        message = "Request validation failed"

    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=message,
            code="VALIDATION_ERROR",
            details=[
                {"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]}
                for e in errors
            ],
        ).to_content(),
    )


def http_error_handler(
    _request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render routing errors (unknown path, wrong method) in the error envelope."""
    code, message = _HTTP_ERROR_MESSAGES.get(
        exc.status_code, ("HTTP_ERROR", str(exc.detail))
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=message, code=code).to_content(),
        headers=getattr(exc, "headers", None),
    )


def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions.

    Returns 500 INTERNAL_ERROR without exposing stack traces; the traceback
    goes to the log.

    Args:
        request: The incoming request.
        exc: The unhandled exception.

    Returns:
        JSONResponse with generic error message (500).
    """
    logger.exception("Unhandled exception", exc_info=exc, path=str(request.url.path))

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="An unexpected error occurred",
            code="INTERNAL_ERROR",
        ).to_content(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown hooks."""
    settings: Settings = app.state.settings
    configure_logging(settings.log_level)

    if settings.auto_create_tables:
        await init_models(app.state.engine)
    if not settings.openweather_configured:
        logger.warning(
            "OPENWEATHER_API_KEY not set; weather endpoints will return 500"
        )
    logger.info("Application started", environment=settings.environment)

    yield

    await app.state.engine.dispose()
    logger.info("Application stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Each app owns its settings, engine and session registry.

    Args:
        settings: Configuration. Defaults to Settings() from the environment.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or Settings()

    app = FastAPI(
        title="WeatherDesk API",
        version="1.0.0",
        description="City weather, forecasts and per-user search history",
        lifespan=lifespan,
    )

    engine = create_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.sessions = SessionRegistry()

    # Middleware order: Starlette uses LIFO, so the LAST added runs FIRST.
    # CORS must run first to handle preflight requests, so add it last.
    app.add_middleware(SecurityHeadersMiddleware, environment=settings.environment)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Register exception handlers
    # Order matters: specific handlers first, then catch-all
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, internal_error_handler)

    # Rate limiting (Security)
    # The limiter is process-wide: the most recently created app decides
    # whether it is on for every app in the process.
    limiter.enabled = settings.rate_limit_enabled
    app.state.limiter = limiter

    app.include_router(router)

    @app.get("/")
    def root() -> dict:
        """Liveness message."""
        return {"message": "Backend is working!"}

    @app.get("/health")
    def health_check() -> dict:
        """Health check endpoint for monitoring.

        Returns:
            {"status": "healthy"} if service is running.
        """
        return {"status": "healthy"}

    return app


# Used by uvicorn: uvicorn weatherdesk.main:app
app = create_app()
