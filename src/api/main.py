"""
FastAPI Application Setup

Main entry point for the Review Pipeline API application.

Responsibility:
    - FastAPI app initialization
    - Service container lifecycle (lifespan)
    - Router registration (users, applications, reviews, files, dashboard)
    - CORS middleware configuration
    - Global exception handlers
    - Request logging middleware
    - Health check endpoint

Architecture Notes:
    - Part of API Layer (Presentation)
    - Entry point for HTTP server (uvicorn)
    - Centralizes cross-cutting concerns (logging, CORS, error handling)
    - No business logic - pure HTTP orchestration

Contains:
    - create_app() factory function
    - Global exception handlers
    - Request logging middleware
    - Health check endpoint: GET /health
"""

import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.api.container import ReviewPipelineContainer
from src.api.dependencies import AuthenticationError
from src.api.routers import applications, dashboard, files, reviews, users
from src.api.schemas.common import ErrorResponse
from src.domain.shared.exceptions import (
    DomainException,
    ForbiddenError,
    InvalidScoreError,
    InvalidTransitionError,
    NotFoundError,
    StoreUnavailableError,
    WriteConflictError,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"

# First match wins; subclasses must precede their bases.
DOMAIN_ERROR_STATUS: tuple[tuple[type[DomainException], int, str], ...] = (
    (InvalidTransitionError, status.HTTP_409_CONFLICT, "INVALID_TRANSITION"),
    (WriteConflictError, status.HTTP_409_CONFLICT, "WRITE_CONFLICT"),
    (ForbiddenError, status.HTTP_403_FORBIDDEN, "FORBIDDEN"),
    (InvalidScoreError, status.HTTP_400_BAD_REQUEST, "INVALID_SCORE"),
    (NotFoundError, status.HTTP_404_NOT_FOUND, "NOT_FOUND"),
    (StoreUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE, "STORE_UNAVAILABLE"),
)


# ============================================================================
# RESPONSE MODELS
# ============================================================================


class HealthCheckResponse(BaseModel):
    """
    Health check response model.

    Attributes:
        status: Health status (always "ok" if endpoint responds)
        version: API version
        timestamp: Unix timestamp of health check
    """

    status: str = "ok"
    version: str = API_VERSION
    timestamp: float


# ============================================================================
# MIDDLEWARE
# ============================================================================


async def request_logging_middleware(request: Request, call_next):
    """
    Request logging middleware.

    Logs all incoming requests with method, path, status code, and duration.

    Logging Format:
        INFO: "Incoming request: POST /api/applications"
        INFO: "Request completed: POST /api/applications - 201 - 0.012s"
    """
    logger.info(f"Incoming request: {request.method} {request.url.path}")
    start_time = time.time()

    response = await call_next(request)

    duration = time.time() - start_time
    logger.info(
        f"Request completed: {request.method} {request.url.path} - "
        f"{response.status_code} - {duration:.3f}s"
    )
    return response


# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================


def _error_details(exc: Exception) -> dict[str, Any]:
    """Exception type plus the non-empty context attributes of the exception."""
    details: dict[str, Any] = {"exception_type": exc.__class__.__name__}
    for name, value in vars(exc).items():
        if name in ("message", "original_error") or value is None:
            continue
        details[name] = value if isinstance(value, (str, int, float, bool)) else str(value)
    return details


async def domain_exception_handler(request: Request, exc: DomainException):
    """
    Global exception handler for domain layer exceptions.

    Mapping:
        - InvalidTransitionError -> 409 Conflict
        - WriteConflictError -> 409 Conflict
        - ForbiddenError -> 403 Forbidden
        - InvalidScoreError -> 400 Bad Request
        - NotFoundError -> 404 Not Found
        - StoreUnavailableError -> 503 Service Unavailable
        - Other DomainException -> 400 Bad Request

    Examples:
        >>> raise InvalidTransitionError("...", "accepted", "pending")
        >>> # Returns: 409 {"code": "INVALID_TRANSITION", "message": "...", "details": {...}}
    """
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = exc.__class__.__name__.replace("Error", "").upper()
    for exc_type, mapped_status, mapped_code in DOMAIN_ERROR_STATUS:
        if isinstance(exc, exc_type):
            status_code, error_code = mapped_status, mapped_code
            break

    error_response = ErrorResponse(
        code=error_code,
        message=str(exc),
        details=_error_details(exc),
    )

    if status_code >= 500:
        logger.error(
            f"Domain exception: {exc.__class__.__name__} - {str(exc)} - "
            f"Request: {request.method} {request.url.path}"
        )
    else:
        logger.warning(
            f"Domain exception: {exc.__class__.__name__} - {str(exc)} - "
            f"Request: {request.method} {request.url.path}"
        )

    return JSONResponse(status_code=status_code, content=error_response.model_dump())


async def authentication_exception_handler(request: Request, exc: AuthenticationError):
    """Convert AuthenticationError to 401 Unauthorized."""
    error_response = ErrorResponse(
        code="AUTHENTICATION_REQUIRED",
        message=exc.message,
        details={"user_id": exc.user_id} if exc.user_id else None,
    )

    logger.warning(
        f"Unauthenticated request: {exc.message} - Request: {request.method} {request.url.path}"
    )

    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=error_response.model_dump(),
    )


async def generic_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler for unexpected exceptions.

    Catches all unhandled exceptions and converts to 500 Internal Server Error.
    Logs full stack trace for debugging.
    """
    error_response = ErrorResponse(
        code="INTERNAL_SERVER_ERROR",
        message="An unexpected error occurred",
        details={"error": str(exc), "type": exc.__class__.__name__},
    )

    logger.error(
        f"Unexpected error: {exc.__class__.__name__} - {str(exc)} - "
        f"Request: {request.method} {request.url.path}",
        exc_info=True,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response.model_dump(),
    )


# ============================================================================
# APP FACTORY
# ============================================================================


def create_app(container: Optional[ReviewPipelineContainer] = None) -> FastAPI:
    """
    FastAPI application factory.

    Configuration:
        - CORS: origins from CORS_ALLOW_ORIGINS (comma-separated, default "*")
        - Routers: /api/users, /api/applications, /api/applications/{id}/reviews,
          /api/files, /api/stats, /api/export
        - Health: GET /health

    Args:
        container: Prebuilt service container (tests); built from the
            environment on startup when omitted

    Usage:
        >>> app = create_app()
        >>> # uvicorn src.api.main:app --reload
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if getattr(app.state, "container", None) is None:
            app.state.container = ReviewPipelineContainer.from_env()
        try:
            yield
        finally:
            await app.state.container.close()

    app = FastAPI(
        title="Review Pipeline API",
        version=API_VERSION,
        description=(
            "Multi-role application review pipeline: applicants submit, "
            "reviewers score, admins finalize. Live dashboards over WebSocket."
        ),
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    if container is not None:
        app.state.container = container

    origins = [o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.middleware("http")(request_logging_middleware)

    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(AuthenticationError, authentication_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(users.router, prefix="/api")
    app.include_router(applications.router, prefix="/api")
    app.include_router(reviews.router, prefix="/api")
    app.include_router(files.router, prefix="/api")
    app.include_router(dashboard.router, prefix="/api")

    @app.get(
        "/health",
        response_model=HealthCheckResponse,
        status_code=status.HTTP_200_OK,
        summary="Health check endpoint",
        tags=["health"],
    )
    async def health_check() -> HealthCheckResponse:
        return HealthCheckResponse(status="ok", version=API_VERSION, timestamp=time.time())

    logger.info("FastAPI application created successfully")
    return app


# ============================================================================
# APP INSTANCE (for uvicorn)
# ============================================================================

# Usage: uvicorn src.api.main:app --reload
app = create_app()
