# File: src/liveroom/core/exception_handlers.py
"""Global exception handlers for FastAPI."""

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from liveroom.core.errors import AppError, ConfigurationError
from liveroom.core.logging import get_logger

logger = get_logger(__name__)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """
    Convert AppError subclasses to the standard JSON error body.

    {
        "code": "SESSION_ENDED",
        "message": "This session has already ended",
        "retriable": false,
        "details": {"session_id": "..."}
    }

    Server-side failures are logged with their internal reason; the body
    never carries it.
    """
    if exc.status_code >= 500:
        logger.error(
            "app_error",
            code=exc.code,
            path=request.url.path,
            reason=exc.reason if isinstance(exc, ConfigurationError) else exc.message,
        )

    error_response = exc.to_response()
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response.model_dump(exclude_none=True),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Log HTTP exceptions and return them as JSON."""
    logger.warning(
        "http_exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app) -> None:
    """Register all custom exception handlers with FastAPI app."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
