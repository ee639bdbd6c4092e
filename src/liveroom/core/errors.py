"""Typed application errors and the error response schema."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Standardized error response."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    retriable: bool = Field(False, description="Whether repeating the request may succeed")
    details: Optional[dict[str, Any]] = Field(None, description="Additional context")


class AppError(Exception):
    """Base exception for all app-level errors."""

    retriable = False

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_response(self) -> ErrorDetail:
        """Convert to API response schema."""
        return ErrorDetail(
            code=self.code,
            message=self.message,
            retriable=self.retriable,
            details=self.details if self.details else None,
        )


class NotFoundError(AppError):
    """Raised when resource doesn't exist."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            code="NOT_FOUND",
            message=f"{resource} with ID {resource_id} not found",
            status_code=404,
            details={"resource": resource, "resource_id": resource_id},
        )


class UnauthorizedError(AppError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            code="UNAUTHORIZED",
            message=message,
            status_code=401,
        )


class ForbiddenError(AppError):
    """Raised when the caller is not allowed to act on a resource."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(
            code="FORBIDDEN",
            message=message,
            status_code=403,
        )


class SessionEndedError(AppError):
    """Raised when joining a live session that is already completed."""

    def __init__(self, session_id: str):
        super().__init__(
            code="SESSION_ENDED",
            message="This session has already ended",
            status_code=409,
            details={"session_id": session_id},
        )


class ConfigurationError(AppError):
    """Raised when deployment configuration is missing or unusable.

    The internal reason is kept on ``reason`` for the operator log; the
    response only carries a generic message.
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(
            code="CONFIGURATION_ERROR",
            message="Video service is temporarily unavailable",
            status_code=500,
        )


class TransientStoreError(AppError):
    """Raised when the session store cannot be read or written."""

    retriable = True

    def __init__(self, operation: str):
        super().__init__(
            code="STORE_UNAVAILABLE",
            message="Session storage is temporarily unavailable, please retry",
            status_code=503,
            details={"operation": operation},
        )
