"""Pydantic response models for API endpoints."""

from typing import Any

from pydantic import BaseModel

from core.errors import PortalError


class HealthResponse(BaseModel):
    """Health check response."""

    status: str  # "healthy" or "unhealthy"
    version: str
    stage: str
    database_available: bool
    timestamp: str  # ISO 8601 UTC
    error: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    details: list[str] = []
    body: dict[str, Any] | None = None

    @classmethod
    def from_error(cls, error: PortalError) -> "ErrorResponse":
        return cls(error=error.message, code=error.code, details=error.details, body=error.to_body())


class ReminderRunResponse(BaseModel):
    """Result of a reminder run."""

    day: int
    date: str
    reminded: list[int]


class ErrorCodes:
    """Error code constants."""

    INVALID_REQUEST = "INVALID_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
