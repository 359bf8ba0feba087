"""API Pydantic models."""

from .requests import PeriodBody, TimesheetRequestBody
from .responses import ErrorCodes, ErrorResponse, HealthResponse, ReminderRunResponse

__all__ = [
    "HealthResponse",
    "ErrorResponse",
    "ErrorCodes",
    "ReminderRunResponse",
    "PeriodBody",
    "TimesheetRequestBody",
]
