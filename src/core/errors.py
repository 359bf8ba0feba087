"""
Error taxonomy shared by the adapters, the aggregation core and the API.
"""

from typing import Any

from core.config import REDACT_VISIBLE_CHARS


def redact(
    value: str | None,
    start: int = REDACT_VISIBLE_CHARS,
    end: int = REDACT_VISIBLE_CHARS,
    fill: str = "***",
) -> str | None:
    """
    Keep only the first `start` and last `end` characters of a secret.

    Values too short to keep both ends are fully replaced by `fill`.
    """
    if value is None:
        return None
    if len(value) <= start + end:
        return fill
    return value[:start] + fill + value[len(value) - end:]


class PortalError(Exception):
    """Base class for failures surfaced to Portal callers."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or []

    def to_body(self) -> dict[str, Any]:
        """Diagnostic payload safe to return to callers."""
        return {"error": type(self).__name__, "message": self.message}


class InvalidInput(PortalError):
    """Malformed request data or an ambiguous employee identity."""

    status_code = 400
    code = "INVALID_INPUT"


class ConfigurationError(PortalError):
    """A required secret or setting is missing or malformed."""

    status_code = 500
    code = "CONFIGURATION_ERROR"


class VendorCallFailed(PortalError):
    """A vendor request failed while the vendor itself answers its ping."""

    status_code = 500
    code = "VENDOR_CALL_FAILED"

    def __init__(
        self,
        message: str,
        *,
        vendor: str,
        stage: str | None = None,
        url: str | None = None,
        credential: str | None = None,
        cause: Exception | None = None,
        details: list[str] | None = None,
    ):
        super().__init__(message, details)
        self.vendor = vendor
        self.stage = stage
        self.url = url
        # Never store the raw credential on the exception
        self.credential = redact(credential)
        self.cause = cause

    def to_body(self) -> dict[str, Any]:
        body = super().to_body()
        body.update(
            {
                "vendor": self.vendor,
                "stage": self.stage,
                "url": self.url,
                "api_key": self.credential,
            }
        )
        if self.cause is not None:
            body["cause"] = {"name": type(self.cause).__name__, "message": str(self.cause)}
        return body


class VendorUnavailable(VendorCallFailed):
    """The vendor's liveness endpoint is unreachable or unhealthy."""

    status_code = 503
    code = "VENDOR_UNAVAILABLE"
