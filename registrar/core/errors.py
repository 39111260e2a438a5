"""
Structured error handling with stable error codes.

No stack traces or secret material are exposed to clients. Errors are
reported by category only: client errors (4xx) carry a specific message,
internal errors (5xx) share a generic one while the cause is logged.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes for API responses."""

    INTERNAL_ERROR = "E1000"
    VALIDATION_ERROR = "E1001"
    NOT_FOUND = "E1002"
    METHOD_NOT_ALLOWED = "E1003"
    REQUEST_TOO_LARGE = "E1004"


REGISTRATION_FAILED = "Failed to create user"


@dataclass(frozen=True)
class ErrorResponse:
    """Structured error response for API.

    Format: {error: {code, message, request_id, details?}}
    """

    code: ErrorCode
    message: str
    request_id: str | None = None
    details: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON response."""
        error: dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.request_id:
            error["request_id"] = self.request_id
        if self.details:
            error["details"] = self.details
        return {"error": error}


class AppError(Exception):
    """Base application error with structured error detail.

    ``reason`` is for server-side logs only and never reaches the client.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
        reason: str | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        self.reason = reason or message
        super().__init__(self.reason)

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500

    def to_response(self, request_id: str | None = None) -> ErrorResponse:
        """Create error response with request ID."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            request_id=request_id,
            details=self.details,
        )


class RegistrationError(AppError):
    """Any failure of the registration pipeline."""


class ValidationError(RegistrationError):
    """Validation error (400)."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(ErrorCode.VALIDATION_ERROR, message, 400, details)


class RandomnessUnavailableError(RegistrationError):
    """The OS entropy source could not be read (500, not retryable)."""

    def __init__(self, reason: str = "Entropy source unavailable"):
        super().__init__(
            ErrorCode.INTERNAL_ERROR, REGISTRATION_FAILED, 500, reason=reason
        )


class PersistenceError(RegistrationError):
    """The credential store rejected or failed the write (500)."""

    def __init__(self, reason: str = "Credential store failure"):
        super().__init__(
            ErrorCode.INTERNAL_ERROR, REGISTRATION_FAILED, 500, reason=reason
        )


class MalformedEncodingError(AppError):
    """An encoded password hash could not be parsed (500)."""

    def __init__(self, reason: str = "Malformed encoded hash"):
        super().__init__(
            ErrorCode.INTERNAL_ERROR,
            "Stored credential is malformed",
            500,
            reason=reason,
        )
