"""
Error taxonomy for the SendGrid client.

Transport failures, cancellations, API errors and payload decoding errors
are kept in separate branches so calling code can tell them apart.
"""

from dataclasses import dataclass
from typing import Any


class SendGridError(Exception):
    """Base error class for the client."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class ConfigurationError(SendGridError):
    """Missing or invalid client configuration."""


class ValidationError(SendGridError):
    """Invalid arguments supplied by the caller (not an API error)."""


class TransportError(SendGridError):
    """The request never produced an HTTP response (connection, timeout, protocol)."""


class CancelledError(SendGridError):
    """The caller's cancellation signal fired before the response arrived."""


@dataclass(frozen=True)
class ErrorDetail:
    """A single provider error entry."""

    message: str
    field: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "message": self.message}


class ApiError(SendGridError):
    """Non-2xx HTTP response with the provider's error messages."""

    def __init__(
        self,
        message: str,
        status: int,
        errors: tuple[ErrorDetail, ...] = (),
        body: str = "",
    ):
        super().__init__(message, {"errors": [e.to_dict() for e in errors]} if errors else None)
        self.status = status
        self.errors = errors
        self.body = body

    @property
    def messages(self) -> list[str]:
        """Provider messages, in the order they were returned."""
        return [e.message for e in self.errors]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        result["status"] = self.status
        return result


class AuthenticationError(ApiError):
    """API key rejected or lacking the required scope (401/403)."""


class NotFoundError(ApiError):
    """The addressed resource does not exist (404)."""


class RateLimitError(ApiError):
    """Too many requests (429)."""

    def __init__(
        self,
        message: str,
        status: int,
        errors: tuple[ErrorDetail, ...] = (),
        body: str = "",
        retry_after: float | None = None,
    ):
        super().__init__(message, status, errors, body)
        self.retry_after = retry_after


class SchemaError(SendGridError):
    """Response body does not match the expected envelope or entity shape."""

    def __init__(self, message: str, field: str | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class FormatError(SchemaError):
    """A field value failed type-specific decoding (e.g. a timestamp)."""
