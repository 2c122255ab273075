"""
SendGrid API client - Typed resources over the SendGrid v3 REST API.

Layers:
- core: Request building, JSON codecs, dispatch and error mapping
- sdk: SendGridClient with one facade per API area
"""

from sendgrid_api.core.codecs import NO_CONTENT
from sendgrid_api.core.errors import (
    ApiError,
    AuthenticationError,
    CancelledError,
    ConfigurationError,
    FormatError,
    NotFoundError,
    RateLimitError,
    SchemaError,
    SendGridError,
    TransportError,
    ValidationError,
)
from sendgrid_api.sdk import AccessManagement, SendGridClient, SubUsers

__version__ = "0.1.0"
__all__ = [
    "NO_CONTENT",
    "AccessManagement",
    "ApiError",
    "AuthenticationError",
    "CancelledError",
    "ConfigurationError",
    "FormatError",
    "NotFoundError",
    "RateLimitError",
    "SchemaError",
    "SendGridClient",
    "SendGridError",
    "SubUsers",
    "TransportError",
    "ValidationError",
]
