"""
Core layer - Request/response pipeline.

This layer provides:
- Typed dataclasses for API entities
- JSON codecs for timestamps, envelopes and bulk bodies
- Request builder and dispatcher with auth and error handling
"""

from sendgrid_api.core.client import APIClient
from sendgrid_api.core.codecs import (
    NO_CONTENT,
    BodyShape,
    DecodeMode,
    decode_payload,
    decode_timestamp,
    encode_body,
    encode_timestamp,
)
from sendgrid_api.core.errors import (
    ApiError,
    CancelledError,
    ErrorDetail,
    FormatError,
    SchemaError,
    SendGridError,
    TransportError,
)
from sendgrid_api.core.request import Argument, Request, RequestBuilder
from sendgrid_api.core.types import AccessEntry, User, WhitelistedIp

__all__ = [
    "NO_CONTENT",
    "APIClient",
    "AccessEntry",
    "ApiError",
    "Argument",
    "BodyShape",
    "CancelledError",
    "DecodeMode",
    "ErrorDetail",
    "FormatError",
    "Request",
    "RequestBuilder",
    "SchemaError",
    "SendGridError",
    "TransportError",
    "User",
    "WhitelistedIp",
    "decode_payload",
    "decode_timestamp",
    "encode_body",
    "encode_timestamp",
]
