"""
Core HTTP client for the SendGrid v3 API.

Handles authentication, request dispatch, response decoding and error mapping.
"""

import asyncio
import contextlib
import json
import logging
import os
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

import httpx

from sendgrid_api.core.codecs import NO_CONTENT, DecodeMode, NoContent, decode_payload
from sendgrid_api.core.errors import (
    ApiError,
    AuthenticationError,
    CancelledError,
    ConfigurationError,
    ErrorDetail,
    NotFoundError,
    RateLimitError,
    SchemaError,
    TransportError,
)
from sendgrid_api.core.request import Request, RequestBuilder

logger = logging.getLogger(__name__)

# Configuration
DEFAULT_BASE_URL = "https://api.sendgrid.com/v3"
DEFAULT_TIMEOUT = 60

T = TypeVar("T")


def _parse_retry_after(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None


def _error_detail(item: Any) -> ErrorDetail | None:
    if isinstance(item, str):
        return ErrorDetail(item) if item else None
    if isinstance(item, Mapping) and isinstance(item.get("message"), str):
        field = item.get("field")
        return ErrorDetail(item["message"], field if isinstance(field, str) else None)
    return None


def parse_error_body(body: str) -> tuple[ErrorDetail, ...]:
    """
    Extract the provider's error messages from a response body.

    Handles ``{"errors": [{"field": ..., "message": ...}]}``, a bare array of
    such objects, ``{"error": "..."}``, ``{"message": "..."}`` and a JSON string.
    Anything else yields an empty tuple.
    """
    try:
        data = json.loads(body)
    except ValueError:
        return ()

    if isinstance(data, Mapping):
        if "errors" in data:
            data = data["errors"]
        elif isinstance(data.get("error"), str):
            data = [data["error"]]
        else:
            data = [data]
    elif isinstance(data, str):
        data = [data]

    if not isinstance(data, list):
        return ()
    details = (_error_detail(item) for item in data)
    return tuple(d for d in details if d is not None)


def build_api_error(response: httpx.Response) -> ApiError:
    """Map a non-2xx response to the matching ApiError subclass."""
    status = response.status_code
    body = response.text
    errors = parse_error_body(body)
    if errors:
        message = "; ".join(e.message for e in errors)
    else:
        message = f"HTTP {status} {response.reason_phrase}".rstrip()

    if status in (401, 403):
        return AuthenticationError(message, status, errors, body)
    if status == 404:
        return NotFoundError(message, status, errors, body)
    if status == 429:
        retry_after = _parse_retry_after(response.headers.get("Retry-After"))
        return RateLimitError(message, status, errors, body, retry_after=retry_after)
    return ApiError(message, status, errors, body)


class APIClient:
    """
    Low-level HTTP client for the SendGrid v3 API.

    Handles:
    - Authentication via API key
    - One transport attempt per call, with cooperative cancellation
    - Error mapping and response decoding
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: int = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the API client.

        Args:
            api_key: SendGrid API key (or SENDGRID_API_KEY env var)
            base_url: API base URL (or SENDGRID_BASE_URL env var)
            timeout: Request timeout in seconds
            http_client: Preconfigured httpx client, e.g. with a mock transport

        """
        self.api_key = api_key or os.environ.get("SENDGRID_API_KEY")
        env_base_url = os.environ.get("SENDGRID_BASE_URL", DEFAULT_BASE_URL)
        self.base_url = (base_url or env_base_url).rstrip("/")
        self.timeout = timeout
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def __aenter__(self) -> "APIClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying connection pool if this client created it."""
        if self._owns_http:
            await self._http.aclose()

    def _ensure_api_key(self) -> str:
        """Ensure API key is configured."""
        if not self.api_key:
            raise ConfigurationError("SENDGRID_API_KEY environment variable not set")
        return self.api_key

    def _build_url(self, path: str) -> str:
        """Build full URL from path."""
        return f"{self.base_url}{path}"

    def builder(self, base_path: str) -> RequestBuilder:
        """Get a request builder for a resource area."""
        return RequestBuilder(base_path, f"Bearer {self._ensure_api_key()}")

    # =========================================================================
    # Transport
    # =========================================================================

    async def _transmit(self, http_request: httpx.Request) -> httpx.Response:
        try:
            return await self._http.send(http_request)
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timed out after {self.timeout} seconds") from e
        except httpx.RequestError as e:
            raise TransportError(f"Connection error: {e}") from e

    async def _send(self, request: Request) -> httpx.Response:
        http_request = self._http.build_request(
            request.method,
            self._build_url(request.path),
            params=list(request.query) or None,
            json=request.body,
            headers=dict(request.headers),
        )
        cancellation = request.cancellation
        if cancellation is None:
            return await self._transmit(http_request)
        if cancellation.is_set():
            raise CancelledError(f"{request.method} {request.path} cancelled before sending")

        send = asyncio.ensure_future(self._transmit(http_request))
        cancelled = asyncio.ensure_future(cancellation.wait())
        try:
            await asyncio.wait({send, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            cancelled.cancel()
            if not send.done():
                send.cancel()

        if not send.cancelled() and send.done():
            return send.result()
        with contextlib.suppress(asyncio.CancelledError):
            await send
        raise CancelledError(f"{request.method} {request.path} cancelled")

    # =========================================================================
    # Dispatch
    # =========================================================================

    async def dispatch(
        self,
        request: Request,
        mode: DecodeMode = DecodeMode.NONE,
        parser: Callable[[Any], T] | None = None,
    ) -> T | list[T] | NoContent:
        """
        Send a request and decode its response.

        Args:
            request: Request built by a RequestBuilder
            mode: Expected response shape
            parser: Converts one JSON entity into a typed object

        Returns:
            The decoded entity or entities, or NO_CONTENT

        Raises:
            TransportError: If no HTTP response was received
            CancelledError: If the request's cancellation event fired first
            ApiError: On non-2xx responses
            SchemaError: If a 2xx body does not match the expected shape

        """
        response = await self._send(request)
        logger.debug("%s %s -> %s", request.method, request.path, response.status_code)

        if not response.is_success:
            raise build_api_error(response)
        if mode is DecodeMode.NONE:
            return NO_CONTENT
        if not response.content.strip():
            raise SchemaError(f"Expected a {mode.value} response body, got an empty body")

        try:
            payload = response.json()
        except ValueError as e:
            raise SchemaError(f"Invalid JSON response: {e}") from e
        return decode_payload(payload, mode, parser)
