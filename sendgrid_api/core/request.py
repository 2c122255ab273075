"""
Outgoing request assembly.

Pure data: nothing in this module touches the network.
"""

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, NamedTuple
from urllib.parse import quote

from sendgrid_api.core.codecs import BodyShape, encode_body, to_json_value

USER_AGENT = "sendgrid-api-python/0.1.0"


class Argument(NamedTuple):
    """A query argument that is only sent when it differs from its documented default."""

    name: str
    value: Any
    default: Any = None


@dataclass(frozen=True)
class Request:
    """A fully assembled API request."""

    method: str
    path: str
    query: tuple[tuple[str, str], ...] = ()
    body: Any = None
    headers: tuple[tuple[str, str], ...] = ()
    cancellation: asyncio.Event | None = field(default=None, compare=False)

    @property
    def has_body(self) -> bool:
        """Check if the request carries a JSON body."""
        return self.body is not None


def _format_query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _escape_segment(segment: Any) -> str:
    return quote(str(segment), safe="")


class RequestBuilder:
    """
    Builds requests for one resource area (e.g. ``access_settings``).

    Example:
        builder = RequestBuilder("access_settings", "Bearer SG.xxx")
        request = builder.build("DELETE", "whitelist", 1111)
        # request.path == "/access_settings/whitelist/1111"

    """

    def __init__(self, base_path: str, authorization: str):
        self.base_path = base_path
        self.authorization = authorization

    def path(self, *segments: Any) -> str:
        """Join the base path and the given segments, escaping each one."""
        parts = [self.base_path, *(s for s in segments if s is not None)]
        return "/" + "/".join(_escape_segment(p) for p in parts)

    def headers(self, with_body: bool) -> tuple[tuple[str, str], ...]:
        """Headers sent with every request."""
        headers = [
            ("Authorization", self.authorization),
            ("Accept", "application/json"),
            ("User-Agent", USER_AGENT),
        ]
        if with_body:
            headers.append(("Content-Type", "application/json"))
        return tuple(headers)

    @staticmethod
    def query(args: Iterable[Argument]) -> tuple[tuple[str, str], ...]:
        """Keep only the arguments whose value differs from their default, in order."""
        return tuple(
            (arg.name, _format_query_value(arg.value))
            for arg in args
            if arg.value is not None and arg.value != arg.default
        )

    def build(
        self,
        method: str,
        *segments: Any,
        args: Iterable[Argument] = (),
        body: Any = None,
        shape: BodyShape | None = None,
        cancellation: asyncio.Event | None = None,
    ) -> Request:
        """
        Assemble a request.

        Args:
            method: HTTP method
            *segments: Operation suffix and optional trailing identifier
            args: Query arguments
            body: JSON body, or the values of a bulk body when ``shape`` is given
            shape: Bulk body shape
            cancellation: Event that aborts the call when set

        Returns:
            Immutable Request

        """
        if body is not None:
            body = encode_body(body, shape) if shape is not None else to_json_value(body)
        return Request(
            method=method.upper(),
            path=self.path(*segments),
            query=self.query(args),
            body=body,
            headers=self.headers(body is not None),
            cancellation=cancellation,
        )
