"""
JSON conventions of the SendGrid v3 API.

- Timestamps travel as integer Unix epoch seconds and surface as UTC datetimes.
- List endpoints wrap their entities in a ``{"result": [...]}`` envelope.
- Bulk endpoints take either a bare array or an ``{"ids": [...]}`` object.
"""

import enum
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

from sendgrid_api.core.errors import FormatError, SchemaError

T = TypeVar("T")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_SECOND = timedelta(seconds=1)

RESULT_KEY = "result"
IDS_KEY = "ids"


class NoContent:
    """Sentinel type for successful responses without a body."""

    def __repr__(self) -> str:
        return "NO_CONTENT"

    def __bool__(self) -> bool:
        return False


NO_CONTENT = NoContent()


class DecodeMode(enum.Enum):
    """Response shape declared by the caller."""

    SINGLE = "single"  # the payload is the entity
    LIST = "list"  # {"result": [entity, ...]}
    ARRAY = "array"  # [entity, ...]
    NONE = "none"  # body is ignored


class BodyShape(enum.Enum):
    """Request body shape for bulk endpoints."""

    ARRAY = "array"  # [value, ...]
    ID_LIST = "id_list"  # {"ids": [id, ...]}


# =============================================================================
# Field values
# =============================================================================


def encode_timestamp(value: datetime) -> int:
    """
    Convert a datetime to Unix epoch seconds.

    Naive datetimes are interpreted as UTC. Sub-second precision is dropped.
    """
    if not isinstance(value, datetime):
        raise FormatError(f"Expected a datetime, got {type(value).__name__}")
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - EPOCH) // _ONE_SECOND


def decode_str(value: Any, field: str | None = None) -> str:
    """Check that a field holds a JSON string."""
    if not isinstance(value, str):
        raise FormatError(f"Expected a string, got {value!r}", field=field)
    return value


def decode_bool(value: Any, field: str | None = None) -> bool:
    """Check that a field holds a JSON boolean."""
    if not isinstance(value, bool):
        raise FormatError(f"Expected a boolean, got {value!r}", field=field)
    return value


def decode_int(value: Any, field: str | None = None) -> int:
    """Check that a field holds a JSON integer."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise FormatError(f"Expected an integer, got {value!r}", field=field)
    return value


def decode_timestamp(value: Any, field: str | None = None) -> datetime:
    """
    Convert Unix epoch seconds to a timezone-aware UTC datetime.

    Args:
        value: Epoch seconds as found in the JSON payload
        field: Name of the field being decoded, reported on failure

    Returns:
        The corresponding UTC datetime

    Raises:
        FormatError: If the value is not an integral number or is out of range

    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FormatError(f"Expected epoch seconds, got {value!r}", field=field)
    if isinstance(value, float):
        if not value.is_integer():
            raise FormatError(f"Expected whole epoch seconds, got {value!r}", field=field)
        value = int(value)
    try:
        return EPOCH + timedelta(seconds=value)
    except OverflowError as e:
        raise FormatError(f"Timestamp out of range: {value}", field=field) from e


# =============================================================================
# Envelopes
# =============================================================================


def _identity(item: Any) -> Any:
    return item


def _decode_entity(item: Any, parser: Callable[[Any], T], index: int | None) -> T:
    where = "response body" if index is None else f"result[{index}]"
    try:
        return parser(item)
    except SchemaError:
        raise
    except KeyError as e:
        field = str(e.args[0]) if e.args else None
        raise SchemaError(f"Missing field {field!r} in {where}", field=field) from e
    except (TypeError, ValueError, AttributeError) as e:
        raise SchemaError(f"Could not decode {where}: {e}") from e


def decode_payload(
    payload: Any,
    mode: DecodeMode,
    parser: Callable[[Any], T] | None = None,
) -> T | list[T] | NoContent:
    """
    Decode a parsed JSON payload according to the declared shape.

    List shapes are all-or-nothing: if any element fails to decode, the
    whole payload is rejected.

    Args:
        payload: Parsed JSON value
        mode: Expected shape
        parser: Converts one JSON entity into a typed object

    Returns:
        One entity for SINGLE, a list for LIST/ARRAY, NO_CONTENT for NONE

    Raises:
        SchemaError: If the payload does not have the expected shape

    """
    if mode is DecodeMode.NONE:
        return NO_CONTENT

    parse = parser or _identity
    if mode is DecodeMode.SINGLE:
        return _decode_entity(payload, parse, None)

    if mode is DecodeMode.LIST:
        if not isinstance(payload, Mapping) or RESULT_KEY not in payload:
            raise SchemaError(f"Expected a {{\"{RESULT_KEY}\": [...]}} envelope", field=RESULT_KEY)
        items = payload[RESULT_KEY]
    else:
        items = payload

    if not isinstance(items, list):
        raise SchemaError(f"Expected a JSON array, got {type(items).__name__}")
    return [_decode_entity(item, parse, i) for i, item in enumerate(items)]


# =============================================================================
# Request bodies
# =============================================================================


def to_json_value(value: Any) -> Any:
    """Normalise a value for JSON serialization, encoding datetimes as epoch seconds."""
    if isinstance(value, datetime):
        return encode_timestamp(value)
    if hasattr(value, "to_dict"):
        return to_json_value(value.to_dict())
    if isinstance(value, Mapping):
        return {str(k): to_json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_value(v) for v in value]
    return value


def encode_body(values: Iterable[Any], shape: BodyShape) -> Any:
    """
    Shape an ordered sequence of values into a bulk request body.

    Args:
        values: Entities, mappings or identifiers
        shape: ARRAY for bulk-create endpoints, ID_LIST for bulk-delete endpoints

    Returns:
        A JSON-ready list or ``{"ids": [...]}`` mapping

    """
    items = [to_json_value(v) for v in values]
    if shape is BodyShape.ID_LIST:
        return {IDS_KEY: items}
    return items
