"""
Typed entities returned by the SendGrid v3 API.

Timestamp fields are epoch seconds on the wire and UTC datetimes here.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sendgrid_api.core.codecs import (
    decode_bool,
    decode_int,
    decode_str,
    decode_timestamp,
    encode_timestamp,
)


def _optional(data: dict[str, Any], key: str, decode: Callable[[Any, str], Any], default: Any) -> Any:
    value = data.get(key)
    return default if value is None else decode(value, key)


# =============================================================================
# Access Management Types
# =============================================================================


@dataclass
class AccessEntry:
    """An access attempt recorded for the account."""

    allowed: bool
    auth_method: str
    first_at: datetime
    ip: str
    last_at: datetime
    location: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AccessEntry":
        """Create from API response dict."""
        return cls(
            allowed=decode_bool(data["allowed"], "allowed"),
            auth_method=_optional(data, "auth_method", decode_str, ""),
            first_at=decode_timestamp(data["first_at"], "first_at"),
            ip=decode_str(data["ip"], "ip"),
            last_at=decode_timestamp(data["last_at"], "last_at"),
            location=_optional(data, "location", decode_str, ""),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict in wire format."""
        return {
            "allowed": self.allowed,
            "auth_method": self.auth_method,
            "first_at": encode_timestamp(self.first_at),
            "ip": self.ip,
            "last_at": encode_timestamp(self.last_at),
            "location": self.location,
        }


@dataclass
class WhitelistedIp:
    """An IP address (or CIDR range) allowed to use the account."""

    id: int
    ip: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WhitelistedIp":
        """Create from API response dict."""
        return cls(
            id=decode_int(data["id"], "id"),
            ip=decode_str(data["ip"], "ip"),
            created_at=decode_timestamp(data["created_at"], "created_at"),
            updated_at=decode_timestamp(data["updated_at"], "updated_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict in wire format."""
        return {
            "id": self.id,
            "ip": self.ip,
            "created_at": encode_timestamp(self.created_at),
            "updated_at": encode_timestamp(self.updated_at),
        }


# =============================================================================
# Sub-user Types
# =============================================================================


@dataclass
class User:
    """A sub-user of the parent account."""

    id: int
    username: str
    email: str = ""
    disabled: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        """Create from API response dict."""
        return cls(
            id=decode_int(data["id"], "id"),
            username=decode_str(data["username"], "username"),
            email=_optional(data, "email", decode_str, ""),
            disabled=_optional(data, "disabled", decode_bool, False),
        )
