"""
SendGrid SDK - Resource-level client.

Each resource is a thin facade over the core APIClient: it knows its base
path, its endpoints and the typed shapes they exchange.
"""

import asyncio
from collections.abc import Iterable

import httpx

from sendgrid_api.core.client import DEFAULT_TIMEOUT, APIClient
from sendgrid_api.core.codecs import BodyShape, DecodeMode
from sendgrid_api.core.errors import SchemaError, ValidationError
from sendgrid_api.core.request import Argument
from sendgrid_api.core.types import AccessEntry, User, WhitelistedIp


class SendGridClient:
    """
    SendGrid v3 API client with typed resources.

    Example:
        async with SendGridClient(api_key="SG.xxx") as client:
            history = await client.access_management.get_access_history()
            ips = await client.access_management.get_whitelisted_ip_addresses()
            users = await client.subusers.get_all(limit=10)

    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: int = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the SendGrid client.

        Args:
            api_key: SendGrid API key (or SENDGRID_API_KEY env var)
            base_url: API base URL (or SENDGRID_BASE_URL env var)
            timeout: Request timeout in seconds
            http_client: Preconfigured httpx client, e.g. with a mock transport

        """
        self._client = APIClient(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            http_client=http_client,
        )

        self.access_management = AccessManagement(self._client)
        self.subusers = SubUsers(self._client)

    async def __aenter__(self) -> "SendGridClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the connection pool."""
        await self._client.aclose()


# =============================================================================
# Access Management
# =============================================================================


class AccessManagement:
    """
    Access history and IP whitelisting.

    See https://sendgrid.com/docs/API_Reference/Web_API_v3/ip_access_management.html
    """

    ENDPOINT = "access_settings"

    def __init__(self, client: APIClient):
        self._client = client

    async def get_access_history(
        self,
        limit: int = 20,
        cancellation: asyncio.Event | None = None,
    ) -> list[AccessEntry]:
        """
        Get recent access attempts, allowed or not.

        Args:
            limit: Maximum number of entries
            cancellation: Event that aborts the call when set

        Returns:
            List of AccessEntry, most recent first

        """
        request = self._client.builder(self.ENDPOINT).build(
            "GET",
            "activity",
            args=[Argument("limit", limit, 20)],
            cancellation=cancellation,
        )
        return await self._client.dispatch(request, DecodeMode.LIST, AccessEntry.from_dict)

    async def get_whitelisted_ip_addresses(
        self,
        cancellation: asyncio.Event | None = None,
    ) -> list[WhitelistedIp]:
        """Get all whitelisted IP addresses."""
        request = self._client.builder(self.ENDPOINT).build("GET", "whitelist", cancellation=cancellation)
        return await self._client.dispatch(request, DecodeMode.LIST, WhitelistedIp.from_dict)

    async def add_ip_address_to_whitelist(
        self,
        ip: str,
        cancellation: asyncio.Event | None = None,
    ) -> WhitelistedIp:
        """
        Whitelist a single IP address or CIDR range.

        Args:
            ip: Address such as ``192.168.1.1`` or ``192.168.1.0/24``
            cancellation: Event that aborts the call when set

        Returns:
            The created WhitelistedIp

        """
        created = await self.add_ip_addresses_to_whitelist([ip], cancellation)
        if not created:
            raise SchemaError("Whitelist response contained no entries", field="result")
        return created[0]

    async def add_ip_addresses_to_whitelist(
        self,
        ips: Iterable[str],
        cancellation: asyncio.Event | None = None,
    ) -> list[WhitelistedIp]:
        """
        Whitelist several IP addresses in one call.

        Args:
            ips: Addresses or CIDR ranges
            cancellation: Event that aborts the call when set

        Returns:
            The created entries, in request order

        """
        if isinstance(ips, str):
            raise ValidationError("Expected a collection of IP addresses, got a single string", {"ips": ips})
        request = self._client.builder(self.ENDPOINT).build(
            "POST",
            "whitelist",
            body=[{"ip": ip} for ip in ips],
            shape=BodyShape.ARRAY,
            cancellation=cancellation,
        )
        return await self._client.dispatch(request, DecodeMode.LIST, WhitelistedIp.from_dict)

    async def remove_ip_address_from_whitelist(
        self,
        id: int,
        cancellation: asyncio.Event | None = None,
    ) -> None:
        """Remove one whitelisted IP address by its ID."""
        request = self._client.builder(self.ENDPOINT).build("DELETE", "whitelist", id, cancellation=cancellation)
        await self._client.dispatch(request, DecodeMode.NONE)

    async def remove_ip_addresses_from_whitelist(
        self,
        ids: Iterable[int],
        cancellation: asyncio.Event | None = None,
    ) -> None:
        """Remove several whitelisted IP addresses by their IDs."""
        if isinstance(ids, (str, bytes)):
            raise ValidationError("Expected a collection of IDs, got a string", {"ids": ids})
        request = self._client.builder(self.ENDPOINT).build(
            "DELETE",
            "whitelist",
            body=[int(i) for i in ids],
            shape=BodyShape.ID_LIST,
            cancellation=cancellation,
        )
        await self._client.dispatch(request, DecodeMode.NONE)

    async def get_whitelisted_ip_address(
        self,
        id: int,
        cancellation: asyncio.Event | None = None,
    ) -> WhitelistedIp:
        """Get one whitelisted IP address by its ID."""
        request = self._client.builder(self.ENDPOINT).build("GET", "whitelist", id, cancellation=cancellation)
        return await self._client.dispatch(request, DecodeMode.SINGLE, WhitelistedIp.from_dict)


# =============================================================================
# Sub-users
# =============================================================================


class SubUsers:
    """
    Sub-user management.

    See https://sendgrid.com/docs/API_Reference/Web_API_v3/subusers.html
    """

    ENDPOINT = "subusers"

    def __init__(self, client: APIClient):
        self._client = client

    async def get_all(
        self,
        limit: int = 25,
        offset: int = 0,
        cancellation: asyncio.Event | None = None,
    ) -> list[User]:
        """
        List sub-users.

        Args:
            limit: Maximum number of results
            offset: Pagination offset
            cancellation: Event that aborts the call when set

        Returns:
            List of User

        """
        request = self._client.builder(self.ENDPOINT).build(
            "GET",
            args=[Argument("limit", limit, 25), Argument("offset", offset, 0)],
            cancellation=cancellation,
        )
        return await self._client.dispatch(request, DecodeMode.ARRAY, User.from_dict)
