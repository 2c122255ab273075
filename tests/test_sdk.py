"""Tests for the resource facades against a mocked API."""

import asyncio
import json
from datetime import datetime, timezone

import httpx
import pytest

from sendgrid_api import (
    CancelledError,
    FormatError,
    NotFoundError,
    SchemaError,
    SendGridClient,
    ValidationError,
)
from sendgrid_api.core.types import AccessEntry, User, WhitelistedIp

SINGLE_ACCESS_ENTRY = {
    "allowed": False,
    "auth_method": "basic",
    "first_at": 1444087966,
    "ip": "1.1.1.1",
    "last_at": 1444406672,
    "location": "Australia",
}
MULTIPLE_ACCESS_ENTRIES = {
    "result": [
        SINGLE_ACCESS_ENTRY,
        {
            "allowed": False,
            "auth_method": "basic",
            "first_at": 1444087505,
            "ip": "1.2.3.48",
            "last_at": 1444087505,
            "location": "Mukilteo, Washington",
        },
    ]
}

SINGLE_WHITELISTED_IP = {
    "id": 1,
    "ip": "192.168.1.1/32",
    "created_at": 1441824715,
    "updated_at": 1441824715,
}
MULTIPLE_WHITELISTED_IPS = {
    "result": [
        SINGLE_WHITELISTED_IP,
        {"id": 2, "ip": "192.168.1.2/32", "created_at": 1441824715, "updated_at": 1441824715},
        {"id": 3, "ip": "192.168.1.3/32", "created_at": 1441824715, "updated_at": 1441824715},
    ]
}

SUBUSERS = [
    {"id": 1234, "username": "example_subuser", "email": "example@example.com", "disabled": False},
    {"id": 1235, "username": "example_subuser2", "email": "example2@example.com", "disabled": True},
]


# =============================================================================
# Entity parsing
# =============================================================================


def test_parse_access_entry() -> None:
    entry = AccessEntry.from_dict(SINGLE_ACCESS_ENTRY)

    assert entry.allowed is False
    assert entry.auth_method == "basic"
    assert entry.first_at == datetime(2015, 10, 5, 23, 32, 46, tzinfo=timezone.utc)
    assert entry.ip == "1.1.1.1"
    assert entry.last_at == datetime(2015, 10, 9, 16, 4, 32, tzinfo=timezone.utc)
    assert entry.location == "Australia"
    assert entry.to_dict() == SINGLE_ACCESS_ENTRY


def test_parse_whitelisted_ip() -> None:
    ip = WhitelistedIp.from_dict(SINGLE_WHITELISTED_IP)

    assert ip.id == 1
    assert ip.ip == "192.168.1.1/32"
    assert ip.created_at == datetime(2015, 9, 9, 18, 51, 55, tzinfo=timezone.utc)
    assert ip.updated_at == datetime(2015, 9, 9, 18, 51, 55, tzinfo=timezone.utc)


def test_parse_user() -> None:
    user = User.from_dict(SUBUSERS[1])
    assert user == User(id=1235, username="example_subuser2", email="example2@example.com", disabled=True)


def test_parse_access_entry_rejects_string_boolean() -> None:
    with pytest.raises(FormatError) as exc_info:
        AccessEntry.from_dict({**SINGLE_ACCESS_ENTRY, "allowed": "false"})
    assert exc_info.value.field == "allowed"


def test_parse_access_entry_rejects_numeric_ip() -> None:
    with pytest.raises(FormatError) as exc_info:
        AccessEntry.from_dict({**SINGLE_ACCESS_ENTRY, "ip": 123})
    assert exc_info.value.field == "ip"


def test_parse_whitelisted_ip_rejects_string_id() -> None:
    with pytest.raises(FormatError) as exc_info:
        WhitelistedIp.from_dict({**SINGLE_WHITELISTED_IP, "id": "1"})
    assert exc_info.value.field == "id"


def test_parse_user_null_optionals() -> None:
    user = User.from_dict({"id": 7, "username": "u", "email": None, "disabled": None})
    assert user == User(id=7, username="u", email="", disabled=False)


# =============================================================================
# Access management
# =============================================================================


class TestAccessManagement:
    @pytest.mark.asyncio
    async def test_get_access_history(self, mock_api, client: SendGridClient) -> None:
        mock_api.respond(200, json=MULTIPLE_ACCESS_ENTRIES)

        result = await client.access_management.get_access_history()

        assert len(mock_api.requests) == 1
        assert mock_api.last.method == "GET"
        assert mock_api.last.url.path == "/v3/access_settings/activity"
        assert "limit" not in mock_api.last.url.params
        assert [e.location for e in result] == ["Australia", "Mukilteo, Washington"]

    @pytest.mark.asyncio
    async def test_get_access_history_with_limit(self, mock_api, client: SendGridClient) -> None:
        mock_api.respond(200, json=MULTIPLE_ACCESS_ENTRIES)
        await client.access_management.get_access_history(limit=5)
        assert mock_api.last.url.params["limit"] == "5"

    @pytest.mark.asyncio
    async def test_get_whitelisted_ip_addresses(self, mock_api, client: SendGridClient) -> None:
        mock_api.respond(200, json=MULTIPLE_WHITELISTED_IPS)

        result = await client.access_management.get_whitelisted_ip_addresses()

        assert mock_api.last.method == "GET"
        assert mock_api.last.url.path == "/v3/access_settings/whitelist"
        assert [ip.id for ip in result] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_add_ip_address_to_whitelist(self, mock_api, client: SendGridClient) -> None:
        mock_api.respond(201, json={"result": [SINGLE_WHITELISTED_IP]})

        result = await client.access_management.add_ip_address_to_whitelist("192.168.1.1")

        assert mock_api.last.method == "POST"
        assert mock_api.last.url.path == "/v3/access_settings/whitelist"
        assert json.loads(mock_api.last.content) == [{"ip": "192.168.1.1"}]
        assert isinstance(result, WhitelistedIp)
        assert result.id == 1

    @pytest.mark.asyncio
    async def test_add_ip_address_with_empty_result(self, mock_api, client: SendGridClient) -> None:
        mock_api.respond(201, json={"result": []})
        with pytest.raises(SchemaError):
            await client.access_management.add_ip_address_to_whitelist("192.168.1.1")

    @pytest.mark.asyncio
    async def test_add_ip_addresses_to_whitelist(self, mock_api, client: SendGridClient) -> None:
        mock_api.respond(201, json=MULTIPLE_WHITELISTED_IPS)
        ips = ["1.1.1.1", "1.2.3.4", "5.6.7.8"]

        result = await client.access_management.add_ip_addresses_to_whitelist(ips)

        assert len(mock_api.requests) == 1
        body = json.loads(mock_api.last.content)
        assert body == [{"ip": "1.1.1.1"}, {"ip": "1.2.3.4"}, {"ip": "5.6.7.8"}]
        assert len(result) == 3

    @pytest.mark.asyncio
    async def test_add_ip_addresses_rejects_single_string(self, mock_api, client: SendGridClient) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await client.access_management.add_ip_addresses_to_whitelist("1.1.1.1")
        assert exc_info.value.details == {"ips": "1.1.1.1"}
        assert mock_api.requests == []

    @pytest.mark.asyncio
    async def test_remove_ip_addresses_rejects_single_string(self, mock_api, client: SendGridClient) -> None:
        with pytest.raises(ValidationError):
            await client.access_management.remove_ip_addresses_from_whitelist("123")
        assert mock_api.requests == []

    @pytest.mark.asyncio
    async def test_remove_ip_address_from_whitelist(self, mock_api, client: SendGridClient) -> None:
        mock_api.respond(204)

        result = await client.access_management.remove_ip_address_from_whitelist(1111)

        assert result is None
        assert mock_api.last.method == "DELETE"
        assert mock_api.last.url.path == "/v3/access_settings/whitelist/1111"
        assert mock_api.last.content == b""

    @pytest.mark.asyncio
    async def test_remove_ip_addresses_from_whitelist(self, mock_api, client: SendGridClient) -> None:
        mock_api.respond(200)

        await client.access_management.remove_ip_addresses_from_whitelist([1111, 2222, 3333])

        assert mock_api.last.method == "DELETE"
        assert mock_api.last.url.path == "/v3/access_settings/whitelist"
        assert json.loads(mock_api.last.content) == {"ids": [1111, 2222, 3333]}

    @pytest.mark.asyncio
    async def test_get_whitelisted_ip_address(self, mock_api, client: SendGridClient) -> None:
        mock_api.respond(200, json=SINGLE_WHITELISTED_IP)

        result = await client.access_management.get_whitelisted_ip_address(1111)

        assert mock_api.last.url.path == "/v3/access_settings/whitelist/1111"
        assert isinstance(result, WhitelistedIp)
        assert result.ip == "192.168.1.1/32"

    @pytest.mark.asyncio
    async def test_get_missing_whitelisted_ip_address(self, mock_api, client: SendGridClient) -> None:
        mock_api.respond(404, json={"errors": [{"field": None, "message": "Resource not found"}]})
        with pytest.raises(NotFoundError) as exc_info:
            await client.access_management.get_whitelisted_ip_address(9)
        assert exc_info.value.messages == ["Resource not found"]

    @pytest.mark.asyncio
    async def test_cancelled_call(self, mock_api, client: SendGridClient) -> None:
        cancellation = asyncio.Event()
        cancellation.set()
        with pytest.raises(CancelledError):
            await client.access_management.get_whitelisted_ip_addresses(cancellation=cancellation)
        assert mock_api.requests == []


# =============================================================================
# Sub-users
# =============================================================================


class TestSubUsers:
    @pytest.mark.asyncio
    async def test_get_all_with_defaults(self, mock_api, client: SendGridClient) -> None:
        mock_api.respond(200, json=SUBUSERS)

        result = await client.subusers.get_all()

        assert mock_api.last.method == "GET"
        assert mock_api.last.url.path == "/v3/subusers"
        assert mock_api.last.url.query == b""
        assert [u.username for u in result] == ["example_subuser", "example_subuser2"]

    @pytest.mark.asyncio
    async def test_get_all_with_paging(self, mock_api, client: SendGridClient) -> None:
        mock_api.respond(200, json=SUBUSERS)

        await client.subusers.get_all(limit=10, offset=30)

        assert mock_api.last.url.params["limit"] == "10"
        assert mock_api.last.url.params["offset"] == "30"


# =============================================================================
# Client lifecycle
# =============================================================================


@pytest.mark.asyncio
async def test_client_context_manager(mock_api) -> None:
    mock_api.respond(200, json=SUBUSERS)
    async with SendGridClient(api_key="SG.test-key", http_client=mock_api.http_client()) as client:
        users = await client.subusers.get_all()
    assert len(users) == 2


@pytest.mark.asyncio
async def test_regional_base_url_with_injected_http_client(mock_api) -> None:
    mock_api.respond(200, json=MULTIPLE_ACCESS_ENTRIES)
    http = httpx.AsyncClient(transport=httpx.MockTransport(mock_api._handle))
    eu_url = "https://eu.api.sendgrid.com/v3"
    async with SendGridClient(api_key="SG.test-key", base_url=eu_url, http_client=http) as client:
        await client.access_management.get_access_history()
    assert mock_api.last.url.host == "eu.api.sendgrid.com"
    assert mock_api.last.url.path == "/v3/access_settings/activity"
