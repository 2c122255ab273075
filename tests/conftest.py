"""Pytest configuration - loads .env and provides a mocked SendGrid API."""

import inspect
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest
from dotenv import load_dotenv

from sendgrid_api.sdk import SendGridClient

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

BASE_URL = "https://api.sendgrid.com/v3"
API_KEY = "SG.test-key"


class MockAPI:
    """Records every request and answers with a configurable handler."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._handler: Callable[[httpx.Request], Any] = lambda request: httpx.Response(200)

    def respond(self, status_code: int = 200, **kwargs: Any) -> None:
        self._handler = lambda request: httpx.Response(status_code, **kwargs)

    def respond_with(self, handler: Callable[[httpx.Request], Any]) -> None:
        self._handler = handler

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        result = self._handler(request)
        if inspect.isawaitable(result):
            result = await result
        return result

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(self._handle))

    def client(self) -> SendGridClient:
        return SendGridClient(api_key=API_KEY, http_client=self.http_client())

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def mock_api() -> MockAPI:
    return MockAPI()


@pytest.fixture
def client(mock_api: MockAPI) -> SendGridClient:
    return mock_api.client()
