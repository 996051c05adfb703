"""Fixtures for integration tests using respx mocking."""

from collections.abc import AsyncGenerator, Callable, Generator
from typing import Any

import httpx
import pytest
import pytest_asyncio
import respx

from pan123 import Pan123Client

API_BASE = "https://open-api.123pan.com"
UPLOAD_SERVER = "https://upload.example-123pan.test"
TOKEN_URL = f"{API_BASE}/api/v1/access_token"


def ok(data: Any = None) -> dict[str, Any]:
    return {"code": 0, "message": "ok", "data": data, "x-traceID": "trace-ok"}


def token_grant(token: str = "token-1", expires_in: int = 7200) -> dict[str, Any]:
    return ok({"accessToken": token, "expiresIn": expires_in, "tokenType": "Bearer"})


@pytest.fixture
def envelope() -> Callable[..., dict[str, Any]]:
    """Build a successful ``{code, message, data}`` envelope."""
    return ok


@pytest.fixture
def api_mock() -> Generator[respx.MockRouter, None, None]:
    """Mock the vendor API; the token endpoint is pre-registered as ``token``."""
    with respx.mock(assert_all_called=False) as mock:
        mock.post(TOKEN_URL, name="token").mock(return_value=httpx.Response(200, json=token_grant()))
        yield mock


@pytest_asyncio.fixture
async def client(
    mock_env_clear, client_id, client_secret, sleep_recorder
) -> AsyncGenerator[Pan123Client, None]:
    async with Pan123Client(
        client_id=client_id,
        client_secret=client_secret,
        sleep_fn=sleep_recorder,
    ) as pan:
        yield pan
