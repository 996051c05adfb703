"""Integration tests for the Pan123Client facade."""

from __future__ import annotations

import logging

import httpx
import pytest

from pan123 import (
    AuthError,
    ClientConfig,
    ConfigurationError,
    Pan123Client,
    RateLimitConfig,
    RateLimiterStatus,
)
from pan123._http.transport import AsyncTransport

API_BASE = "https://open-api.123pan.com"
TOKEN_URL = f"{API_BASE}/api/v1/access_token"
USER_INFO_URL = f"{API_BASE}/api/v1/user/info"


def _user() -> httpx.Response:
    return httpx.Response(200, json={"code": 0, "message": "ok", "data": {"uid": 1}})


def _token(token: str) -> httpx.Response:
    return httpx.Response(
        200, json={"code": 0, "message": "ok", "data": {"accessToken": token, "expiresIn": 7200}}
    )


class TestConstruction:
    def test_no_network_on_construction(self, api_mock, mock_env_clear):
        client = Pan123Client(client_id="id", client_secret="secret")

        assert client.get_token_info() is None
        assert api_mock["token"].call_count == 0
        assert client.pipeline.rate_limiter is not None

    def test_config_is_exposed(self, mock_env_clear):
        client = Pan123Client(
            client_id="id",
            client_secret="secret",
            base_url="https://proxy.example.test/",
            timeout=5,
            rate_limit=RateLimitConfig(max_requests=10, per_milliseconds=1000),
            headers={"x-extra": "1"},
        )

        assert client.config.client_id == "id"
        assert client.config.timeout == 5
        assert client.config.rate_limit.max_requests == 10
        assert client.config.build_url("/api/v1/user/info") == "https://proxy.example.test/api/v1/user/info"
        assert client.config.default_headers()["x-extra"] == "1"

    def test_explicit_zero_timeout_is_kept(self, mock_env_clear):
        assert Pan123Client(client_id="id", client_secret="secret", timeout=0).config.timeout == 0
        assert Pan123Client(client_id="id", client_secret="secret").config.timeout == 30.0

    @pytest.mark.asyncio
    async def test_missing_credentials_surface_on_first_call(self, api_mock, mock_env_clear):
        async with Pan123Client() as client:
            with pytest.raises(AuthError, match="Missing 123pan credentials") as exc_info:
                await client.user.get_user_info()

        assert isinstance(exc_info.value.__cause__, ConfigurationError)

        assert api_mock["token"].call_count == 0

    @pytest.mark.asyncio
    async def test_credentials_from_environment(self, api_mock, monkeypatch):
        monkeypatch.setenv("PAN123_CLIENT_ID", "env-id")
        monkeypatch.setenv("PAN123_CLIENT_SECRET", "env-secret")
        api_mock.get(USER_INFO_URL).mock(return_value=_user())

        async with Pan123Client() as client:
            await client.user.get_user_info()

        assert "env-id" in api_mock["token"].calls.last.request.content.decode()

    @pytest.mark.asyncio
    async def test_custom_transport_is_used(self, api_mock, mock_env_clear):
        api_mock.get(USER_INFO_URL).mock(return_value=_user())
        http_client = httpx.AsyncClient()
        transport = AsyncTransport(ClientConfig(), client=http_client)

        async with Pan123Client(client_id="id", client_secret="secret", transport=transport) as pan:
            await pan.user.get_user_info()

        assert http_client.is_closed


class TestTokenManagement:
    @pytest.mark.asyncio
    async def test_get_token_info_after_first_call(self, api_mock, client):
        api_mock.get(USER_INFO_URL).mock(return_value=_user())

        await client.user.get_user_info()

        info = client.get_token_info()
        assert info is not None
        assert info.access_token == "token-1"

    @pytest.mark.asyncio
    async def test_refresh_token_replaces_cached_token(self, api_mock, client):
        api_mock["token"].mock(side_effect=[_token("first"), _token("second")])

        assert await client.refresh_token() == "first"
        assert await client.refresh_token() == "second"
        assert client.get_token_info().access_token == "second"

    @pytest.mark.asyncio
    async def test_clear_auth_forces_new_token(self, api_mock, client):
        api_mock["token"].mock(side_effect=[_token("first"), _token("second")])
        route = api_mock.get(USER_INFO_URL).mock(return_value=_user())

        await client.user.get_user_info()
        client.clear_auth()
        assert client.get_token_info() is None
        await client.user.get_user_info()

        assert api_mock["token"].call_count == 2
        assert route.calls.last.request.headers["authorization"] == "Bearer second"

    @pytest.mark.asyncio
    async def test_refresh_with_debug_token_is_refused(self, mock_env_clear):
        async with Pan123Client(debug=True, debug_token="debug-abc") as client:
            with pytest.raises(AuthError):
                await client.refresh_token()


class TestRateLimitFacade:
    @pytest.mark.asyncio
    async def test_status_and_reset(self, api_mock, mock_env_clear):
        api_mock.get(USER_INFO_URL).mock(return_value=_user())
        async with Pan123Client(
            client_id="id",
            client_secret="secret",
            rate_limit=RateLimitConfig(max_requests=5, per_milliseconds=10**9, max_retries=1),
        ) as client:
            before = client.rate_limiter_status()
            assert isinstance(before, RateLimiterStatus)
            assert before.available_tokens == 5
            assert before.capacity == 5
            assert before.max_retries == 1

            await client.user.get_user_info()
            await client.user.get_user_info()
            assert client.rate_limiter_status().available_tokens == 3

            client.reset_rate_limit()
            assert client.rate_limiter_status().available_tokens == 5


class TestLogging:
    @pytest.mark.asyncio
    async def test_child_loggers_hang_off_supplied_logger(self, api_mock, mock_env_clear, caplog):
        api_mock.get(USER_INFO_URL).mock(return_value=_user())
        logger = logging.getLogger("tests.pan123")

        with caplog.at_level(logging.DEBUG, logger="tests.pan123"):
            async with Pan123Client(client_id="id", client_secret="secret", logger=logger) as client:
                await client.user.get_user_info()

        names = {record.name for record in caplog.records if record.name.startswith("tests.pan123")}
        assert {"tests.pan123.auth", "tests.pan123.http"} <= names
