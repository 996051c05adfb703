"""Tests for client configuration."""

import pytest

from pan123 import ClientConfig, ConfigurationError, RateLimitConfig
from pan123._http.config import DEFAULT_API_BASE_URL, PLATFORM


class TestRateLimitConfig:
    def test_defaults(self):
        config = RateLimitConfig()
        assert (config.max_requests, config.per_milliseconds, config.max_retries) == (
            100,
            60_000,
            3,
        )

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_requests": 0},
            {"per_milliseconds": 0},
            {"per_milliseconds": -1},
            {"max_retries": -1},
        ],
    )
    def test_invalid_tuning_is_rejected(self, kwargs):
        with pytest.raises(ConfigurationError):
            RateLimitConfig(**kwargs)


class TestClientConfig:
    def test_explicit_credentials_win_over_environment(self, monkeypatch):
        monkeypatch.setenv("PAN123_CLIENT_ID", "env-id")
        monkeypatch.setenv("PAN123_CLIENT_SECRET", "env-secret")
        config = ClientConfig(client_id="arg-id", client_secret="arg-secret")
        assert config.resolve_credentials() == ("arg-id", "arg-secret")

    def test_missing_credentials(self, mock_env_clear):
        with pytest.raises(ConfigurationError):
            ClientConfig(client_id="only-id").resolve_credentials()

    def test_default_headers(self):
        headers = ClientConfig(headers={"x-extra": "1"}).default_headers()
        assert headers["platform"] == PLATFORM
        assert headers["user-agent"].startswith("pan123-python/")
        assert headers["x-extra"] == "1"
        assert "authorization" not in headers

    def test_build_url(self):
        config = ClientConfig(base_url="https://api.example.test/")
        assert config.build_url("/api/v1/user/info") == "https://api.example.test/api/v1/user/info"
        assert config.build_url("api/v1/user/info") == "https://api.example.test/api/v1/user/info"

    def test_absolute_urls_pass_through(self):
        config = ClientConfig()
        url = "https://upload.example.test/upload/v2/file/slice"
        assert config.build_url(url) == url
        assert config.base_url == DEFAULT_API_BASE_URL

    def test_debug_token_requires_debug(self):
        assert not ClientConfig(debug_token="t").uses_debug_token
        assert ClientConfig(debug=True, debug_token="t").uses_debug_token
