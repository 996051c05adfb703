"""Client configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .._version import __version__
from ..errors import ConfigurationError

DEFAULT_API_BASE_URL = "https://open-api.123pan.com"
DEFAULT_TIMEOUT = 30.0
PLATFORM = "open_platform"


@dataclass
class RateLimitConfig:
    """Token-bucket tuning: ``max_requests`` per ``per_milliseconds`` window."""

    max_requests: int = 100
    per_milliseconds: float = 60_000
    max_retries: int = 3

    def __post_init__(self) -> None:
        if self.max_requests <= 0:
            raise ConfigurationError("rate_limit.max_requests must be positive")
        if self.per_milliseconds <= 0:
            raise ConfigurationError("rate_limit.per_milliseconds must be positive")
        if self.max_retries < 0:
            raise ConfigurationError("rate_limit.max_retries must not be negative")


@dataclass
class ClientConfig:
    """SDK configuration."""

    client_id: str | None = None
    client_secret: str | None = None
    base_url: str = DEFAULT_API_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    debug: bool = False
    debug_token: str | None = None
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def uses_debug_token(self) -> bool:
        return bool(self.debug and self.debug_token)

    def resolve_credentials(self) -> tuple[str, str]:
        client_id = self.client_id or os.getenv("PAN123_CLIENT_ID")
        client_secret = self.client_secret or os.getenv("PAN123_CLIENT_SECRET")
        if not client_id or not client_secret:
            raise ConfigurationError(
                "Missing 123pan credentials. Pass client_id=... and client_secret=... "
                "or set PAN123_CLIENT_ID and PAN123_CLIENT_SECRET."
            )
        return client_id, client_secret

    def default_headers(self) -> dict[str, str]:
        return {
            "platform": PLATFORM,
            "user-agent": f"pan123-python/{__version__}",
            "accept": "application/json",
            **self.headers,
        }

    def build_url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return self.base_url.rstrip("/") + "/" + path.lstrip("/")


__all__ = [
    "ClientConfig",
    "RateLimitConfig",
    "DEFAULT_API_BASE_URL",
    "DEFAULT_TIMEOUT",
    "PLATFORM",
]
