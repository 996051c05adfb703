"""123pan open API client with namespaced sub-clients."""

from __future__ import annotations

import logging
from typing import Any

import anyio

from ._http.config import DEFAULT_API_BASE_URL, DEFAULT_TIMEOUT, ClientConfig, RateLimitConfig
from ._http.pipeline import RequestPipeline, SleepFn
from ._http.transport import AsyncTransport, BaseTransport
from .auth import Authenticator, TokenInfo
from .files import FilesClient
from .offline import OfflineClient
from .ratelimit import RateLimiterStatus, TokenBucketRateLimiter
from .share import ShareClient
from .upload import UploadClient
from .user import UserClient


class Pan123Client:
    """Asynchronous 123pan client.

    One instance owns a transport, an authenticator, a rate limiter and the
    request pipeline tying them together; every sub-client shares them.
    No network traffic happens until the first API call.

    Example::

        async with Pan123Client(client_id="...", client_secret="...") as client:
            result = await client.upload.upload_file("notes.txt", b"hello")
            print(result.file_id)
    """

    def __init__(
        self,
        *,
        client_id: str | None = None,
        client_secret: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        rate_limit: RateLimitConfig | None = None,
        debug: bool = False,
        debug_token: str | None = None,
        headers: dict[str, str] | None = None,
        logger: logging.Logger | None = None,
        transport: BaseTransport | None = None,
        sleep_fn: SleepFn = anyio.sleep,
    ):
        self._config = ClientConfig(
            client_id=client_id,
            client_secret=client_secret,
            base_url=base_url or DEFAULT_API_BASE_URL,
            timeout=DEFAULT_TIMEOUT if timeout is None else timeout,
            rate_limit=rate_limit or RateLimitConfig(),
            debug=debug,
            debug_token=debug_token,
            headers=dict(headers or {}),
        )
        self._logger = logger or logging.getLogger("pan123")

        self._transport = transport or AsyncTransport(self._config)
        self._auth = Authenticator(self._config, self._transport, logger=self._logger.getChild("auth"))
        self._rate_limiter = TokenBucketRateLimiter(
            self._config.rate_limit,
            sleep_fn=sleep_fn,
            logger=self._logger.getChild("ratelimit"),
        )
        self._pipeline = RequestPipeline(
            self._transport,
            self._auth,
            self._rate_limiter,
            sleep_fn=sleep_fn,
            logger=self._logger.getChild("http"),
        )

        self.files = FilesClient(self._pipeline, logger=self._logger.getChild("files"))
        self.upload = UploadClient(self._pipeline, sleep_fn=sleep_fn, logger=self._logger.getChild("upload"))
        self.share = ShareClient(self._pipeline)
        self.user = UserClient(self._pipeline)
        self.offline = OfflineClient(self._pipeline, logger=self._logger.getChild("offline"))

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def pipeline(self) -> RequestPipeline:
        return self._pipeline

    def get_token_info(self) -> TokenInfo | None:
        return self._auth.token_info

    async def refresh_token(self) -> str:
        return await self._auth.force_refresh_token()

    def clear_auth(self) -> None:
        self._auth.clear_token()

    def rate_limiter_status(self) -> RateLimiterStatus:
        return self._rate_limiter.status()

    def reset_rate_limit(self) -> None:
        self._rate_limiter.reset()

    async def aclose(self) -> None:
        await self._transport.close()

    async def __aenter__(self) -> Pan123Client:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()


__all__ = ["Pan123Client"]
