"""Access-token lifecycle: cache, margin-adjusted expiry, single-flight refresh."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

import anyio
import httpx

from .._http.config import ClientConfig
from .._http.envelope import parse_envelope
from .._http.transport import BaseTransport, JSONBody
from ..errors import AuthError, ConfigurationError
from .token_util import TokenInfo, token_info_from_grant, token_info_from_override

ACCESS_TOKEN_PATH = "/api/v1/access_token"


class _PendingRefresh:
    """The one refresh currently on the wire; later callers wait on ``done``."""

    __slots__ = ("done", "token_info", "error")

    def __init__(self) -> None:
        self.done = anyio.Event()
        self.token_info: TokenInfo | None = None
        self.error: Exception | None = None


class Authenticator:
    """Owns the access token for one client instance.

    Concurrent callers that find no valid token share a single refresh
    request: the first one issues it, everyone else awaits its outcome.
    A failed refresh leaves no token behind.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: BaseTransport,
        *,
        clock: Callable[[], float] = time.time,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._clock = clock
        self._logger = logger or logging.getLogger("pan123.auth")
        self._token_info: TokenInfo | None = None
        self._pending: _PendingRefresh | None = None
        self._override = config.uses_debug_token

        if config.debug_token and not config.debug:
            self._logger.warning("debug_token is ignored unless debug=True")
        if self._override:
            assert config.debug_token is not None
            self._token_info = token_info_from_override(config.debug_token, self._clock())
            self._logger.info("using debug token instead of API authentication")

    @property
    def token_info(self) -> TokenInfo | None:
        return self._token_info

    @property
    def uses_override(self) -> bool:
        return self._override

    @property
    def refresh_in_flight(self) -> bool:
        return self._pending is not None

    async def get_access_token(self) -> str:
        info = self._token_info
        if info is not None and info.is_valid(self._clock()):
            self._logger.debug("using cached access token")
            return info.access_token

        if self._override:
            if info is None:
                raise AuthError("Debug token was cleared and cannot be refreshed")
            self._logger.warning("debug token has expired, update debug_token in the client config")
            raise AuthError("Debug token has expired")

        pending = self._pending
        if pending is not None:
            self._logger.debug("token refresh in progress, waiting for completion")
            return await self._join(pending)

        return await self._start_refresh()

    async def force_refresh_token(self, stale_token: str | None = None) -> str:
        """Fetch a new token even if the cached one looks valid.

        A refresh already on the wire is joined rather than duplicated. When
        ``stale_token`` names the token a rejected request carried and the
        cache already holds a different valid one, that token is returned
        without another refresh.
        """
        if self._override:
            raise AuthError("A debug token cannot be refreshed, update debug_token in the client config")

        pending = self._pending
        if pending is not None:
            self._logger.debug("joining token refresh already in progress")
            return await self._join(pending)

        info = self._token_info
        if (
            stale_token is not None
            and info is not None
            and info.access_token != stale_token
            and info.is_valid(self._clock())
        ):
            self._logger.debug("token was already refreshed by a concurrent request")
            return info.access_token

        self._token_info = None
        return await self._start_refresh()

    def clear_token(self) -> None:
        self._logger.info("clearing stored access token")
        self._token_info = None
        self._pending = None

    async def _join(self, pending: _PendingRefresh) -> str:
        await pending.done.wait()
        if pending.error is not None:
            raise pending.error
        assert pending.token_info is not None
        return pending.token_info.access_token

    async def _start_refresh(self) -> str:
        pending = _PendingRefresh()
        self._pending = pending
        self._logger.info("refreshing access token")
        try:
            info = await self._request_token()
        except Exception as exc:
            pending.error = exc
            # A refresh superseded by clear_token() leaves the cache alone.
            if self._pending is pending:
                self._token_info = None
            self._logger.error("access token refresh failed: %s", exc)
            raise
        except BaseException:
            pending.error = AuthError("Token refresh was cancelled")
            raise
        else:
            pending.token_info = info
            if self._pending is pending:
                self._token_info = info
                self._logger.debug(
                    "access token stored (type=%s, expires_at=%.0f)", info.token_type, info.expires_at
                )
            self._logger.info("access token refreshed")
            return info.access_token
        finally:
            if self._pending is pending:
                self._pending = None
            pending.done.set()

    async def _request_token(self) -> TokenInfo:
        try:
            client_id, client_secret = self._config.resolve_credentials()
        except ConfigurationError as exc:
            raise AuthError(str(exc)) from exc

        try:
            response = await self._transport.send(
                "POST",
                ACCESS_TOKEN_PATH,
                body=JSONBody({"clientID": client_id, "clientSecret": client_secret}),
            )
        except httpx.HTTPError as exc:
            raise AuthError(f"Token request failed: {exc}", code=-1) from exc

        return self._parse_grant(response)

    def _parse_grant(self, response: httpx.Response) -> TokenInfo:
        try:
            payload: Any = response.json()
        except ValueError:
            payload = None

        envelope = parse_envelope(payload)
        if envelope is None:
            if not (200 <= response.status_code < 300):
                raise AuthError(
                    f"Token request failed: HTTP {response.status_code} {response.reason_phrase}",
                    code=response.status_code,
                    details=payload,
                )
            raise AuthError(
                "Invalid token response: missing code field (expected wrapped format)",
                details=payload,
            )

        if envelope.code != 0:
            message = envelope.message or "Unknown API error"
            raise AuthError(
                f"Token API error (code: {envelope.code}): {message} "
                f"[TraceID: {envelope.trace_id or 'unknown'}]",
                code=envelope.code,
                details=envelope.data,
            )

        data = envelope.data
        if not isinstance(data, dict) or not data.get("accessToken"):
            raise AuthError(
                "Invalid token response: missing accessToken in data field",
                details=data,
            )

        return token_info_from_grant(data, self._clock())


__all__ = ["Authenticator", "ACCESS_TOKEN_PATH"]
