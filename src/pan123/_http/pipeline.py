"""Ordered request pipeline: rate-limit -> auth-inject -> dispatch -> retry/unwrap.

Each request-side concern is a stage object with an
``async handle(request, call_next)`` method; the chain is built once per
call from ``RequestPipeline.stages`` and terminated by the transport. The
response side (401/429 retry, envelope unwrap) runs after the chain and
re-enters the whole chain when it retries, so a retried request is admitted
by the limiter again and carries a freshly resolved token.
"""

from __future__ import annotations

import functools
import inspect
import logging
import math
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Protocol

import anyio
import httpx

from ..errors import ApiError, AuthError, Pan123Error
from .envelope import ApiEnvelope, unwrap_envelope
from .transport import BaseTransport, JSONBody, MultipartBody, RequestBody

if TYPE_CHECKING:
    from ..auth.authenticator import Authenticator
    from ..ratelimit import TokenBucketRateLimiter

SleepFn = Callable[[float], Awaitable[None] | None]
CallNext = Callable[["ApiRequest"], Awaitable[httpx.Response]]


@dataclass(frozen=True, slots=True)
class ApiRequest:
    """One logical API call; retries are derived copies with a flag set."""

    method: str
    path: str
    params: dict[str, Any] | None = None
    body: RequestBody = None
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float | None = None
    auth_retried: bool = False
    throttle_retried: bool = False

    def with_header(self, name: str, value: str) -> ApiRequest:
        return replace(self, headers={**self.headers, name: value})


class Stage(Protocol):
    async def handle(self, request: ApiRequest, call_next: CallNext) -> httpx.Response: ...


class RateLimitStage:
    def __init__(self, limiter: TokenBucketRateLimiter) -> None:
        self.limiter = limiter

    async def handle(self, request: ApiRequest, call_next: CallNext) -> httpx.Response:
        await self.limiter.check_limit()
        return await call_next(request)


class AuthStage:
    def __init__(self, authenticator: Authenticator) -> None:
        self.authenticator = authenticator

    async def handle(self, request: ApiRequest, call_next: CallNext) -> httpx.Response:
        token = await self.authenticator.get_access_token()
        return await call_next(request.with_header("authorization", f"Bearer {token}"))


def parse_retry_after(value: str | None) -> int | None:
    """Whole seconds to wait from a ``Retry-After`` header, rounded up.

    HTTP-date values and anything unparseable yield ``None``.
    """
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    if not math.isfinite(seconds):
        return None
    return max(math.ceil(seconds), 0)


def _bearer_token(response: httpx.Response) -> str | None:
    try:
        header = response.request.headers.get("authorization", "")
    except RuntimeError:
        # Responses built by hand carry no request.
        return None
    prefix = "Bearer "
    return header[len(prefix) :] if header.startswith(prefix) else None


class RequestPipeline:
    def __init__(
        self,
        transport: BaseTransport,
        authenticator: Authenticator,
        rate_limiter: TokenBucketRateLimiter,
        *,
        stages: Sequence[Stage] | None = None,
        sleep_fn: SleepFn = anyio.sleep,
        logger: logging.Logger | None = None,
    ) -> None:
        self._transport = transport
        self._authenticator = authenticator
        self._rate_limiter = rate_limiter
        self._stages: tuple[Stage, ...] = (
            tuple(stages) if stages is not None else (RateLimitStage(rate_limiter), AuthStage(authenticator))
        )
        self._sleep_fn = sleep_fn
        self._logger = logger or logging.getLogger("pan123.http")

    @property
    def stages(self) -> tuple[Stage, ...]:
        return self._stages

    @property
    def authenticator(self) -> Authenticator:
        return self._authenticator

    @property
    def rate_limiter(self) -> TokenBucketRateLimiter:
        return self._rate_limiter

    async def _dispatch(self, request: ApiRequest) -> httpx.Response:
        self._logger.debug("sending %s %s", request.method, request.path)
        try:
            response = await self._transport.send(
                request.method,
                request.path,
                params=request.params,
                body=request.body,
                headers=request.headers,
                timeout=request.timeout,
            )
        except httpx.HTTPError as exc:
            raise ApiError(-1, f"Request failed: {exc}") from exc
        self._logger.debug("received %d for %s %s", response.status_code, request.method, request.path)
        return response

    async def _run(self, request: ApiRequest) -> httpx.Response:
        handler: CallNext = self._dispatch
        for stage in reversed(self._stages):
            handler = functools.partial(stage.handle, call_next=handler)
        return await handler(request)

    async def _sleep(self, seconds: float) -> None:
        result = self._sleep_fn(seconds)
        if inspect.isawaitable(result):
            await result

    async def _retry(self, request: ApiRequest, response: httpx.Response) -> httpx.Response:
        # Each reason retries at most once per request.
        while True:
            if response.status_code == 401 and not request.auth_retried:
                self._logger.warning("received 401 for %s, refreshing token", request.path)
                try:
                    await self._authenticator.force_refresh_token(_bearer_token(response))
                except Pan123Error:
                    self._authenticator.clear_token()
                    raise
                request = replace(request, auth_retried=True)
                self._logger.info("retrying %s with refreshed token", request.path)
                response = await self._run(request)
                if response.status_code == 401:
                    self._authenticator.clear_token()
                    raise AuthError(
                        "Request was rejected as unauthorized after a token refresh",
                        code=401,
                        details=_safe_json(response),
                    )
                continue

            if response.status_code == 429 and not request.throttle_retried:
                retry_after = parse_retry_after(response.headers.get("retry-after"))
                if retry_after is None:
                    return response
                self._logger.warning("rate limited by server, waiting %ds before retry", retry_after)
                await self._sleep(retry_after)
                request = replace(request, throttle_retried=True)
                response = await self._run(request)
                continue

            return response

    async def send(self, request: ApiRequest) -> ApiEnvelope:
        response = await self._run(request)
        response = await self._retry(request, response)
        return unwrap_envelope(response)

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: RequestBody = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> ApiEnvelope:
        return await self.send(
            ApiRequest(
                method=method,
                path=path,
                params=params,
                body=body,
                headers=dict(headers or {}),
                timeout=timeout,
            )
        )

    async def get(self, path: str, params: dict[str, Any] | None = None) -> ApiEnvelope:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, data: Any = None) -> ApiEnvelope:
        return await self.request("POST", path, body=JSONBody(data) if data is not None else None)

    async def delete(self, path: str, params: dict[str, Any] | None = None) -> ApiEnvelope:
        return await self.request("DELETE", path, params=params)

    async def post_form(
        self,
        url: str,
        fields: dict[str, str],
        files: dict[str, tuple[str, bytes, str]] | None = None,
        *,
        timeout: float | None = None,
    ) -> ApiEnvelope:
        return await self.request("POST", url, body=MultipartBody(fields, files or {}), timeout=timeout)


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


__all__ = [
    "ApiRequest",
    "Stage",
    "RateLimitStage",
    "AuthStage",
    "RequestPipeline",
    "parse_retry_after",
]
