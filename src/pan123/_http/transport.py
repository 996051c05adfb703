"""Transport layer for HTTP operations."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Any

import httpx

from .config import ClientConfig


@dataclass(frozen=True, slots=True)
class JSONBody:
    """JSON request body - httpx sets Content-Type to application/json."""

    data: Any


@dataclass(frozen=True, slots=True)
class MultipartBody:
    """multipart/form-data body: plain text ``fields`` plus binary ``files``.

    Each file entry maps a form name to ``(filename, content, content_type)``.
    """

    fields: dict[str, str]
    files: dict[str, tuple[str, bytes, str]] = field(default_factory=dict)


RequestBody = JSONBody | MultipartBody | None


class BaseTransport(abc.ABC):
    """Abstract transport with async interface."""

    def __init__(self, config: ClientConfig):
        self.config = config

    @abc.abstractmethod
    async def send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: RequestBody = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response: ...

    @abc.abstractmethod
    async def close(self) -> None: ...


class AsyncTransport(BaseTransport):
    """Async I/O transport using httpx.AsyncClient.

    Only the fixed platform headers are added here; the bearer token is the
    pipeline's business.
    """

    def __init__(self, config: ClientConfig, *, client: httpx.AsyncClient | None = None):
        super().__init__(config)
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout),
            )
        return self._client

    async def send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: RequestBody = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        url = self.config.build_url(path)
        request_headers = self.config.default_headers()
        if headers:
            request_headers.update(headers)

        kwargs: dict[str, Any] = {}
        if isinstance(body, JSONBody):
            kwargs["json"] = body.data
        elif isinstance(body, MultipartBody):
            kwargs["data"] = body.fields
            kwargs["files"] = body.files
        if timeout is not None:
            kwargs["timeout"] = httpx.Timeout(timeout)

        return await self._get_client().request(
            method,
            url,
            params=params or None,
            headers=request_headers,
            **kwargs,
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


__all__ = [
    "BaseTransport",
    "AsyncTransport",
    "JSONBody",
    "MultipartBody",
    "RequestBody",
]
