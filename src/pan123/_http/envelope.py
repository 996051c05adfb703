"""The ``{code, message, data, x-traceID}`` wrapper around every response."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from ..errors import ApiError

TRACE_ID_KEY = "x-traceID"


@dataclass(frozen=True, slots=True)
class ApiEnvelope:
    code: int
    message: str
    data: Any
    trace_id: str | None = None

    @property
    def ok(self) -> bool:
        return self.code == 0


def parse_envelope(payload: Any) -> ApiEnvelope | None:
    """Return the envelope carried by ``payload``, or None if it is not one."""
    if not isinstance(payload, dict) or "code" not in payload:
        return None
    try:
        code = int(payload["code"])
    except (TypeError, ValueError):
        return None
    trace_id = payload.get(TRACE_ID_KEY)
    return ApiEnvelope(
        code=code,
        message=str(payload.get("message") or ""),
        data=payload.get("data"),
        trace_id=str(trace_id) if trace_id else None,
    )


def _decode_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def error_from_response(response: httpx.Response) -> ApiError:
    """Normalize a failed response into an ApiError.

    The envelope's own code and message win over the transport status.
    """
    payload = _decode_json(response)
    envelope = parse_envelope(payload)
    if envelope is not None and envelope.code != 0:
        return ApiError(
            envelope.code,
            envelope.message or response.reason_phrase,
            details=payload,
            trace_id=envelope.trace_id,
            status_code=response.status_code,
        )
    message = ""
    if isinstance(payload, dict):
        message = str(payload.get("message") or "")
    return ApiError(
        response.status_code,
        message or f"HTTP {response.status_code} {response.reason_phrase}",
        details=payload if payload is not None else response.text,
        status_code=response.status_code,
    )


def unwrap_envelope(response: httpx.Response) -> ApiEnvelope:
    """Decode a response body, raising ApiError unless it is a ``code == 0`` envelope.

    Business failures ride on HTTP 200, so the status alone is never trusted.
    """
    if not (200 <= response.status_code < 300):
        raise error_from_response(response)

    payload = _decode_json(response)
    envelope = parse_envelope(payload)
    if envelope is None:
        raise ApiError(
            response.status_code,
            "Invalid API response: expected a {code, message, data} envelope",
            details=payload if payload is not None else response.text,
            status_code=response.status_code,
        )
    if envelope.code != 0:
        raise ApiError(
            envelope.code,
            envelope.message or "Unknown API error",
            details=envelope.data,
            trace_id=envelope.trace_id,
            status_code=response.status_code,
        )
    return envelope


__all__ = ["ApiEnvelope", "parse_envelope", "unwrap_envelope", "error_from_response"]
