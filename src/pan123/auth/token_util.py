from __future__ import annotations

import base64
import json
from dataclasses import dataclass
from typing import Any

# Tokens are treated as expired this long before the server says they are.
EXPIRY_MARGIN_SECONDS = 60.0
DEFAULT_LIFETIME_SECONDS = 3600.0
DEBUG_TOKEN_LIFETIME_SECONDS = 24 * 60 * 60.0


@dataclass(frozen=True, slots=True)
class TokenInfo:
    access_token: str
    expires_at: float
    token_type: str = "Bearer"

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


def get_token_payload(token: str) -> dict[str, Any]:
    parts = token.split(".")
    if len(parts) != 3:
        raise ValueError("Invalid token")
    base64_part = parts[1].replace("-", "+").replace("_", "/")
    padded = base64_part + "=" * ((4 - (len(base64_part) % 4)) % 4)
    decoded = base64.b64decode(padded)
    return json.loads(decoded.decode("utf-8"))


def resolve_lifetime(expires_in: Any) -> float:
    if isinstance(expires_in, bool) or not isinstance(expires_in, (int, float)):
        return DEFAULT_LIFETIME_SECONDS
    if expires_in <= 0:
        return DEFAULT_LIFETIME_SECONDS
    return float(expires_in)


def token_info_from_grant(data: dict[str, Any], now: float) -> TokenInfo:
    lifetime = resolve_lifetime(data.get("expiresIn"))
    return TokenInfo(
        access_token=data["accessToken"],
        expires_at=now + lifetime - EXPIRY_MARGIN_SECONDS,
        token_type=data.get("tokenType") or "Bearer",
    )


def token_info_from_override(token: str, now: float) -> TokenInfo:
    """Build a TokenInfo for a pre-issued token, honouring its JWT ``exp`` if any."""
    expires_at = now + DEBUG_TOKEN_LIFETIME_SECONDS
    try:
        payload = get_token_payload(token)
    except ValueError:
        payload = {}
    exp = payload.get("exp") if isinstance(payload, dict) else None
    if isinstance(exp, (int, float)) and not isinstance(exp, bool):
        expires_at = float(exp)
    return TokenInfo(access_token=token, expires_at=expires_at)


__all__ = [
    "TokenInfo",
    "EXPIRY_MARGIN_SECONDS",
    "DEFAULT_LIFETIME_SECONDS",
    "get_token_payload",
    "token_info_from_grant",
    "token_info_from_override",
]
