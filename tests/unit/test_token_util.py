"""Tests for token expiry bookkeeping."""

import base64
import json

from pan123.auth.token_util import (
    DEBUG_TOKEN_LIFETIME_SECONDS,
    DEFAULT_LIFETIME_SECONDS,
    EXPIRY_MARGIN_SECONDS,
    TokenInfo,
    get_token_payload,
    token_info_from_grant,
    token_info_from_override,
)


def _jwt(payload: dict) -> str:
    def encode(part: dict) -> str:
        raw = json.dumps(part).encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    return f"{encode({'alg': 'none'})}.{encode(payload)}.signature"


class TestGrant:
    def test_margin_is_subtracted_from_declared_lifetime(self):
        info = token_info_from_grant({"accessToken": "abc", "expiresIn": 7200}, now=1_000.0)
        assert info.access_token == "abc"
        assert info.expires_at == 1_000.0 + 7200 - EXPIRY_MARGIN_SECONDS

    def test_token_is_invalid_from_the_margin_onwards(self):
        issued = 1_000.0
        lifetime = 7200
        info = token_info_from_grant({"accessToken": "abc", "expiresIn": lifetime}, now=issued)

        assert info.is_valid(issued + lifetime - EXPIRY_MARGIN_SECONDS - 0.001)
        assert not info.is_valid(issued + lifetime - EXPIRY_MARGIN_SECONDS)
        assert not info.is_valid(issued + lifetime)

    def test_missing_lifetime_defaults_to_one_hour(self):
        info = token_info_from_grant({"accessToken": "abc"}, now=0.0)
        assert info.expires_at == DEFAULT_LIFETIME_SECONDS - EXPIRY_MARGIN_SECONDS

    def test_invalid_lifetimes_fall_back_to_default(self):
        for bad in (0, -5, "3600", None, True):
            info = token_info_from_grant({"accessToken": "abc", "expiresIn": bad}, now=0.0)
            assert info.expires_at == DEFAULT_LIFETIME_SECONDS - EXPIRY_MARGIN_SECONDS

    def test_token_type_defaults_to_bearer(self):
        info = token_info_from_grant({"accessToken": "abc", "tokenType": ""}, now=0.0)
        assert info.token_type == "Bearer"


class TestOverride:
    def test_jwt_exp_claim_is_honoured(self):
        info = token_info_from_override(_jwt({"exp": 5_000}), now=1_000.0)
        assert info.expires_at == 5_000.0

    def test_opaque_token_gets_a_day(self):
        info = token_info_from_override("not-a-jwt", now=1_000.0)
        assert info.expires_at == 1_000.0 + DEBUG_TOKEN_LIFETIME_SECONDS

    def test_jwt_without_exp_gets_a_day(self):
        info = token_info_from_override(_jwt({"sub": "me"}), now=0.0)
        assert info.expires_at == DEBUG_TOKEN_LIFETIME_SECONDS

    def test_jwt_with_non_object_payload_gets_a_day(self):
        token = _jwt({"exp": 1}).split(".")
        token[1] = base64.urlsafe_b64encode(b"[1, 2]").decode("ascii").rstrip("=")
        info = token_info_from_override(".".join(token), now=0.0)
        assert info.expires_at == DEBUG_TOKEN_LIFETIME_SECONDS


def test_get_token_payload_decodes_urlsafe_segments():
    assert get_token_payload(_jwt({"exp": 42, "name": "ä"})) == {"exp": 42, "name": "ä"}


def test_token_info_validity_is_strict():
    info = TokenInfo(access_token="t", expires_at=10.0)
    assert info.is_valid(9.999)
    assert not info.is_valid(10.0)
