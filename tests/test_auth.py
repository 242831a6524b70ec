"""Tests for token decoding and the pre-flight token guard"""

import base64
import time
from unittest.mock import Mock

import jwt
import pytest

from allocation_client.auth import TokenGuard, decode_claims, is_token_expired
from allocation_client.consts import (
    REMEMBER_ME_KEY,
    SESSION_EXPIRED_KEY,
    TOKEN_KEY,
    USER_KEY,
)
from allocation_client.exceptions import ApiError, SessionExpiredError
from allocation_client.storage import SessionStore


def _raw_segment(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


HEADER = _raw_segment(b'{"alg": "HS256", "typ": "JWT"}')
SIGNATURE = _raw_segment(b"signature")


class TestDecodeClaims:
    def test_decodes_claims_segment(self, make_token):
        token = make_token(claims={"sub": "u1", "exp": 123, "roles": ["ADMIN"]})
        assert decode_claims(token) == {"sub": "u1", "exp": 123, "roles": ["ADMIN"]}

    def test_signed_token_decodes_without_key(self):
        token = jwt.encode(
            {"sub": "u1", "exp": 2000000000}, "server-side-secret-of-at-least-32-bytes"
        )
        assert decode_claims(token) == {"sub": "u1", "exp": 2000000000}

    def test_signature_is_ignored(self, make_token):
        token = make_token(claims={"exp": 1})
        tampered = token.rsplit(".", 1)[0] + "." + _raw_segment(b"forged")
        assert decode_claims(tampered) == {"exp": 1}

    def test_expired_claim_is_not_enforced(self, make_token):
        """Expiry is judged by is_token_expired, not by the decoder"""
        assert decode_claims(make_token(exp_offset=-3600))["exp"] < time.time()

    @pytest.mark.parametrize(
        "token",
        [
            "",
            "onlyonesegment",
            f"{HEADER}..{SIGNATURE}",
            f"{HEADER}.!!!notbase64!!!.{SIGNATURE}",
            f"{HEADER}.{_raw_segment(b'not json')}.{SIGNATURE}",
            f"{HEADER}.{_raw_segment(b'[1, 2, 3]')}.{SIGNATURE}",
            f"{HEADER}.{_raw_segment(bytes([0xff, 0xfe, 0xfd]))}.{SIGNATURE}",
        ],
    )
    def test_malformed_tokens_raise_jwt_error(self, token):
        with pytest.raises(jwt.PyJWTError):
            decode_claims(token)


class TestIsTokenExpired:
    def test_future_expiry_is_valid(self, make_token):
        assert is_token_expired(make_token(exp_offset=3600)) is False

    def test_past_expiry_is_expired(self, make_token):
        assert is_token_expired(make_token(exp_offset=-1)) is True

    def test_expiry_boundary_counts_as_expired(self, make_token):
        token = make_token(claims={"exp": 1000})
        assert is_token_expired(token, now=999.999) is False
        assert is_token_expired(token, now=1000) is True
        assert is_token_expired(token, now=1001) is True

    def test_float_expiry(self, make_token):
        token = make_token(claims={"exp": 1000.5})
        assert is_token_expired(token, now=1000.4) is False
        assert is_token_expired(token, now=1000.5) is True

    @pytest.mark.parametrize(
        "claims",
        [
            {},
            {"sub": "u1"},
            {"exp": "9999999999"},
            {"exp": None},
            {"exp": True},
            {"exp": [9999999999]},
        ],
    )
    def test_missing_or_non_numeric_exp_fails_closed(self, make_token, claims):
        assert is_token_expired(make_token(claims=claims)) is True

    @pytest.mark.parametrize(
        "token",
        [
            "",
            "garbage",
            "a.b",
            f"{HEADER}.%%%.{SIGNATURE}",
            f"{HEADER}.{_raw_segment(b'{not json')}.{SIGNATURE}",
        ],
    )
    def test_malformed_tokens_fail_closed(self, token):
        assert is_token_expired(token) is True

    def test_non_finite_exp_fails_closed(self):
        payload = _raw_segment(b'{"exp": NaN}')
        assert is_token_expired(f"{HEADER}.{payload}.{SIGNATURE}") is True

    def test_uses_current_time_by_default(self, make_token):
        token = make_token(claims={"exp": time.time() + 60})
        assert is_token_expired(token) is False


class TestTokenGuard:
    @pytest.fixture
    def on_expired(self):
        return Mock()

    @pytest.fixture
    def guard(self, storage, on_expired):
        return TokenGuard(SessionStore(storage), lambda key: key, on_expired)

    @pytest.fixture
    def expired_session(self, storage, expired_token):
        storage.set_item(TOKEN_KEY, expired_token)
        storage.set_item(USER_KEY, '{"id": 1}')
        storage.set_item(REMEMBER_ME_KEY, "true")
        return expired_token

    def test_expired_token_on_protected_endpoint(
        self, guard, storage, on_expired, expired_session
    ):
        """Expired token tears down token and user, but keeps remember-me"""
        with pytest.raises(SessionExpiredError) as exc_info:
            guard.validate_for_request("/users")

        assert exc_info.value.message == SESSION_EXPIRED_KEY
        assert exc_info.value.status is None
        assert isinstance(exc_info.value, ApiError)
        assert storage.get_item(TOKEN_KEY) is None
        assert storage.get_item(USER_KEY) is None
        assert storage.get_item(REMEMBER_ME_KEY) == "true"
        on_expired.assert_called_once_with()

    @pytest.mark.parametrize(
        "endpoint",
        [
            "/auth/login",
            "/auth/forgot-password",
            "/auth/reset-password",
            "/auth/change-password",
            "/public/teacher-form-submission/abc",
        ],
    )
    def test_auth_and_public_endpoints_skip_validation(
        self, guard, storage, on_expired, expired_session, endpoint
    ):
        guard.validate_for_request(endpoint)

        assert storage.get_item(TOKEN_KEY) == expired_session
        on_expired.assert_not_called()

    def test_valid_token_passes(self, guard, storage, on_expired, valid_token):
        storage.set_item(TOKEN_KEY, valid_token)

        guard.validate_for_request("/users")

        assert storage.get_item(TOKEN_KEY) == valid_token
        on_expired.assert_not_called()

    def test_missing_token_passes(self, guard, on_expired):
        """No token means unauthenticated, which the backend answers"""
        guard.validate_for_request("/users")
        on_expired.assert_not_called()

    def test_malformed_token_is_torn_down(self, guard, storage, on_expired):
        storage.set_item(TOKEN_KEY, "not-a-jwt")

        with pytest.raises(SessionExpiredError):
            guard.validate_for_request("/users")

        assert storage.get_item(TOKEN_KEY) is None
        on_expired.assert_called_once()
