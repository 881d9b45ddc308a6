"""Tests for JWT token management."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from wtd.auth.jwt import create_access_token, reset_keys, verify_token
from wtd.config import get_settings


@pytest.fixture(autouse=True)
def _fresh_keys():
    get_settings.cache_clear()
    reset_keys()
    yield
    reset_keys()


def _encode(**overrides):
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload = {
        "sub": "1",
        "username": "alice",
        "iat": now,
        "exp": now + timedelta(minutes=5),
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "type": "access",
    }
    payload.update(overrides)
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


class TestAccessToken:
    def test_create_and_verify(self):
        token = create_access_token(user_id=42, username="alice")
        payload = verify_token(token)
        assert payload["sub"] == "42"
        assert payload["username"] == "alice"
        assert payload["type"] == "access"

    def test_expiry_follows_settings(self):
        token = create_access_token(user_id=1, username="alice")
        payload = verify_token(token)
        lifetime = payload["exp"] - payload["iat"]
        assert lifetime == get_settings().jwt_access_token_expire_minutes * 60

    def test_wrong_type_rejected(self):
        token = _encode(type="refresh")
        with pytest.raises(jwt.InvalidTokenError, match="Expected token type"):
            verify_token(token)

    def test_expired_token_rejected(self):
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = _encode(iat=past, exp=past + timedelta(minutes=1))
        with pytest.raises(jwt.InvalidTokenError, match="expired"):
            verify_token(token)

    def test_tampered_signature_rejected(self):
        token = create_access_token(user_id=1, username="alice")
        forged = jwt.encode(
            jwt.decode(token, options={"verify_signature": False}),
            "some-other-secret-that-is-long-enough!!",
            algorithm="HS256",
        )
        with pytest.raises(jwt.InvalidTokenError):
            verify_token(forged)

    def test_wrong_audience_rejected(self):
        token = _encode(aud="someone-else")
        with pytest.raises(jwt.InvalidTokenError):
            verify_token(token)

    def test_wrong_issuer_rejected(self):
        token = _encode(iss="someone-else")
        with pytest.raises(jwt.InvalidTokenError):
            verify_token(token)

    def test_missing_subject_rejected(self):
        settings = get_settings()
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {
                "exp": now + timedelta(minutes=5),
                "iss": settings.jwt_issuer,
                "aud": settings.jwt_audience,
                "type": "access",
            },
            settings.jwt_secret_key,
            algorithm="HS256",
        )
        with pytest.raises(jwt.InvalidTokenError):
            verify_token(token)

    def test_garbage_rejected(self):
        with pytest.raises(jwt.InvalidTokenError):
            verify_token("not-a-jwt")
