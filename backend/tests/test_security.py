"""Tests for password hashing and JWT handling."""

from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from lms.config import Settings
from lms.core.error_codes import ErrorCode
from lms.core.exceptions import UnauthorizedAccessError
from lms.core.security import PasswordHasher, TokenService
from lms.db.models import User

SECRET = "unit-test-secret-key-that-is-long-enough"


@pytest.fixture
def token_settings() -> Settings:
    return Settings(jwt_secret_key=SECRET, jwt_expiration_minutes=30)


@pytest.fixture
def user() -> User:
    return User(id=42, name="Ada", email="ada@example.com", password_hash="x", role="Admin")


def test_hash_and_verify():
    hasher = PasswordHasher(rounds=4)
    hashed = hasher.hash("s3cret!")

    assert hashed != "s3cret!"
    assert hasher.verify("s3cret!", hashed)
    assert not hasher.verify("wrong", hashed)


def test_verify_rejects_malformed_hash():
    assert PasswordHasher(rounds=4).verify("anything", "not-a-bcrypt-hash") is False


def test_token_carries_identity_and_role(token_settings, user):
    service = TokenService(token_settings)
    token, expires_at = service.create_access_token(user)

    claims = service.decode(token)

    assert claims["sub"] == "42"
    assert claims["role"] == "Admin"
    assert claims["iss"] == token_settings.jwt_issuer
    assert claims["aud"] == token_settings.jwt_audience
    assert timedelta(minutes=29) < expires_at - datetime.now(UTC) <= timedelta(minutes=30)


def test_expired_token(token_settings, user):
    service = TokenService(token_settings.model_copy(update={"jwt_expiration_minutes": -1}))
    token, _ = service.create_access_token(user)

    with pytest.raises(UnauthorizedAccessError) as exc_info:
        TokenService(token_settings).decode(token)
    assert exc_info.value.error_code == ErrorCode.TOKEN_EXPIRED


def test_wrong_audience_is_rejected(token_settings, user):
    other = TokenService(token_settings.model_copy(update={"jwt_audience": "someone-else"}))
    token, _ = other.create_access_token(user)

    with pytest.raises(UnauthorizedAccessError) as exc_info:
        TokenService(token_settings).decode(token)
    assert exc_info.value.error_code == ErrorCode.UNAUTHORIZED


def test_garbage_token_is_rejected(token_settings):
    with pytest.raises(UnauthorizedAccessError):
        TokenService(token_settings).decode("not.a.jwt")


def test_token_without_subject_is_rejected(token_settings):
    token = jwt.encode(
        {
            "iss": token_settings.jwt_issuer,
            "aud": token_settings.jwt_audience,
            "exp": datetime.now(UTC) + timedelta(minutes=5),
        },
        SECRET,
        algorithm="HS256",
    )

    with pytest.raises(UnauthorizedAccessError):
        TokenService(token_settings).decode(token)


def test_production_settings_reject_insecure_secret():
    with pytest.raises(ValueError):
        Settings(dev_mode=False, jwt_secret_key="change-me")
