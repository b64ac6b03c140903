"""Unit tests for JWT verification."""

from datetime import timedelta

import pytest
from jose import jwt

from config.settings import settings
from src.cw_common.errors import InvalidCredentialsError
from src.cw_gateway.auth.jwt_handler import create_access_token, decode_token


def test_access_token_contains_correct_claims() -> None:
    token = create_access_token(42)
    payload = jwt.get_unverified_claims(token)
    assert payload["sub"] == "42"
    assert payload["role"] == "user"
    assert payload["type"] == "access"


def test_decode_valid_token() -> None:
    payload = decode_token(create_access_token(42, role="admin"))
    assert payload["sub"] == "42"
    assert payload["role"] == "admin"


def test_expired_token_rejected() -> None:
    token = create_access_token(42, expires_in=timedelta(seconds=-1))
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_wrong_secret_rejected() -> None:
    token = jwt.encode({"sub": "42", "type": "access"}, "other-secret", algorithm="HS256")
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_refresh_type_rejected() -> None:
    token = jwt.encode(
        {"sub": "42", "type": "refresh"}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM
    )
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_non_integer_subject_rejected() -> None:
    token = jwt.encode(
        {"sub": "user-abc", "type": "access"}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM
    )
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_garbage_rejected() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_token("not.a.jwt")
