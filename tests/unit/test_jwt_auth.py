"""Unit tests for school_api.auth.jwt_auth."""
import time

import jwt
import pytest

from school_api.auth.jwt_auth import create_access_token, parse_bearer, verify_token
from school_api.config import get_settings
from school_api.errors import AuthenticationError
from school_api.models import UserRole


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


def test_round_trip():
    credential = verify_token(create_access_token(42, UserRole.teacher))
    assert credential.user_id == 42
    assert credential.role == UserRole.teacher


def test_parse_bearer_strips_scheme():
    assert parse_bearer("Bearer abc.def.ghi") == "abc.def.ghi"
    assert parse_bearer("bearer  abc") == "abc"


# ---------------------------------------------------------------------------
# Rejections
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer", "Bearer   "])
def test_parse_bearer_rejects_missing_token(header):
    with pytest.raises(AuthenticationError):
        parse_bearer(header)


def test_expired_token_rejected():
    settings = get_settings()
    now = int(time.time())
    token = jwt.encode(
        {"sub": "1", "role": "admin", "iat": now - 120, "exp": now - 60},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    with pytest.raises(AuthenticationError, match="expired"):
        verify_token(token)


def test_wrong_secret_rejected():
    token = jwt.encode(
        {"sub": "1", "role": "admin", "exp": int(time.time()) + 60},
        "not-the-secret",
        algorithm="HS256",
    )
    with pytest.raises(AuthenticationError):
        verify_token(token)


def test_unknown_role_rejected():
    settings = get_settings()
    token = jwt.encode(
        {"sub": "1", "role": "janitor", "exp": int(time.time()) + 60},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    with pytest.raises(AuthenticationError):
        verify_token(token)


def test_garbage_rejected():
    with pytest.raises(AuthenticationError):
        verify_token("not-a-jwt")
