"""Bearer token verification (HS256 JWT).

Token payload:  {"sub": "<user id>", "role": "<role>", "iat": ..., "exp": ...}

Verification checks signature and expiry only; the caller confirms that the
user still exists and still holds the claimed role before building an
IdentityContext.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt

from school_api.config import get_settings
from school_api.errors import AuthenticationError
from school_api.models.user import UserRole


@dataclass(frozen=True)
class VerifiedCredential:
    user_id: int
    role: UserRole


def create_access_token(
    user_id: int, role: UserRole, expires_minutes: Optional[int] = None
) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "role": role.value,
        "iat": int(now.timestamp()),
        "exp": int(
            (now + timedelta(minutes=expires_minutes or settings.JWT_EXPIRE_MINUTES)).timestamp()
        ),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def parse_bearer(authorization: Optional[str]) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        raise AuthenticationError("No token provided")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("No token provided")
    return token.strip()


def verify_token(token: str) -> VerifiedCredential:
    """Return the verified subject, or raise AuthenticationError."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthenticationError("Invalid token") from exc

    try:
        return VerifiedCredential(user_id=int(payload["sub"]), role=UserRole(payload["role"]))
    except (KeyError, ValueError, TypeError) as exc:
        raise AuthenticationError("Invalid token payload") from exc
