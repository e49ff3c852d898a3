"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
- Access token: short-lived, signed with the access secret, used for API calls
- Refresh token: long-lived, signed with the refresh secret, exchanged for
  a new pair and persisted on the user record (one active per user)

Every token carries a random jti, so two tokens minted for the same user
in the same second are still distinct strings. The refresh flow compares
tokens by value, which relies on that.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from vidtube.config import settings

ACCESS = "access"
REFRESH = "refresh"


class TokenError(Exception):
    """Raised when token creation/verification fails."""


def _secret_for(token_type: str) -> str:
    if token_type == ACCESS:
        return settings.access_token_secret
    if token_type == REFRESH:
        return settings.refresh_token_secret
    raise TokenError(f"Unknown token type: {token_type}")


def create_access_token(
    user_id: str,
    username: Optional[str] = None,
    email: Optional[str] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    """Create a JWT access token."""
    now = datetime.now(timezone.utc)
    expires = now + timedelta(
        minutes=expires_minutes or settings.access_token_expire_minutes
    )
    payload = {
        "sub": user_id,
        "type": ACCESS,
        "jti": uuid.uuid4().hex,
        "exp": expires,
        "iat": now,
    }
    if username:
        payload["username"] = username
    if email:
        payload["email"] = email
    return _encode(payload, ACCESS)


def create_refresh_token(
    user_id: str,
    expires_days: Optional[int] = None,
) -> str:
    """Create a JWT refresh token."""
    now = datetime.now(timezone.utc)
    expires = now + timedelta(
        days=expires_days or settings.refresh_token_expire_days
    )
    payload = {
        "sub": user_id,
        "type": REFRESH,
        "jti": uuid.uuid4().hex,
        "exp": expires,
        "iat": now,
    }
    return _encode(payload, REFRESH)


def _encode(payload: dict, token_type: str) -> str:
    try:
        return jwt.encode(
            payload, _secret_for(token_type), algorithm=settings.jwt_algorithm
        )
    except (jwt.PyJWTError, TypeError, ValueError) as e:
        raise TokenError(f"Could not sign token: {e}")


def verify_token(token: str, expected_type: str = ACCESS) -> dict:
    """Verify and decode a JWT token of the given type.

    Returns the payload dict on success.
    Raises TokenError on failure.
    """
    try:
        payload = jwt.decode(
            token,
            _secret_for(expected_type),
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")

    if payload.get("type") != expected_type:
        raise TokenError(f"Not a {expected_type} token")
    return payload
