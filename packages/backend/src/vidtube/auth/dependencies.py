"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract
and validate the current user from the request. The resolved identity
is passed explicitly to handlers and services — nothing is stored
process-wide.

The bearer token is looked up in this order:
1. accessToken cookie (set by login/refresh)
2. Authorization: Bearer <token> header
"""

import uuid
from typing import Optional

from fastapi import Cookie, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.auth.jwt import ACCESS, TokenError, verify_token
from vidtube.db.engine import get_db
from vidtube.db.models import User
from vidtube.errors import Unauthorized

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


class CurrentIdentity:
    """Represents the authenticated user making the request.

    Learn: This is the per-request auth context. Ownership checks
    compare resource.owner_id against user_id.
    """

    def __init__(self, user: User):
        self.user = user
        self.user_id: uuid.UUID = user.id
        self.username: str = user.username


def extract_bearer_token(
    cookie_token: Optional[str], authorization: Optional[str]
) -> Optional[str]:
    if cookie_token:
        return cookie_token
    if authorization and authorization.startswith("Bearer "):
        token = authorization[7:].strip()
        return token or None
    return None


async def get_current_user(
    access_cookie: Optional[str] = Cookie(None, alias=ACCESS_COOKIE),
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> CurrentIdentity:
    """Resolve the request's bearer token to a user (401 on any failure)."""
    token = extract_bearer_token(access_cookie, authorization)
    if not token:
        raise Unauthorized("Unauthorized request")

    try:
        payload = verify_token(token, expected_type=ACCESS)
    except TokenError as e:
        raise Unauthorized(str(e))

    user = await _load_user(db, payload.get("sub"))
    if not user:
        raise Unauthorized("Invalid access token")
    return CurrentIdentity(user)


async def _load_user(db: AsyncSession, sub: Optional[str]) -> Optional[User]:
    try:
        user_id = uuid.UUID(str(sub))
    except ValueError:
        return None
    return await db.get(User, user_id)
