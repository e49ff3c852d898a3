"""Auth service — login, logout, token issuing and the refresh flow.

Learn: The session lifecycle is built around one invariant: a user has at
most one valid refresh token, and it's the one stored on their row.

- issue_tokens() mints a new access/refresh pair and overwrites the stored
  refresh token, which invalidates whatever was there before.
- refresh_session() only accepts a refresh token that is validly signed AND
  equal to the stored one. Exchanging it issues a new pair, so each refresh
  token works exactly once. Presenting a superseded token is rejected.
- logout() clears the stored token, so no refresh token works until the
  next login.

Concurrent refreshes for the same user are NOT serialized: two requests
presenting the same (current) token can both pass the comparison, and the
last write wins. See DESIGN.md, open questions.
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.auth.jwt import (
    REFRESH,
    TokenError,
    create_access_token,
    create_refresh_token,
    verify_token,
)
from vidtube.auth.password import hash_password, verify_password
from vidtube.db.models import User
from vidtube.errors import InternalError, NotFound, Unauthorized, ValidationFailed
from vidtube.schemas.user import TokenPair

logger = structlog.get_logger()


class AuthService:
    """Business logic for credentials and sessions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Token issuer ───────────────────────────────────

    async def issue_tokens(self, user: User) -> TokenPair:
        """Mint an access/refresh pair and persist the refresh token."""
        try:
            access_token = create_access_token(
                str(user.id), username=user.username, email=user.email
            )
            refresh_token = create_refresh_token(str(user.id))
            user.refresh_token = refresh_token
            await self.db.commit()
        except (TokenError, SQLAlchemyError) as e:
            await self.db.rollback()
            logger.error("auth.token_issue_failed", user_id=str(user.id), error=str(e))
            raise InternalError(
                "Something went wrong while generating refresh and access token"
            ) from e

        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    # ─── Login / logout ─────────────────────────────────

    async def login(
        self,
        password: str,
        username: Optional[str] = None,
        email: Optional[str] = None,
    ) -> tuple[User, TokenPair]:
        conditions = []
        if username:
            conditions.append(User.username == username.strip().lower())
        if email:
            conditions.append(User.email == email.strip())
        if not conditions:
            raise ValidationFailed("username or email is required")

        result = await self.db.execute(select(User).where(or_(*conditions)))
        user = result.scalars().first()
        if not user:
            raise NotFound("User does not exist")

        if not verify_password(password, user.password_hash):
            logger.info("auth.login_failed", user_id=str(user.id))
            raise Unauthorized("Invalid user credentials")

        tokens = await self.issue_tokens(user)
        logger.info("auth.login", user_id=str(user.id))
        return user, tokens

    async def logout(self, user: User) -> None:
        """Drop the stored refresh token — ends the session."""
        user.refresh_token = None
        await self.db.commit()
        logger.info("auth.logout", user_id=str(user.id))

    # ─── Refresh flow ───────────────────────────────────

    async def refresh_session(self, incoming_token: Optional[str]) -> TokenPair:
        """Exchange a refresh token for a new pair (one-time use)."""
        if not incoming_token:
            raise Unauthorized("Unauthorized request")

        try:
            payload = verify_token(incoming_token, expected_type=REFRESH)
        except TokenError as e:
            raise Unauthorized(str(e))

        user = await self._get_user(payload.get("sub"))
        if not user:
            raise Unauthorized("Invalid refresh token")

        if incoming_token != user.refresh_token:
            logger.warning("auth.refresh_rejected", user_id=str(user.id))
            raise Unauthorized("Refresh token is expired or used")

        tokens = await self.issue_tokens(user)
        logger.info("auth.refreshed", user_id=str(user.id))
        return tokens

    # ─── Credentials ────────────────────────────────────

    async def change_password(
        self, user: User, old_password: str, new_password: str
    ) -> None:
        if not verify_password(old_password, user.password_hash):
            raise ValidationFailed("Invalid old password")
        user.password_hash = hash_password(new_password)
        await self.db.commit()
        logger.info("auth.password_changed", user_id=str(user.id))

    async def _get_user(self, sub: Optional[str]) -> Optional[User]:
        try:
            user_id = uuid.UUID(str(sub))
        except ValueError:
            return None
        return await self.db.get(User, user_id)
