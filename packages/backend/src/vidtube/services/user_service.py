"""User service — registration, profile updates, channels, watch history.

Learn: Registration and avatar/cover updates talk to two systems (media
host + database) with no shared transaction. The rule is: if a later step
fails, undo the earlier side effects before surfacing the error, so a
failed request never leaves orphaned media behind. Temp files are the
caller's concern (see vidtube.media.uploads.TempUploads).
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import exists, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.auth.password import hash_password
from vidtube.db.models import Subscription, User, Video, watch_history
from vidtube.errors import Conflict, NotFound, ValidationFailed
from vidtube.media.host import (
    IMAGE,
    MediaAsset,
    MediaHost,
    MediaUploadError,
    discard_assets,
    release_media,
)
from vidtube.schemas.user import ChannelProfile

logger = structlog.get_logger()


class UserService:
    """Business logic for accounts and channels."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Registration ───────────────────────────────────

    async def register(
        self,
        media: MediaHost,
        *,
        full_name: Optional[str],
        email: Optional[str],
        username: Optional[str],
        password: Optional[str],
        avatar_path: Optional[str],
        cover_image_path: Optional[str] = None,
    ) -> User:
        """Create an account. Avatar is required, cover image optional."""
        fields = [full_name, email, username, password]
        if any(not (f or "").strip() for f in fields):
            raise ValidationFailed("All fields are required")

        username = username.strip().lower()
        email = email.strip()

        taken = await self.db.scalar(
            select(exists().where(or_(User.username == username, User.email == email)))
        )
        if taken:
            raise Conflict("User with email or username already exists")

        if not avatar_path:
            raise ValidationFailed("Avatar file is required")

        avatar: Optional[MediaAsset] = None
        cover: Optional[MediaAsset] = None
        try:
            avatar = await media.upload(avatar_path, IMAGE)
            if cover_image_path:
                cover = await media.upload(cover_image_path, IMAGE)

            user = User(
                username=username,
                email=email,
                full_name=full_name.strip(),
                password_hash=hash_password(password),
                avatar_url=avatar.url,
                avatar_public_id=avatar.public_id,
                cover_image_url=cover.url if cover else None,
                cover_image_public_id=cover.public_id if cover else None,
            )
            self.db.add(user)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            await discard_assets(media, avatar, cover)
            if isinstance(e, MediaUploadError):
                raise ValidationFailed(
                    "Avatar upload failed" if avatar is None else "Cover image upload failed"
                ) from e
            if isinstance(e, IntegrityError):
                raise Conflict("User with email or username already exists") from e
            raise

        logger.info("user.registered", user_id=str(user.id), username=username)
        return user

    # ─── Account ────────────────────────────────────────

    async def get_user(self, user_id: uuid.UUID) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def update_account(self, user: User, full_name: str, email: str) -> User:
        email = email.strip()
        taken = await self.db.scalar(
            select(exists().where(User.email == email, User.id != user.id))
        )
        if taken:
            raise Conflict("Email already in use")

        user.full_name = full_name.strip()
        user.email = email
        await self.db.commit()
        return user

    async def replace_avatar(self, media: MediaHost, user: User, path: Optional[str]) -> User:
        return await self._replace_image(media, user, path, "avatar")

    async def replace_cover_image(
        self, media: MediaHost, user: User, path: Optional[str]
    ) -> User:
        return await self._replace_image(media, user, path, "cover_image")

    async def _replace_image(
        self, media: MediaHost, user: User, path: Optional[str], field: str
    ) -> User:
        """Upload a new image, point the user at it, then drop the old one.

        The old asset is removed only after the new one is committed, so a
        failure at any step leaves the user with a working image.
        """
        label = field.replace("_", " ")
        if not path:
            raise ValidationFailed(f"{label.capitalize()} file is missing")

        old_public_id = getattr(user, f"{field}_public_id")
        try:
            new = await media.upload(path, IMAGE)
        except MediaUploadError as e:
            raise ValidationFailed(f"Error while uploading {label}") from e

        try:
            setattr(user, f"{field}_url", new.url)
            setattr(user, f"{field}_public_id", new.public_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            await discard_assets(media, new)
            raise

        if old_public_id:
            await release_media(media, old_public_id, IMAGE)
        logger.info("user.image_replaced", user_id=str(user.id), field=field)
        return user

    # ─── Channels ───────────────────────────────────────

    async def get_channel_profile(
        self, username: str, viewer_id: uuid.UUID
    ) -> ChannelProfile:
        username = username.strip().lower()
        if not username:
            raise ValidationFailed("Username is missing")

        result = await self.db.execute(select(User).where(User.username == username))
        channel = result.scalars().first()
        if not channel:
            raise NotFound("Channel does not exist")

        subscribers_count = await self.db.scalar(
            select(func.count())
            .select_from(Subscription)
            .where(Subscription.channel_id == channel.id)
        )
        subscribed_to_count = await self.db.scalar(
            select(func.count())
            .select_from(Subscription)
            .where(Subscription.subscriber_id == channel.id)
        )
        is_subscribed = await self.db.scalar(
            select(
                exists().where(
                    Subscription.channel_id == channel.id,
                    Subscription.subscriber_id == viewer_id,
                )
            )
        )

        return ChannelProfile(
            id=channel.id,
            username=channel.username,
            full_name=channel.full_name,
            email=channel.email,
            avatar_url=channel.avatar_url,
            cover_image_url=channel.cover_image_url,
            subscribers_count=subscribers_count or 0,
            channels_subscribed_to_count=subscribed_to_count or 0,
            is_subscribed=bool(is_subscribed),
        )

    async def get_watch_history(self, user_id: uuid.UUID) -> list[Video]:
        """Videos the user watched, most recent first."""
        result = await self.db.execute(
            select(Video)
            .join(watch_history, watch_history.c.video_id == Video.id)
            .where(watch_history.c.user_id == user_id)
            .order_by(watch_history.c.watched_at.desc())
        )
        return list(result.scalars().all())
