"""Video service — publishing, listing, editing and watching videos.

Learn: Publishing needs two uploads (video file + thumbnail) and a DB insert.
If the thumbnail upload fails after the video upload succeeded, the video
asset is deleted before the error surfaces; if the insert fails, both
assets are deleted. Edits and deletes go through OwnedResourceService, so
only the owner can touch a video and non-owners just see "not found".
"""

import asyncio
import uuid
from typing import Optional

import structlog
from sqlalchemy import exists, func, not_, or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError

from vidtube.db.models import Video, utcnow, watch_history
from vidtube.errors import Conflict, NotFound, ValidationFailed
from vidtube.media.host import (
    IMAGE,
    VIDEO,
    MediaAsset,
    MediaHost,
    MediaUploadError,
    discard_assets,
    release_media,
)
from vidtube.schemas.video import VideoQuery
from vidtube.services.ownership import OwnedResourceService

logger = structlog.get_logger()

_SORT_COLUMNS = {
    "created_at": Video.created_at,
    "title": Video.title,
    "views": Video.views,
    "duration": Video.duration_seconds,
}


def format_duration(seconds: Optional[float]) -> str:
    """Render a duration as M:SS, or H:MM:SS past an hour."""
    total = int(round(seconds or 0))
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def visible_to(viewer_id: uuid.UUID):
    """Filter for videos a viewer may see: published ones plus their own drafts."""
    return or_(Video.is_published.is_(True), Video.owner_id == viewer_id)


def _required(value: Optional[str]) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationFailed("All fields are required")
    return value


class VideoService(OwnedResourceService):
    """Business logic for videos."""

    model = Video
    not_found_message = "Video not found or you are not allowed to modify it"

    # ─── Reads ──────────────────────────────────────────

    async def list_videos(
        self, q: VideoQuery, viewer_id: uuid.UUID
    ) -> tuple[list[Video], int]:
        conditions = [visible_to(viewer_id)]
        if q.query:
            conditions.append(
                or_(
                    Video.title.icontains(q.query, autoescape=True),
                    Video.description.icontains(q.query, autoescape=True),
                )
            )
        if q.user_id:
            conditions.append(Video.owner_id == q.user_id)

        total = await self.db.scalar(
            select(func.count()).select_from(Video).where(*conditions)
        )

        column = _SORT_COLUMNS[q.sort_by]
        order = column.desc() if q.sort_type == "desc" else column.asc()
        result = await self.db.execute(
            select(Video)
            .where(*conditions)
            .order_by(order, Video.id)
            .offset((q.page - 1) * q.limit)
            .limit(q.limit)
        )
        return list(result.scalars().all()), total or 0

    async def get_video(
        self, video_id: uuid.UUID, viewer_id: Optional[uuid.UUID] = None
    ) -> Video:
        stmt = (
            select(Video)
            .where(Video.id == video_id)
            .execution_options(populate_existing=True)
        )
        if viewer_id is not None:
            stmt = stmt.where(visible_to(viewer_id))
        result = await self.db.execute(stmt)
        video = result.scalars().first()
        if not video:
            raise NotFound("Video not found")
        return video

    # ─── Publish ────────────────────────────────────────

    async def publish(
        self,
        media: MediaHost,
        owner_id: uuid.UUID,
        *,
        title: Optional[str],
        description: Optional[str],
        video_path: Optional[str],
        thumbnail_path: Optional[str],
    ) -> Video:
        title = _required(title)
        description = _required(description)

        taken = await self.db.scalar(select(exists().where(Video.title == title)))
        if taken:
            raise Conflict("Video with this title already exists")

        if not (video_path and thumbnail_path):
            raise ValidationFailed("Video file and thumbnail file are required")

        video_asset: Optional[MediaAsset] = None
        thumbnail_asset: Optional[MediaAsset] = None
        try:
            video_asset = await media.upload(video_path, VIDEO)
            thumbnail_asset = await media.upload(thumbnail_path, IMAGE)

            video = Video(
                owner_id=owner_id,
                title=title,
                description=description,
                video_url=video_asset.url,
                video_public_id=video_asset.public_id,
                thumbnail_url=thumbnail_asset.url,
                thumbnail_public_id=thumbnail_asset.public_id,
                duration=format_duration(video_asset.duration),
                duration_seconds=video_asset.duration or 0,
            )
            self.db.add(video)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            await discard_assets(media, video_asset, thumbnail_asset)
            logger.warning(
                "video.publish_failed",
                owner_id=str(owner_id),
                stage="video" if video_asset is None else "thumbnail_or_db",
                error=str(e),
            )
            if isinstance(e, MediaUploadError):
                raise ValidationFailed(
                    "Video upload failed" if video_asset is None else "Thumbnail upload failed"
                ) from e
            if isinstance(e, IntegrityError):
                raise Conflict("Video with this title already exists") from e
            raise

        logger.info("video.published", video_id=str(video.id), owner_id=str(owner_id))
        return await self.get_video(video.id)

    # ─── Owner-only mutations ───────────────────────────

    async def update_video(
        self,
        media: MediaHost,
        video_id: uuid.UUID,
        owner_id: uuid.UUID,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        thumbnail_path: Optional[str] = None,
    ) -> Video:
        values = {}
        if title is not None:
            values["title"] = _required(title)
        if description is not None:
            values["description"] = _required(description)
        if not values and not thumbnail_path:
            raise ValidationFailed("Nothing to update")

        # Needed to clean up the old thumbnail; the write below re-checks ownership
        old_thumbnail_id = await self.db.scalar(
            select(Video.thumbnail_public_id).where(*self._owned(video_id, owner_id))
        )
        if old_thumbnail_id is None:
            raise NotFound(self.not_found_message)

        new_thumbnail: Optional[MediaAsset] = None
        if thumbnail_path:
            try:
                new_thumbnail = await media.upload(thumbnail_path, IMAGE)
            except MediaUploadError as e:
                raise ValidationFailed("Error uploading thumbnail") from e
            values["thumbnail_url"] = new_thumbnail.url
            values["thumbnail_public_id"] = new_thumbnail.public_id

        try:
            await self._update_owned(video_id, owner_id, **values)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            await discard_assets(media, new_thumbnail)
            raise

        if new_thumbnail:
            await release_media(media, old_thumbnail_id, IMAGE)
        return await self.get_video(video_id)

    async def delete_video(
        self, media: MediaHost, video_id: uuid.UUID, owner_id: uuid.UUID
    ) -> None:
        row = await self._delete_owned(
            video_id, owner_id, Video.video_public_id, Video.thumbnail_public_id
        )
        await self.db.commit()

        await asyncio.gather(
            release_media(media, row.video_public_id, VIDEO),
            release_media(media, row.thumbnail_public_id, IMAGE),
        )
        logger.info("video.deleted", video_id=str(video_id), owner_id=str(owner_id))

    async def toggle_publish(self, video_id: uuid.UUID, owner_id: uuid.UUID) -> Video:
        await self._update_owned(
            video_id, owner_id, is_published=not_(Video.is_published)
        )
        await self.db.commit()
        return await self.get_video(video_id)

    # ─── Watching ───────────────────────────────────────

    async def watch(self, video_id: uuid.UUID, user_id: uuid.UUID) -> Video:
        """Count a view and record it in the viewer's history."""
        result = await self.db.execute(
            update(Video)
            .where(Video.id == video_id, visible_to(user_id))
            # keep updated_at for real edits, not view counts
            .values(views=Video.views + 1, updated_at=Video.updated_at)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFound("Video not found")

        # One history row per (user, video); re-watching only moves watched_at
        dialect = self.db.get_bind().dialect.name
        insert = sqlite_insert if dialect == "sqlite" else pg_insert
        now = utcnow()
        stmt = insert(watch_history).values(
            user_id=user_id, video_id=video_id, watched_at=now
        )
        await self.db.execute(
            stmt.on_conflict_do_update(
                index_elements=[watch_history.c.user_id, watch_history.c.video_id],
                set_={"watched_at": now},
            )
        )
        await self.db.commit()
        return await self.get_video(video_id)
