"""Playlist service — user-curated, ordered lists of videos.

Learn: Adding or removing a video writes to the playlist_videos association
table, not to the playlist row itself. To keep the ownership check and the
mutation in one atomic step, we first do a conditional touch of the
playlist row (UPDATE ... WHERE id AND owner_id), which fails for
non-owners and holds the row lock until commit, then change the
association inside the same transaction.
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import delete, exists, func, insert, select

from vidtube.db.models import Playlist, User, Video, playlist_videos
from vidtube.errors import Conflict, Forbidden, NotFound
from vidtube.services.ownership import OwnedResourceService
from vidtube.services.video_service import visible_to

logger = structlog.get_logger()


class PlaylistService(OwnedResourceService):
    model = Playlist
    not_found_message = "Playlist not found or you are not allowed to modify it"

    async def _name_taken(
        self,
        owner_id: uuid.UUID,
        name: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> bool:
        conditions = [
            Playlist.owner_id == owner_id,
            func.lower(Playlist.name) == name.lower(),
        ]
        if exclude_id is not None:
            conditions.append(Playlist.id != exclude_id)
        return bool(await self.db.scalar(select(exists().where(*conditions))))

    async def _load(self, playlist_id: uuid.UUID) -> Optional[Playlist]:
        result = await self.db.execute(
            select(Playlist)
            .where(Playlist.id == playlist_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    # ─── CRUD ───────────────────────────────────────────

    async def create_playlist(
        self, owner_id: uuid.UUID, name: str, description: Optional[str]
    ) -> Playlist:
        if await self._name_taken(owner_id, name):
            raise Conflict("You already have a playlist with this name")

        playlist = Playlist(
            owner_id=owner_id,
            name=name,
            description=(description or "").strip(),
        )
        self.db.add(playlist)
        await self.db.commit()
        return await self._load(playlist.id)

    async def list_for_user(
        self, user_id: uuid.UUID, offset: int, limit: int
    ) -> tuple[list[Playlist], int]:
        found = await self.db.scalar(select(exists().where(User.id == user_id)))
        if not found:
            raise NotFound("User not found")

        total = await self.db.scalar(
            select(func.count()).select_from(Playlist).where(Playlist.owner_id == user_id)
        )
        result = await self.db.execute(
            select(Playlist)
            .where(Playlist.owner_id == user_id)
            .order_by(Playlist.created_at.desc(), Playlist.id)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def get_playlist(self, playlist_id: uuid.UUID, viewer_id: uuid.UUID) -> Playlist:
        """Owner-only read. Unlike mutations, a foreign owner gets 403 here."""
        playlist = await self._load(playlist_id)
        if not playlist:
            raise NotFound("Playlist not found")
        if playlist.owner_id != viewer_id:
            raise Forbidden("You are not authorized to view this playlist")
        return playlist

    async def update_playlist(
        self,
        playlist_id: uuid.UUID,
        owner_id: uuid.UUID,
        name: str,
        description: Optional[str],
    ) -> Playlist:
        if await self._name_taken(owner_id, name, exclude_id=playlist_id):
            raise Conflict("You already have a playlist with this name")

        await self._update_owned(
            playlist_id,
            owner_id,
            name=name,
            description=(description or "").strip(),
        )
        await self.db.commit()
        return await self._load(playlist_id)

    async def delete_playlist(self, playlist_id: uuid.UUID, owner_id: uuid.UUID) -> None:
        # Association rows go first; not every backend enforces ON DELETE CASCADE
        await self._lock_owned(playlist_id, owner_id)
        await self.db.execute(
            delete(playlist_videos).where(playlist_videos.c.playlist_id == playlist_id)
        )
        await self._delete_owned(playlist_id, owner_id)
        await self.db.commit()

    # ─── Membership ─────────────────────────────────────

    async def add_video(
        self, playlist_id: uuid.UUID, owner_id: uuid.UUID, video_id: uuid.UUID
    ) -> Playlist:
        found = await self.db.scalar(
            select(exists().where(Video.id == video_id, visible_to(owner_id)))
        )
        if not found:
            raise NotFound("Video not found")

        await self._lock_owned(playlist_id, owner_id)
        already = await self.db.scalar(
            select(
                exists().where(
                    playlist_videos.c.playlist_id == playlist_id,
                    playlist_videos.c.video_id == video_id,
                )
            )
        )
        if not already:
            await self.db.execute(
                insert(playlist_videos).values(playlist_id=playlist_id, video_id=video_id)
            )
        await self.db.commit()
        logger.info("playlist.video_added", playlist_id=str(playlist_id), video_id=str(video_id))
        return await self._load(playlist_id)

    async def remove_video(
        self, playlist_id: uuid.UUID, owner_id: uuid.UUID, video_id: uuid.UUID
    ) -> Playlist:
        await self._lock_owned(playlist_id, owner_id)
        await self.db.execute(
            delete(playlist_videos).where(
                playlist_videos.c.playlist_id == playlist_id,
                playlist_videos.c.video_id == video_id,
            )
        )
        await self.db.commit()
        return await self._load(playlist_id)
