"""Comment service — comments on videos."""

import uuid

from sqlalchemy import exists, func, select

from vidtube.db.models import Comment, Video
from vidtube.errors import NotFound
from vidtube.services.ownership import OwnedResourceService
from vidtube.services.video_service import visible_to


class CommentService(OwnedResourceService):
    model = Comment
    not_found_message = "Comment not found or you are not allowed to modify it"

    async def _require_video(self, video_id: uuid.UUID, viewer_id: uuid.UUID) -> None:
        found = await self.db.scalar(
            select(exists().where(Video.id == video_id, visible_to(viewer_id)))
        )
        if not found:
            raise NotFound("Video not found")

    async def list_for_video(
        self, video_id: uuid.UUID, viewer_id: uuid.UUID, offset: int, limit: int
    ) -> tuple[list[Comment], int]:
        """Newest first."""
        await self._require_video(video_id, viewer_id)
        total = await self.db.scalar(
            select(func.count()).select_from(Comment).where(Comment.video_id == video_id)
        )
        result = await self.db.execute(
            select(Comment)
            .where(Comment.video_id == video_id)
            .order_by(Comment.created_at.desc(), Comment.id)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def get_comment(self, comment_id: uuid.UUID) -> Comment:
        result = await self.db.execute(
            select(Comment)
            .where(Comment.id == comment_id)
            .execution_options(populate_existing=True)
        )
        comment = result.scalars().first()
        if not comment:
            raise NotFound("Comment not found")
        return comment

    async def add_comment(
        self, video_id: uuid.UUID, owner_id: uuid.UUID, content: str
    ) -> Comment:
        await self._require_video(video_id, owner_id)
        comment = Comment(video_id=video_id, owner_id=owner_id, content=content)
        self.db.add(comment)
        await self.db.commit()
        return await self.get_comment(comment.id)

    async def update_comment(
        self, comment_id: uuid.UUID, owner_id: uuid.UUID, content: str
    ) -> Comment:
        await self._update_owned(comment_id, owner_id, content=content)
        await self.db.commit()
        return await self.get_comment(comment_id)

    async def delete_comment(self, comment_id: uuid.UUID, owner_id: uuid.UUID) -> None:
        await self._delete_owned(comment_id, owner_id)
        await self.db.commit()
