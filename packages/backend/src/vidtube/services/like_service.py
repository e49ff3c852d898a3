"""Like service — toggling likes on videos, comments and tweets.

Learn: A toggle is "delete my like if it exists, otherwise create it". The
delete is tried first as a single filtered statement; only when it matched
nothing do we insert. The unique constraints on (liked_by, target) stop
two racing inserts from producing a double like.
"""

import uuid

import structlog
from sqlalchemy import delete, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.models import Comment, Like, Tweet, Video
from vidtube.errors import NotFound
from vidtube.schemas.common import OwnerSummary
from vidtube.schemas.engagement import LikedVideo, LikeToggle
from vidtube.services.video_service import visible_to

logger = structlog.get_logger()

# target_type -> (model, Like column)
_TARGETS = {
    "video": (Video, Like.video_id),
    "comment": (Comment, Like.comment_id),
    "tweet": (Tweet, Like.tweet_id),
}


class LikeService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def toggle(
        self, target_type: str, target_id: uuid.UUID, user_id: uuid.UUID
    ) -> LikeToggle:
        model, column = _TARGETS[target_type]
        conditions = [model.id == target_id]
        if model is Video:
            conditions.append(visible_to(user_id))
        found = await self.db.scalar(select(exists().where(*conditions)))
        if not found:
            raise NotFound(f"{target_type.capitalize()} not found")

        result = await self.db.execute(
            delete(Like)
            .where(Like.liked_by == user_id, column == target_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            action = "unliked"
        else:
            self.db.add(Like(liked_by=user_id, **{column.key: target_id}))
            action = "liked"
        await self.db.commit()

        logger.info(
            "like.toggled",
            target_type=target_type,
            target_id=str(target_id),
            user_id=str(user_id),
            action=action,
        )
        return LikeToggle(target_id=target_id, target_type=target_type, action=action)

    async def liked_videos(self, user_id: uuid.UUID) -> list[LikedVideo]:
        """Videos the user liked, most recently liked first."""
        result = await self.db.execute(
            select(Like.created_at, Video)
            .join(Video, Like.video_id == Video.id)
            .where(Like.liked_by == user_id, visible_to(user_id))
            .order_by(Like.created_at.desc())
        )
        return [
            LikedVideo(
                liked_at=liked_at,
                video_id=video.id,
                title=video.title,
                thumbnail_url=video.thumbnail_url,
                duration=video.duration,
                views=video.views,
                owner=OwnerSummary.model_validate(video.owner),
            )
            for liked_at, video in result.all()
        ]
