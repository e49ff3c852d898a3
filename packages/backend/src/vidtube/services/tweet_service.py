"""Tweet service — short text posts on a user's channel."""

import uuid

from sqlalchemy import exists, func, select

from vidtube.db.models import Tweet, User
from vidtube.errors import NotFound
from vidtube.services.ownership import OwnedResourceService


class TweetService(OwnedResourceService):
    model = Tweet
    not_found_message = "Tweet not found or you are not allowed to modify it"

    async def get_tweet(self, tweet_id: uuid.UUID) -> Tweet:
        result = await self.db.execute(
            select(Tweet)
            .where(Tweet.id == tweet_id)
            .execution_options(populate_existing=True)
        )
        tweet = result.scalars().first()
        if not tweet:
            raise NotFound("Tweet not found")
        return tweet

    async def create_tweet(self, owner_id: uuid.UUID, content: str) -> Tweet:
        tweet = Tweet(owner_id=owner_id, content=content)
        self.db.add(tweet)
        await self.db.commit()
        return await self.get_tweet(tweet.id)

    async def list_for_user(
        self, user_id: uuid.UUID, offset: int, limit: int
    ) -> tuple[list[Tweet], int]:
        found = await self.db.scalar(select(exists().where(User.id == user_id)))
        if not found:
            raise NotFound("User not found")

        total = await self.db.scalar(
            select(func.count()).select_from(Tweet).where(Tweet.owner_id == user_id)
        )
        result = await self.db.execute(
            select(Tweet)
            .where(Tweet.owner_id == user_id)
            .order_by(Tweet.created_at.desc(), Tweet.id)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def update_tweet(
        self, tweet_id: uuid.UUID, owner_id: uuid.UUID, content: str
    ) -> Tweet:
        await self._update_owned(tweet_id, owner_id, content=content)
        await self.db.commit()
        return await self.get_tweet(tweet_id)

    async def delete_tweet(self, tweet_id: uuid.UUID, owner_id: uuid.UUID) -> None:
        await self._delete_owned(tweet_id, owner_id)
        await self.db.commit()
