"""Subscription service — users subscribing to other users' channels."""

import uuid

import structlog
from sqlalchemy import delete, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.db.models import Subscription, User
from vidtube.errors import NotFound, ValidationFailed
from vidtube.schemas.common import OwnerSummary
from vidtube.schemas.engagement import (
    SubscribedChannel,
    SubscribedChannelPage,
    Subscriber,
    SubscriberPage,
    SubscriptionToggle,
)

logger = structlog.get_logger()


class SubscriptionService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _require_user(self, user_id: uuid.UUID, message: str) -> None:
        found = await self.db.scalar(select(exists().where(User.id == user_id)))
        if not found:
            raise NotFound(message)

    async def toggle(
        self, subscriber_id: uuid.UUID, channel_id: uuid.UUID
    ) -> SubscriptionToggle:
        if subscriber_id == channel_id:
            raise ValidationFailed("You cannot subscribe to your own channel")
        await self._require_user(channel_id, "Channel not found")

        result = await self.db.execute(
            delete(Subscription)
            .where(
                Subscription.subscriber_id == subscriber_id,
                Subscription.channel_id == channel_id,
            )
            .execution_options(synchronize_session=False)
        )
        subscribed = not result.rowcount
        if subscribed:
            self.db.add(Subscription(subscriber_id=subscriber_id, channel_id=channel_id))
        await self.db.commit()

        logger.info(
            "subscription.toggled",
            subscriber_id=str(subscriber_id),
            channel_id=str(channel_id),
            subscribed=subscribed,
        )
        return SubscriptionToggle(channel_id=channel_id, subscribed=subscribed)

    async def list_subscribers(
        self, channel_id: uuid.UUID, offset: int, limit: int
    ) -> SubscriberPage:
        await self._require_user(channel_id, "Channel not found")

        total = await self.db.scalar(
            select(func.count())
            .select_from(Subscription)
            .where(Subscription.channel_id == channel_id)
        )
        result = await self.db.execute(
            select(Subscription)
            .where(Subscription.channel_id == channel_id)
            .order_by(Subscription.created_at.desc(), Subscription.id)
            .offset(offset)
            .limit(limit)
        )
        subscribers = [
            Subscriber(
                subscriber=OwnerSummary.model_validate(s.subscriber),
                subscribed_at=s.created_at,
            )
            for s in result.scalars().all()
        ]
        return SubscriberPage(
            channel_id=channel_id,
            total_subscribers=total or 0,
            subscribers=subscribers,
        )

    async def list_subscribed_channels(
        self, subscriber_id: uuid.UUID, offset: int, limit: int
    ) -> SubscribedChannelPage:
        await self._require_user(subscriber_id, "Subscriber not found")

        total = await self.db.scalar(
            select(func.count())
            .select_from(Subscription)
            .where(Subscription.subscriber_id == subscriber_id)
        )
        result = await self.db.execute(
            select(Subscription)
            .where(Subscription.subscriber_id == subscriber_id)
            .order_by(Subscription.created_at.desc(), Subscription.id)
            .offset(offset)
            .limit(limit)
        )
        subs = list(result.scalars().all())

        counts: dict[uuid.UUID, int] = {}
        if subs:
            count_rows = await self.db.execute(
                select(Subscription.channel_id, func.count())
                .where(Subscription.channel_id.in_([s.channel_id for s in subs]))
                .group_by(Subscription.channel_id)
            )
            counts = {channel_id: n for channel_id, n in count_rows.all()}

        return SubscribedChannelPage(
            subscriber_id=subscriber_id,
            total_subscribed=total or 0,
            channels=[
                SubscribedChannel(
                    channel=OwnerSummary.model_validate(s.channel),
                    total_subscribers=counts.get(s.channel_id, 0),
                    subscribed_at=s.created_at,
                )
                for s in subs
            ],
        )
