"""Pydantic schemas for likes and subscriptions."""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from vidtube.schemas.common import OwnerSummary


class LikeToggle(BaseModel):
    target_id: uuid.UUID
    target_type: Literal["video", "comment", "tweet"]
    action: Literal["liked", "unliked"]


class LikedVideo(BaseModel):
    liked_at: datetime
    video_id: uuid.UUID
    title: str
    thumbnail_url: str
    duration: str
    views: int
    owner: OwnerSummary


class LikedVideos(BaseModel):
    total_liked_videos: int
    videos: list[LikedVideo]


class SubscriptionToggle(BaseModel):
    channel_id: uuid.UUID
    subscribed: bool


class Subscriber(BaseModel):
    subscriber: OwnerSummary
    subscribed_at: datetime


class SubscriberPage(BaseModel):
    channel_id: uuid.UUID
    total_subscribers: int
    subscribers: list[Subscriber]


class SubscribedChannel(BaseModel):
    channel: OwnerSummary
    total_subscribers: int
    subscribed_at: datetime


class SubscribedChannelPage(BaseModel):
    subscriber_id: uuid.UUID
    total_subscribed: int
    channels: list[SubscribedChannel]
