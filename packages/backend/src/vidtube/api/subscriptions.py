"""Subscriptions API — subscribe to channels and list both directions."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.pagination import page_params
from vidtube.auth.dependencies import CurrentIdentity, get_current_user
from vidtube.db.engine import get_db
from vidtube.schemas.common import ApiResponse, PageParams
from vidtube.schemas.engagement import (
    SubscribedChannelPage,
    SubscriberPage,
    SubscriptionToggle,
)
from vidtube.services.subscription_service import SubscriptionService

router = APIRouter(prefix="/subscriptions")


def _svc(db: AsyncSession = Depends(get_db)) -> SubscriptionService:
    return SubscriptionService(db)


@router.post("/channel/{channel_id}", response_model=ApiResponse[SubscriptionToggle])
async def toggle_subscription(
    channel_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: SubscriptionService = Depends(_svc),
):
    result = await svc.toggle(identity.user_id, channel_id)
    message = "Subscribed successfully" if result.subscribed else "Unsubscribed successfully"
    return ApiResponse(data=result, message=message)


@router.get(
    "/channel/{channel_id}/subscribers", response_model=ApiResponse[SubscriberPage]
)
async def channel_subscribers(
    channel_id: uuid.UUID,
    paging: PageParams = Depends(page_params),
    svc: SubscriptionService = Depends(_svc),
):
    page = await svc.list_subscribers(channel_id, paging.offset, paging.limit)
    return ApiResponse(data=page, message="Subscribers fetched successfully")


@router.get(
    "/subscriber/{subscriber_id}/channels",
    response_model=ApiResponse[SubscribedChannelPage],
)
async def subscribed_channels(
    subscriber_id: uuid.UUID,
    paging: PageParams = Depends(page_params),
    svc: SubscriptionService = Depends(_svc),
):
    page = await svc.list_subscribed_channels(subscriber_id, paging.offset, paging.limit)
    return ApiResponse(data=page, message="Subscribed channels fetched successfully")
