"""Tweets API — short posts on a user's channel."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.pagination import page_params
from vidtube.auth.dependencies import CurrentIdentity, get_current_user
from vidtube.db.engine import get_db
from vidtube.schemas.common import ApiResponse, DeletedResource, PageParams, total_pages
from vidtube.schemas.content import ContentBody, TweetPage, TweetRead
from vidtube.services.tweet_service import TweetService

router = APIRouter(prefix="/tweets")


def _svc(db: AsyncSession = Depends(get_db)) -> TweetService:
    return TweetService(db)


@router.post("", response_model=ApiResponse[TweetRead], status_code=201)
async def create_tweet(
    body: ContentBody,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TweetService = Depends(_svc),
):
    tweet = await svc.create_tweet(identity.user_id, body.content)
    return ApiResponse(
        status_code=201,
        data=TweetRead.model_validate(tweet),
        message="Tweet created successfully",
    )


@router.get("/user/{user_id}", response_model=ApiResponse[TweetPage])
async def list_user_tweets(
    user_id: uuid.UUID,
    paging: PageParams = Depends(page_params),
    svc: TweetService = Depends(_svc),
):
    tweets, total = await svc.list_for_user(user_id, paging.offset, paging.limit)
    return ApiResponse(
        data=TweetPage(
            tweets=[TweetRead.model_validate(t) for t in tweets],
            total_tweets=total,
            current_page=paging.page,
            total_pages=total_pages(total, paging.limit),
        ),
        message="Tweets fetched successfully",
    )


@router.patch("/{tweet_id}", response_model=ApiResponse[TweetRead])
async def update_tweet(
    tweet_id: uuid.UUID,
    body: ContentBody,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TweetService = Depends(_svc),
):
    tweet = await svc.update_tweet(tweet_id, identity.user_id, body.content)
    return ApiResponse(
        data=TweetRead.model_validate(tweet), message="Tweet updated successfully"
    )


@router.delete("/{tweet_id}", response_model=ApiResponse[DeletedResource])
async def delete_tweet(
    tweet_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TweetService = Depends(_svc),
):
    await svc.delete_tweet(tweet_id, identity.user_id)
    return ApiResponse(
        data=DeletedResource(id=tweet_id), message="Tweet deleted successfully"
    )
