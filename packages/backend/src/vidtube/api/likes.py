"""Likes API — toggle likes and list liked videos."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.auth.dependencies import CurrentIdentity, get_current_user
from vidtube.db.engine import get_db
from vidtube.schemas.common import ApiResponse
from vidtube.schemas.engagement import LikedVideos, LikeToggle
from vidtube.services.like_service import LikeService

router = APIRouter(prefix="/likes")


def _svc(db: AsyncSession = Depends(get_db)) -> LikeService:
    return LikeService(db)


async def _toggle(
    svc: LikeService, target_type: str, target_id: uuid.UUID, user_id: uuid.UUID
) -> ApiResponse[LikeToggle]:
    result = await svc.toggle(target_type, target_id, user_id)
    return ApiResponse(
        data=result,
        message=f"{target_type.capitalize()} {result.action} successfully",
    )


@router.post("/video/{video_id}", response_model=ApiResponse[LikeToggle])
async def toggle_video_like(
    video_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: LikeService = Depends(_svc),
):
    return await _toggle(svc, "video", video_id, identity.user_id)


@router.post("/comment/{comment_id}", response_model=ApiResponse[LikeToggle])
async def toggle_comment_like(
    comment_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: LikeService = Depends(_svc),
):
    return await _toggle(svc, "comment", comment_id, identity.user_id)


@router.post("/tweet/{tweet_id}", response_model=ApiResponse[LikeToggle])
async def toggle_tweet_like(
    tweet_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: LikeService = Depends(_svc),
):
    return await _toggle(svc, "tweet", tweet_id, identity.user_id)


@router.get("/videos", response_model=ApiResponse[LikedVideos])
async def liked_videos(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: LikeService = Depends(_svc),
):
    videos = await svc.liked_videos(identity.user_id)
    return ApiResponse(
        data=LikedVideos(total_liked_videos=len(videos), videos=videos),
        message="Liked videos fetched successfully",
    )
