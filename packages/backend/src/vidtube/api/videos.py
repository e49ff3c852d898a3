"""Videos API — browse, publish, edit, delete and watch videos."""

import uuid
from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.auth.dependencies import CurrentIdentity, get_current_user
from vidtube.db.engine import get_db
from vidtube.media.host import MediaHost, get_media_host
from vidtube.media.uploads import TempUploads
from vidtube.schemas.common import (
    MAX_PAGE,
    MAX_PAGE_SIZE,
    ApiResponse,
    DeletedResource,
    OwnerSummary,
    total_pages,
)
from vidtube.schemas.video import VideoPage, VideoQuery, VideoRead, WatchResult
from vidtube.services.video_service import VideoService

router = APIRouter(prefix="/videos")


def _svc(db: AsyncSession = Depends(get_db)) -> VideoService:
    return VideoService(db)


def video_query(
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    query: Optional[str] = Query(None, max_length=200),
    sort_by: Literal["created_at", "title", "views", "duration"] = Query("created_at"),
    sort_type: Literal["asc", "desc"] = Query("desc"),
    user_id: Optional[uuid.UUID] = Query(None),
) -> VideoQuery:
    return VideoQuery(
        page=page,
        limit=limit,
        query=query,
        sort_by=sort_by,
        sort_type=sort_type,
        user_id=user_id,
    )


@router.get("", response_model=ApiResponse[VideoPage])
async def list_videos(
    q: VideoQuery = Depends(video_query),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: VideoService = Depends(_svc),
):
    """Published videos plus the caller's own drafts. An empty page is still 200."""
    videos, total = await svc.list_videos(q, identity.user_id)
    return ApiResponse(
        data=VideoPage(
            total=total,
            page=q.page,
            limit=q.limit,
            total_pages=total_pages(total, q.limit),
            videos=[VideoRead.model_validate(v) for v in videos],
        ),
        message="Videos fetched successfully",
    )


@router.post("", response_model=ApiResponse[VideoRead], status_code=201)
async def publish_video(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    video_file: Optional[UploadFile] = File(None),
    thumbnail: Optional[UploadFile] = File(None),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: VideoService = Depends(_svc),
    media: MediaHost = Depends(get_media_host),
):
    async with TempUploads() as temp:
        video_path = await temp.save(video_file)
        thumbnail_path = await temp.save(thumbnail)
        video = await svc.publish(
            media,
            identity.user_id,
            title=title,
            description=description,
            video_path=video_path,
            thumbnail_path=thumbnail_path,
        )
    return ApiResponse(
        status_code=201,
        data=VideoRead.model_validate(video),
        message="Video published successfully",
    )


@router.get("/{video_id}", response_model=ApiResponse[VideoRead])
async def get_video(
    video_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: VideoService = Depends(_svc),
):
    video = await svc.get_video(video_id, viewer_id=identity.user_id)
    return ApiResponse(
        data=VideoRead.model_validate(video), message="Video fetched successfully"
    )


@router.patch("/{video_id}", response_model=ApiResponse[VideoRead])
async def update_video(
    video_id: uuid.UUID,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: VideoService = Depends(_svc),
    media: MediaHost = Depends(get_media_host),
):
    async with TempUploads() as temp:
        thumbnail_path = await temp.save(thumbnail)
        video = await svc.update_video(
            media,
            video_id,
            identity.user_id,
            title=title,
            description=description,
            thumbnail_path=thumbnail_path,
        )
    return ApiResponse(
        data=VideoRead.model_validate(video), message="Video updated successfully"
    )


@router.delete("/{video_id}", response_model=ApiResponse[DeletedResource])
async def delete_video(
    video_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: VideoService = Depends(_svc),
    media: MediaHost = Depends(get_media_host),
):
    await svc.delete_video(media, video_id, identity.user_id)
    return ApiResponse(
        data=DeletedResource(id=video_id), message="Video deleted successfully"
    )


@router.patch("/{video_id}/toggle-publish", response_model=ApiResponse[VideoRead])
async def toggle_publish(
    video_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: VideoService = Depends(_svc),
):
    video = await svc.toggle_publish(video_id, identity.user_id)
    state = "published" if video.is_published else "unpublished"
    return ApiResponse(
        data=VideoRead.model_validate(video), message=f"Video {state} successfully"
    )


@router.post("/{video_id}/watch", response_model=ApiResponse[WatchResult])
async def watch_video(
    video_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: VideoService = Depends(_svc),
):
    video = await svc.watch(video_id, identity.user_id)
    return ApiResponse(
        data=WatchResult(
            video_id=video.id,
            title=video.title,
            views=video.views,
            owner=OwnerSummary.model_validate(video.owner),
        ),
        message="Video added to watch history",
    )
