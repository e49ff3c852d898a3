"""Comments API — comments hanging off a video."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.pagination import page_params
from vidtube.auth.dependencies import CurrentIdentity, get_current_user
from vidtube.db.engine import get_db
from vidtube.schemas.common import ApiResponse, DeletedResource, PageParams, total_pages
from vidtube.schemas.content import CommentPage, CommentRead, ContentBody
from vidtube.services.comment_service import CommentService

router = APIRouter(prefix="/comments")


def _svc(db: AsyncSession = Depends(get_db)) -> CommentService:
    return CommentService(db)


@router.get("/video/{video_id}", response_model=ApiResponse[CommentPage])
async def list_comments(
    video_id: uuid.UUID,
    paging: PageParams = Depends(page_params),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: CommentService = Depends(_svc),
):
    comments, total = await svc.list_for_video(
        video_id, identity.user_id, paging.offset, paging.limit
    )
    return ApiResponse(
        data=CommentPage(
            comments=[CommentRead.model_validate(c) for c in comments],
            total_comments=total,
            current_page=paging.page,
            total_pages=total_pages(total, paging.limit),
        ),
        message="Comments fetched successfully",
    )


@router.post("/video/{video_id}", response_model=ApiResponse[CommentRead], status_code=201)
async def add_comment(
    video_id: uuid.UUID,
    body: ContentBody,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: CommentService = Depends(_svc),
):
    comment = await svc.add_comment(video_id, identity.user_id, body.content)
    return ApiResponse(
        status_code=201,
        data=CommentRead.model_validate(comment),
        message="Comment added successfully",
    )


@router.patch("/{comment_id}", response_model=ApiResponse[CommentRead])
async def update_comment(
    comment_id: uuid.UUID,
    body: ContentBody,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: CommentService = Depends(_svc),
):
    comment = await svc.update_comment(comment_id, identity.user_id, body.content)
    return ApiResponse(
        data=CommentRead.model_validate(comment),
        message="Comment updated successfully",
    )


@router.delete("/{comment_id}", response_model=ApiResponse[DeletedResource])
async def delete_comment(
    comment_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: CommentService = Depends(_svc),
):
    await svc.delete_comment(comment_id, identity.user_id)
    return ApiResponse(
        data=DeletedResource(id=comment_id), message="Comment deleted successfully"
    )
