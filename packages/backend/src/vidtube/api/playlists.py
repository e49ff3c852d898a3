"""Playlists API — owner-curated lists of videos.

Reads are owner-only (403 for someone else's playlist). Mutations are
owner-checked inside the write, so a stranger gets 404.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.pagination import page_params
from vidtube.auth.dependencies import CurrentIdentity, get_current_user
from vidtube.db.engine import get_db
from vidtube.schemas.common import ApiResponse, DeletedResource, PageParams, total_pages
from vidtube.schemas.playlist import PlaylistBody, PlaylistPage, PlaylistRead
from vidtube.services.playlist_service import PlaylistService

router = APIRouter(prefix="/playlists")


def _svc(db: AsyncSession = Depends(get_db)) -> PlaylistService:
    return PlaylistService(db)


@router.post("", response_model=ApiResponse[PlaylistRead], status_code=201)
async def create_playlist(
    body: PlaylistBody,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: PlaylistService = Depends(_svc),
):
    playlist = await svc.create_playlist(identity.user_id, body.name, body.description)
    return ApiResponse(
        status_code=201,
        data=PlaylistRead.model_validate(playlist),
        message="Playlist created successfully",
    )


@router.get("/user/{user_id}", response_model=ApiResponse[PlaylistPage])
async def list_user_playlists(
    user_id: uuid.UUID,
    paging: PageParams = Depends(page_params),
    svc: PlaylistService = Depends(_svc),
):
    playlists, total = await svc.list_for_user(user_id, paging.offset, paging.limit)
    return ApiResponse(
        data=PlaylistPage(
            playlists=[PlaylistRead.model_validate(p) for p in playlists],
            total_playlists=total,
            current_page=paging.page,
            total_pages=total_pages(total, paging.limit),
        ),
        message="Playlists fetched successfully",
    )


@router.get("/{playlist_id}", response_model=ApiResponse[PlaylistRead])
async def get_playlist(
    playlist_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: PlaylistService = Depends(_svc),
):
    playlist = await svc.get_playlist(playlist_id, identity.user_id)
    return ApiResponse(
        data=PlaylistRead.model_validate(playlist),
        message="Playlist fetched successfully",
    )


@router.patch("/{playlist_id}", response_model=ApiResponse[PlaylistRead])
async def update_playlist(
    playlist_id: uuid.UUID,
    body: PlaylistBody,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: PlaylistService = Depends(_svc),
):
    playlist = await svc.update_playlist(
        playlist_id, identity.user_id, body.name, body.description
    )
    return ApiResponse(
        data=PlaylistRead.model_validate(playlist),
        message="Playlist updated successfully",
    )


@router.delete("/{playlist_id}", response_model=ApiResponse[DeletedResource])
async def delete_playlist(
    playlist_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: PlaylistService = Depends(_svc),
):
    await svc.delete_playlist(playlist_id, identity.user_id)
    return ApiResponse(
        data=DeletedResource(id=playlist_id), message="Playlist deleted successfully"
    )


@router.post("/{playlist_id}/videos/{video_id}", response_model=ApiResponse[PlaylistRead])
async def add_video(
    playlist_id: uuid.UUID,
    video_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: PlaylistService = Depends(_svc),
):
    playlist = await svc.add_video(playlist_id, identity.user_id, video_id)
    return ApiResponse(
        data=PlaylistRead.model_validate(playlist),
        message="Video added to playlist successfully",
    )


@router.delete(
    "/{playlist_id}/videos/{video_id}", response_model=ApiResponse[PlaylistRead]
)
async def remove_video(
    playlist_id: uuid.UUID,
    video_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: PlaylistService = Depends(_svc),
):
    playlist = await svc.remove_video(playlist_id, identity.user_id, video_id)
    return ApiResponse(
        data=PlaylistRead.model_validate(playlist),
        message="Video removed from playlist successfully",
    )
