"""Pydantic schemas for playlists."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from vidtube.schemas.common import OwnerSummary


class PlaylistBody(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Playlist name is required")
        return v


class PlaylistVideo(BaseModel):
    id: uuid.UUID
    title: str
    thumbnail_url: str
    duration: str
    views: int
    owner: OwnerSummary

    model_config = {"from_attributes": True}


class PlaylistRead(BaseModel):
    id: uuid.UUID
    name: str
    description: str
    owner: OwnerSummary
    videos: list[PlaylistVideo] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PlaylistPage(BaseModel):
    playlists: list[PlaylistRead]
    total_playlists: int
    current_page: int
    total_pages: int
