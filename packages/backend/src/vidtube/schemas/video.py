"""Pydantic schemas for videos."""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from vidtube.schemas.common import MAX_PAGE, MAX_PAGE_SIZE, OwnerSummary


class VideoQuery(BaseModel):
    page: int = Field(1, ge=1, le=MAX_PAGE)
    limit: int = Field(10, ge=1, le=MAX_PAGE_SIZE)
    query: Optional[str] = Field(None, max_length=200)
    sort_by: Literal["created_at", "title", "views", "duration"] = "created_at"
    sort_type: Literal["asc", "desc"] = "desc"
    user_id: Optional[uuid.UUID] = None


class VideoRead(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    video_url: str
    thumbnail_url: str
    duration: str
    views: int
    is_published: bool
    owner: OwnerSummary
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class VideoPage(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int
    videos: list[VideoRead]


class WatchResult(BaseModel):
    video_id: uuid.UUID
    title: str
    views: int
    owner: OwnerSummary
