"""Pydantic schemas for comments and tweets.

Learn: Both are short text owned by a user; they share the same
create/update body and differ only in what they hang off.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from vidtube.schemas.common import OwnerSummary


class ContentBody(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)

    @field_validator("content")
    @classmethod
    def strip_and_require(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("content cannot be empty")
        return v


class CommentRead(BaseModel):
    id: uuid.UUID
    video_id: uuid.UUID
    content: str
    owner: OwnerSummary
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CommentPage(BaseModel):
    comments: list[CommentRead]
    total_comments: int
    current_page: int
    total_pages: int


class TweetRead(BaseModel):
    id: uuid.UUID
    content: str
    owner: OwnerSummary
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TweetPage(BaseModel):
    tweets: list[TweetRead]
    total_tweets: int
    current_page: int
    total_pages: int
