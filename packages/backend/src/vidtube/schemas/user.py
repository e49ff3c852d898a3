"""Pydantic schemas for accounts, sessions and channels."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from vidtube.schemas.common import OwnerSummary


class LoginRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def require_identifier(self):
        if not (self.username or self.email):
            raise ValueError("username or email is required")
        return self


class RefreshRequest(BaseModel):
    refresh_token: Optional[str] = Field(None, alias="refreshToken")

    model_config = {"populate_by_name": True}


class ChangePasswordRequest(BaseModel):
    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8)


class UpdateAccountRequest(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)


class UserRead(BaseModel):
    """A user as returned by the API — never includes password or tokens."""

    id: uuid.UUID
    username: str
    email: str
    full_name: str
    avatar_url: str
    cover_image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResult(TokenPair):
    user: UserRead


class ChannelProfile(BaseModel):
    id: uuid.UUID
    username: str
    full_name: str
    email: str
    avatar_url: str
    cover_image_url: Optional[str] = None
    subscribers_count: int
    channels_subscribed_to_count: int
    is_subscribed: bool


class WatchedVideo(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    thumbnail_url: str
    video_url: str
    duration: str
    views: int
    owner: OwnerSummary

    model_config = {"from_attributes": True}
