"""Shared schemas — the response envelope, pagination, owner summaries.

Learn: Every successful response is wrapped in ApiResponse so clients can
rely on one shape: {"status_code", "data", "message", "success"}. Errors
use the same keys (see vidtube.errors) with success=false.
"""

import uuid
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field, computed_field

T = TypeVar("T")

MAX_PAGE_SIZE = 100
MAX_PAGE = 1_000_000


class ApiResponse(BaseModel, Generic[T]):
    status_code: int = 200
    data: T
    message: str = "Success"

    @computed_field
    @property
    def success(self) -> bool:
        return self.status_code < 400


class PageParams(BaseModel):
    page: int = Field(1, ge=1, le=MAX_PAGE)
    limit: int = Field(10, ge=1, le=MAX_PAGE_SIZE)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def total_pages(total: int, limit: int) -> int:
    return (total + limit - 1) // limit if limit else 0


class OwnerSummary(BaseModel):
    """The public slice of a user shown next to content they own."""

    id: uuid.UUID
    username: str
    avatar_url: Optional[str] = None

    model_config = {"from_attributes": True}


class DeletedResource(BaseModel):
    id: uuid.UUID
