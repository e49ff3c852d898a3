"""Shared query-parameter dependencies."""

from fastapi import Query

from vidtube.schemas.common import MAX_PAGE, MAX_PAGE_SIZE, PageParams


def page_params(
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
) -> PageParams:
    return PageParams(page=page, limit=limit)
