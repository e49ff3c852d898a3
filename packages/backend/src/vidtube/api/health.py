"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running
and the database is reachable. Always 200; a broken dependency
shows up as status="degraded".
"""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube import __version__
from vidtube.db.engine import get_db
from vidtube.schemas.common import ApiResponse

logger = structlog.get_logger()

router = APIRouter()


@router.get("/health", response_model=ApiResponse[dict])
async def health_check(db: AsyncSession = Depends(get_db)):
    """Check server health and database connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except SQLAlchemyError as e:
        logger.warning("health.database_unreachable", error=str(e))
        checks["database"] = f"error: {e}"

    status = "healthy" if checks["database"] == "ok" else "degraded"
    return ApiResponse(data={"status": status, **checks}, message="OK")
