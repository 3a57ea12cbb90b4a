"""Health check endpoints."""

from typing import Annotated, Literal

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from src.config import Settings, get_settings
from src.infrastructure.database import get_database

logger = structlog.get_logger()
router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: Literal["healthy", "unhealthy"]
    version: str
    documents: int


@router.get("", response_model=HealthResponse)
async def health_check(
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """Report liveness, the app version and the number of stored documents.

    Only the metadata database is checked; the vector store and the model
    providers are external and checked lazily on first use.

    Raises:
        HTTPException: 503 if the database is unreachable.
    """
    try:
        db = get_database()
        row = await db.fetch_one("SELECT COUNT(*) AS count FROM documents")
    except Exception as e:
        logger.error("health_check_failed", error=str(e), error_type=type(e).__name__)
        raise HTTPException(
            status_code=503,
            detail=f"Service unhealthy: {type(e).__name__}",
        ) from e

    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        documents=int(row["count"]) if row else 0,
    )
