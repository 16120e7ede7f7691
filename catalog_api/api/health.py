"""Health check endpoints.

Provides endpoints for monitoring service health and readiness.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.infrastructure.config import settings
from catalog_api.infrastructure.database import get_session

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name and version.
    """
    return HealthResponse(
        status="healthy",
        service="catalog-api",
        version=settings.api_version,
    )


@router.get("/ready")
async def readiness_check(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> dict[str, str]:
    """Check if service is ready to accept requests.

    Runs a trivial query so a missing database fails the probe.

    Returns:
        Readiness status.
    """
    await session.execute(text("SELECT 1"))
    return {"status": "ready"}
