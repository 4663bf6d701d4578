"""
Health check endpoints.

Liveness reports the service name; readiness also verifies the catalog
tables can be queried.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardcatalog.config import settings
from cardcatalog.db.database import get_session
from cardcatalog.models.db import CardTypeDB

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    database: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe. Does not touch the database."""
    return HealthResponse(status="healthy", service=settings.app_name)


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HealthResponse:
    """
    Readiness probe.

    Returns 503 if the catalog schema cannot be queried.
    """
    try:
        await session.execute(select(CardTypeDB.id).limit(1))
        return HealthResponse(status="ready", service=settings.app_name, database="connected")
    except SQLAlchemyError:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(
            status="not ready", service=settings.app_name, database="disconnected"
        )
