"""
Card type API endpoints.

Create, list and update the top level of the card taxonomy.
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardcatalog.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from cardcatalog.db import create_type, list_types, update_type
from cardcatalog.db.database import get_session
from cardcatalog.models.catalog import CardTypePatch, Pagination
from cardcatalog.models.db import CardTypeDB

router = APIRouter(prefix="/card-types", tags=["card-types"])


class CardTypeCreateRequest(BaseModel):
    """Request body for creating a card type."""

    name: str = Field(..., min_length=2, max_length=50)


class CardTypeUpdateRequest(BaseModel):
    """Request body for a partial card type update."""

    name: str | None = Field(default=None, min_length=2, max_length=50)


class CardTypeResponse(BaseModel):
    """Response model for a single card type."""

    id: str
    name: str
    created_at: datetime
    updated_at: datetime


def _to_response(card_type: CardTypeDB) -> CardTypeResponse:
    return CardTypeResponse(
        id=card_type.id,
        name=card_type.name,
        created_at=card_type.created_at,
        updated_at=card_type.updated_at,
    )


@router.post("", response_model=CardTypeResponse, status_code=status.HTTP_201_CREATED)
async def create_card_type(
    request: CardTypeCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardTypeResponse:
    """
    Create a card type.

    Returns 409 if the name is already taken.
    """
    card_type = await create_type(session, request.name)
    return _to_response(card_type)


@router.get("", response_model=list[CardTypeResponse])
async def list_card_types(
    session: Annotated[AsyncSession, Depends(get_session)],
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[CardTypeResponse]:
    """List card types ordered by id."""
    card_types = await list_types(session, Pagination(limit=limit, offset=offset))
    return [_to_response(t) for t in card_types]


@router.patch("/{type_id}", response_model=CardTypeResponse)
async def update_card_type(
    type_id: UUID,
    request: CardTypeUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardTypeResponse:
    """
    Update a card type.

    Returns 404 if the type does not exist.
    """
    card_type = await update_type(session, str(type_id), CardTypePatch(name=request.name))
    return _to_response(card_type)
