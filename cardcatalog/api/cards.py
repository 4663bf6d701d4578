"""
Card API endpoints.

Provides create, filtered listing, single lookup, partial update and
soft delete for catalog cards.
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardcatalog.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from cardcatalog.db import (
    card_to_view,
    create_card,
    find_card,
    list_cards,
    soft_delete_card,
    update_card,
)
from cardcatalog.db.database import get_session
from cardcatalog.models.catalog import (
    CardDraft,
    CardFilter,
    CardPatch,
    Pagination,
    StatisticsPatch,
)
from cardcatalog.models.db import CardDB

router = APIRouter(prefix="/cards", tags=["cards"])


class StatisticsRequest(BaseModel):
    """Attack / defense / stars, each optional and at least 1."""

    attack: int | None = Field(default=None, ge=1)
    defense: int | None = Field(default=None, ge=1)
    stars: int | None = Field(default=None, ge=1)

    def to_patch(self) -> StatisticsPatch:
        return StatisticsPatch(attack=self.attack, defense=self.defense, stars=self.stars)


class CardCreateRequest(BaseModel):
    """Request body for creating a card."""

    name: str = Field(..., min_length=2, max_length=50)
    code: str = Field(..., min_length=7, max_length=7)
    description: str = Field(..., min_length=5, max_length=255)
    image_url: str | None = Field(default=None, min_length=5, max_length=255)
    type_id: UUID
    sub_type_id: UUID
    statistics: StatisticsRequest | None = None


class CardUpdateRequest(BaseModel):
    """Request body for a partial card update."""

    name: str | None = Field(default=None, min_length=2, max_length=50)
    code: str | None = Field(default=None, min_length=7, max_length=7)
    description: str | None = Field(default=None, min_length=5, max_length=255)
    image_url: str | None = Field(default=None, min_length=5, max_length=255)
    type_id: UUID | None = None
    sub_type_id: UUID | None = None
    statistics: StatisticsRequest | None = None


class StatisticsResponse(BaseModel):
    id: str
    attack: int | None = None
    defense: int | None = None
    stars: int | None = None


class CardResponse(BaseModel):
    """Flat card view with taxonomy names and nested statistics."""

    id: str
    name: str
    code: str
    description: str
    image_url: str | None = None
    type_id: str | None = None
    type_name: str | None = None
    sub_type_id: str | None = None
    sub_type_name: str | None = None
    statistics: StatisticsResponse | None = None
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None


class DeleteResponse(BaseModel):
    """Confirmation of a soft delete."""

    message: str
    deleted_at: str


def _to_response(card: CardDB) -> CardResponse:
    view = card_to_view(card)
    statistics = None
    if view.statistics is not None:
        statistics = StatisticsResponse(
            id=view.statistics.id,
            attack=view.statistics.attack,
            defense=view.statistics.defense,
            stars=view.statistics.stars,
        )
    return CardResponse(
        id=view.id,
        name=view.name,
        code=view.code,
        description=view.description,
        image_url=view.image_url,
        type_id=view.type_id,
        type_name=view.type_name,
        sub_type_id=view.sub_type_id,
        sub_type_name=view.sub_type_name,
        statistics=statistics,
        created_at=view.created_at,
        updated_at=view.updated_at,
        deleted_at=view.deleted_at,
    )


def _uuid_str(value: UUID | None) -> str | None:
    return str(value) if value is not None else None


@router.post("", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def create_catalog_card(
    request: CardCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardResponse:
    """
    Create a card, with statistics when supplied.

    Returns 404 if the type or subtype does not exist, 400 if the subtype
    belongs to another type, 409 on a duplicate name or code.
    """
    draft = CardDraft(
        name=request.name,
        code=request.code,
        description=request.description,
        image_url=request.image_url,
        type_id=str(request.type_id),
        sub_type_id=str(request.sub_type_id),
        statistics=request.statistics.to_patch() if request.statistics else None,
    )
    card = await create_card(session, draft)
    return _to_response(card)


@router.get("", response_model=list[CardResponse])
async def list_catalog_cards(
    session: Annotated[AsyncSession, Depends(get_session)],
    id: UUID | None = None,
    name: str | None = None,
    type_id: UUID | None = None,
    sub_type_id: UUID | None = None,
    stars: str | None = None,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[CardResponse]:
    """
    List live cards matching any combination of filters.

    Omitted filters are ignored. Results are ordered by id.
    """
    card_filter = CardFilter(
        id=_uuid_str(id),
        name=name,
        type_id=_uuid_str(type_id),
        sub_type_id=_uuid_str(sub_type_id),
        stars=stars,
        pagination=Pagination(limit=limit, offset=offset),
    )
    cards = await list_cards(session, card_filter)
    return [_to_response(c) for c in cards]


@router.get("/find", response_model=CardResponse)
async def find_catalog_card(
    session: Annotated[AsyncSession, Depends(get_session)],
    id: UUID | None = None,
    name: str | None = None,
    stars: str | None = None,
) -> CardResponse:
    """
    Find one live card by id, name or stars.

    Returns 400 when no filter is given, 404 when nothing matches.
    """
    card = await find_card(session, CardFilter(id=_uuid_str(id), name=name, stars=stars))
    return _to_response(card)


@router.patch("/{card_id}", response_model=CardResponse)
async def update_catalog_card(
    card_id: UUID,
    request: CardUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardResponse:
    """
    Partially update a card and its statistics.

    Returns 404 if the card does not exist, 400 when patching statistics
    of a card that has none.
    """
    patch = CardPatch(
        name=request.name,
        code=request.code,
        description=request.description,
        image_url=request.image_url,
        type_id=_uuid_str(request.type_id),
        sub_type_id=_uuid_str(request.sub_type_id),
        statistics=request.statistics.to_patch() if request.statistics else None,
    )
    card = await update_card(session, str(card_id), patch)
    return _to_response(card)


@router.delete("/{card_id}", response_model=DeleteResponse)
async def delete_catalog_card(
    card_id: UUID,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeleteResponse:
    """
    Soft delete a card.

    Returns 404 if the card does not exist or was already deleted.
    """
    receipt = await soft_delete_card(session, str(card_id))
    return DeleteResponse(message=receipt.message, deleted_at=receipt.deleted_at)
