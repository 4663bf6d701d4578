"""
Card subtype API endpoints.

Subtypes are always created under an existing card type.
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cardcatalog.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from cardcatalog.db import create_sub_type, list_sub_types, sub_type_to_view, update_sub_type
from cardcatalog.db.database import get_session
from cardcatalog.models.catalog import CardSubTypePatch, Pagination
from cardcatalog.models.db import CardSubTypeDB

router = APIRouter(prefix="/card-sub-types", tags=["card-sub-types"])


class SubTypeCreateRequest(BaseModel):
    """Request body for creating a subtype."""

    name: str = Field(..., min_length=2, max_length=50)
    type_id: UUID


class SubTypeUpdateRequest(BaseModel):
    """Request body for a partial subtype update."""

    name: str | None = Field(default=None, min_length=2, max_length=50)
    type_id: UUID | None = None


class SubTypeResponse(BaseModel):
    """Subtype joined with its parent type."""

    id: str
    type_id: str | None
    type_name: str | None
    name: str
    created_at: datetime
    updated_at: datetime


def _to_response(sub_type: CardSubTypeDB) -> SubTypeResponse:
    view = sub_type_to_view(sub_type)
    return SubTypeResponse(
        id=view.id,
        type_id=view.type_id,
        type_name=view.type_name,
        name=view.name,
        created_at=view.created_at,
        updated_at=view.updated_at,
    )


@router.post("", response_model=SubTypeResponse, status_code=status.HTTP_201_CREATED)
async def create_card_sub_type(
    request: SubTypeCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SubTypeResponse:
    """
    Create a subtype under an existing type.

    Returns 404 if the parent type does not exist, 409 on a duplicate name.
    """
    sub_type = await create_sub_type(session, request.name, str(request.type_id))
    return _to_response(sub_type)


@router.get("", response_model=list[SubTypeResponse])
async def list_card_sub_types(
    session: Annotated[AsyncSession, Depends(get_session)],
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[SubTypeResponse]:
    """List subtypes ordered by id, each with its parent type name."""
    sub_types = await list_sub_types(session, Pagination(limit=limit, offset=offset))
    return [_to_response(s) for s in sub_types]


@router.patch("/{sub_type_id}", response_model=SubTypeResponse)
async def update_card_sub_type(
    sub_type_id: UUID,
    request: SubTypeUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SubTypeResponse:
    """
    Update a subtype.

    Returns 404 if the subtype or the new parent type does not exist.
    """
    patch = CardSubTypePatch(
        name=request.name,
        type_id=str(request.type_id) if request.type_id else None,
    )
    sub_type = await update_sub_type(session, str(sub_type_id), patch)
    return _to_response(sub_type)
