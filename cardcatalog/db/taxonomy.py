"""
Card type and subtype CRUD operations.

Types are the top of the taxonomy; every subtype hangs off exactly one type.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from cardcatalog.config import settings
from cardcatalog.db.database import flush_or_conflict
from cardcatalog.db.filters import paginate
from cardcatalog.models.catalog import (
    CardSubTypePatch,
    CardTypePatch,
    Pagination,
    SubTypeView,
    apply_patch,
)
from cardcatalog.models.db import CardDB, CardSubTypeDB, CardTypeDB
from cardcatalog.models.failure import InvalidArgumentError, NotFoundError

logger = logging.getLogger(__name__)

# --- Card Type Operations ---


async def get_type(session: AsyncSession, type_id: str) -> CardTypeDB | None:
    """Get a card type by id. Returns None if it does not exist."""
    result = await session.execute(select(CardTypeDB).where(CardTypeDB.id == type_id))
    return result.scalar_one_or_none()


async def require_type(session: AsyncSession, type_id: str) -> CardTypeDB:
    """Get a card type by id, raising NotFoundError if it does not exist."""
    card_type = await get_type(session, type_id)
    if card_type is None:
        raise NotFoundError(f"Card type with id {type_id} not found")
    return card_type


async def create_type(session: AsyncSession, name: str) -> CardTypeDB:
    """
    Create a new card type.

    Raises ConflictError if the name is already taken.
    """
    card_type = CardTypeDB(name=name)
    session.add(card_type)
    await flush_or_conflict(session, f"Card type '{name}' already exists")
    logger.info("Created card type %s (%s)", name, card_type.id)
    return card_type


async def list_types(
    session: AsyncSession, pagination: Pagination | None = None
) -> list[CardTypeDB]:
    """List card types ordered by id."""
    stmt = paginate(select(CardTypeDB), pagination or Pagination(), CardTypeDB.id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def update_type(session: AsyncSession, type_id: str, patch: CardTypePatch) -> CardTypeDB:
    """
    Merge supplied fields into an existing card type.

    Raises NotFoundError if the type does not exist, ConflictError on a
    duplicate name.
    """
    card_type = await require_type(session, type_id)
    apply_patch(card_type, patch.changes())
    await flush_or_conflict(session, f"Card type '{patch.name}' already exists")
    logger.info("Updated card type %s", type_id)
    return card_type


async def get_type_by_name(session: AsyncSession, name: str) -> CardTypeDB | None:
    """Get a card type by its unique name."""
    result = await session.execute(select(CardTypeDB).where(CardTypeDB.name == name))
    return result.scalar_one_or_none()


# --- Card Subtype Operations ---


async def get_sub_type(session: AsyncSession, sub_type_id: str) -> CardSubTypeDB | None:
    """Get a subtype by id, with its parent type loaded."""
    result = await session.execute(
        select(CardSubTypeDB)
        .where(CardSubTypeDB.id == sub_type_id)
        .options(joinedload(CardSubTypeDB.card_type))
    )
    return result.scalar_one_or_none()


async def require_sub_type(session: AsyncSession, sub_type_id: str) -> CardSubTypeDB:
    """Get a subtype by id, raising NotFoundError if it does not exist."""
    sub_type = await get_sub_type(session, sub_type_id)
    if sub_type is None:
        raise NotFoundError(f"Card subtype with id {sub_type_id} not found")
    return sub_type


async def create_sub_type(session: AsyncSession, name: str, type_id: str) -> CardSubTypeDB:
    """
    Create a subtype under an existing type.

    Raises NotFoundError (persisting nothing) if the parent type does not
    exist, ConflictError if the name is already taken.
    """
    card_type = await require_type(session, type_id)

    sub_type = CardSubTypeDB(name=name, card_type=card_type)
    session.add(sub_type)
    await flush_or_conflict(session, f"Card subtype '{name}' already exists")
    logger.info("Created card subtype %s under %s", name, card_type.name)
    return sub_type


async def list_sub_types(
    session: AsyncSession, pagination: Pagination | None = None
) -> list[CardSubTypeDB]:
    """List subtypes ordered by id, joined with their parent type."""
    stmt = paginate(
        select(CardSubTypeDB).options(joinedload(CardSubTypeDB.card_type)),
        pagination or Pagination(),
        CardSubTypeDB.id,
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def _check_cards_follow_move(
    session: AsyncSession, sub_type: CardSubTypeDB, card_type: CardTypeDB
) -> None:
    if not settings.enforce_subtype_match:
        return
    stranded = await session.scalar(
        select(func.count())
        .select_from(CardDB)
        .where(
            CardDB.card_sub_type_id == sub_type.id,
            CardDB.card_type_id != card_type.id,
            CardDB.deleted_at.is_(None),
        )
    )
    if stranded:
        raise InvalidArgumentError(
            f"Cannot move subtype '{sub_type.name}' to type '{card_type.name}': "
            f"{stranded} card(s) still use it under another type"
        )


async def update_sub_type(
    session: AsyncSession, sub_type_id: str, patch: CardSubTypePatch
) -> CardSubTypeDB:
    """
    Merge supplied fields into an existing subtype.

    A new parent type must exist, and live cards using the subtype must
    already carry that type.

    Raises:
        NotFoundError: If the subtype or the new type does not exist
        InvalidArgumentError: If the move would strand cards under another type
        ConflictError: On a duplicate name
    """
    sub_type = await require_sub_type(session, sub_type_id)

    if patch.type_id is not None:
        card_type = await require_type(session, patch.type_id)
        if card_type.id != sub_type.card_type_id:
            await _check_cards_follow_move(session, sub_type, card_type)
        sub_type.card_type = card_type

    apply_patch(sub_type, patch.changes())
    await flush_or_conflict(session, f"Card subtype '{patch.name}' already exists")
    logger.info("Updated card subtype %s", sub_type_id)
    return sub_type


async def get_sub_type_by_name(session: AsyncSession, name: str) -> CardSubTypeDB | None:
    """Get a subtype by its unique name, with its parent type loaded."""
    result = await session.execute(
        select(CardSubTypeDB)
        .where(CardSubTypeDB.name == name)
        .options(joinedload(CardSubTypeDB.card_type))
    )
    return result.scalar_one_or_none()


def sub_type_to_view(sub_type: CardSubTypeDB) -> SubTypeView:
    """Project a subtype joined with its parent type."""
    card_type = sub_type.card_type
    return SubTypeView(
        id=sub_type.id,
        type_id=card_type.id if card_type else None,
        type_name=card_type.name if card_type else None,
        name=sub_type.name,
        created_at=sub_type.created_at,
        updated_at=sub_type.updated_at,
    )
