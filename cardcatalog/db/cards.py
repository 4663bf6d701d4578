"""
Card CRUD operations.

Cards reference a type and a subtype and own at most one statistics record.
Every read spells out its load scope: type, subtype and statistics are joined
explicitly rather than lazy-loaded.
"""

import logging

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager, joinedload

from cardcatalog.config import settings
from cardcatalog.db.database import flush_or_conflict
from cardcatalog.db.filters import card_filter_clauses, paginate, requires_statistics_join
from cardcatalog.db.statistics import create_statistics, statistics_to_view, update_statistics
from cardcatalog.db.taxonomy import require_sub_type, require_type
from cardcatalog.models.catalog import (
    CardDraft,
    CardFilter,
    CardPatch,
    CardView,
    DeletionReceipt,
    Pagination,
    apply_patch,
)
from cardcatalog.models.db import CardDB, CardSubTypeDB, CardTypeDB, utcnow
from cardcatalog.models.failure import InvalidArgumentError, NotFoundError

logger = logging.getLogger(__name__)


def _card_select(card_filter: CardFilter) -> Select[tuple[CardDB]]:
    """SELECT for cards matching a filter, with type, subtype and statistics joined."""
    stmt = select(CardDB).options(
        joinedload(CardDB.card_type),
        joinedload(CardDB.card_sub_type),
    )

    # Inner join when statistics take part in the predicate
    if requires_statistics_join(card_filter):
        stmt = stmt.join(CardDB.statistics)
    else:
        stmt = stmt.outerjoin(CardDB.statistics)
    stmt = stmt.options(contains_eager(CardDB.statistics))

    clauses = card_filter_clauses(card_filter)
    if clauses:
        stmt = stmt.where(*clauses)
    return stmt


def check_taxonomy(card_type: CardTypeDB, sub_type: CardSubTypeDB) -> None:
    """
    Ensure a subtype belongs to the type it is paired with.

    Raises InvalidArgumentError on a mismatch (when enforcement is enabled).
    """
    if not settings.enforce_subtype_match:
        return
    if sub_type.card_type_id != card_type.id:
        raise InvalidArgumentError(
            f"Subtype '{sub_type.name}' does not belong to type '{card_type.name}'",
            detail=f"sub_type.type_id={sub_type.card_type_id} type_id={card_type.id}",
        )


async def _reload_card(session: AsyncSession, card_id: str) -> CardDB:
    """Re-read a card so the returned object reflects flushed, joined state."""
    result = await session.execute(
        _card_select(CardFilter(id=card_id, include_deleted=True)).execution_options(
            populate_existing=True
        )
    )
    card = result.scalar_one_or_none()
    if card is None:
        raise NotFoundError(f'Card with id "{card_id}" not found')
    return card


# --- Reads ---


async def get_card(
    session: AsyncSession, card_id: str, include_deleted: bool = False
) -> CardDB | None:
    """
    Get a card by id with type, subtype and statistics loaded.

    Soft-deleted cards are treated as missing unless include_deleted is set.
    """
    result = await session.execute(
        _card_select(CardFilter(id=card_id, include_deleted=include_deleted))
    )
    return result.scalar_one_or_none()


async def get_card_by_code(session: AsyncSession, code: str) -> CardDB | None:
    """Get a card, soft-deleted or not, by its unique code."""
    result = await session.execute(select(CardDB).where(CardDB.code == code))
    return result.scalar_one_or_none()


async def list_cards(session: AsyncSession, card_filter: CardFilter | None = None) -> list[CardDB]:
    """
    List cards matching a sparse filter, ordered by id.

    Soft-deleted cards are excluded unless the filter includes them.
    """
    card_filter = card_filter or CardFilter()
    stmt = paginate(_card_select(card_filter), card_filter.pagination, CardDB.id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def find_card(session: AsyncSession, card_filter: CardFilter) -> CardDB:
    """
    Find a single live card by id, name or star count.

    Raises:
        InvalidArgumentError: If none of id, name or stars is supplied
        NotFoundError: If no card matches
    """
    if not card_filter.has_lookup_key():
        raise InvalidArgumentError("At least one valid filter must be provided")

    lookup = CardFilter(
        id=card_filter.id,
        name=card_filter.name,
        stars=card_filter.stars,
        include_deleted=card_filter.include_deleted,
    )
    stmt = paginate(_card_select(lookup), Pagination(limit=1), CardDB.id)
    result = await session.execute(stmt)
    card = result.scalars().first()
    if card is None:
        raise NotFoundError("Card not found with the provided filters")
    return card


# --- Mutations ---


async def create_card(session: AsyncSession, draft: CardDraft) -> CardDB:
    """
    Create a card, and its statistics when supplied.

    Both taxonomy references must exist and agree with each other.
    Returns the card re-read with type, subtype and statistics joined.

    Raises:
        NotFoundError: If the type or subtype does not exist
        InvalidArgumentError: If the subtype belongs to another type
        ConflictError: If the name or code is already taken
    """
    card_type = await require_type(session, draft.type_id)
    sub_type = await require_sub_type(session, draft.sub_type_id)
    check_taxonomy(card_type, sub_type)

    card = CardDB(
        name=draft.name,
        code=draft.code,
        description=draft.description,
        image_url=draft.image_url,
        card_type=card_type,
        card_sub_type=sub_type,
    )
    session.add(card)
    await flush_or_conflict(
        session, f"A card named '{draft.name}' or with code '{draft.code}' already exists"
    )

    if draft.statistics is not None:
        await create_statistics(session, card, draft.statistics)

    logger.info("Created card %s (%s)", draft.name, card.id)
    return await _reload_card(session, card.id)


async def update_card(session: AsyncSession, card_id: str, patch: CardPatch) -> CardDB:
    """
    Merge a partial update into a card and its statistics.

    A statistics patch is only accepted when the card already has a
    statistics record; updates never create one.

    Raises:
        NotFoundError: If the card, or a newly referenced type/subtype, does not exist
        InvalidArgumentError: On a statistics patch for a card without statistics,
            or a type/subtype mismatch
        ConflictError: If the new name or code is already taken
    """
    card = await get_card(session, card_id)
    if card is None:
        raise NotFoundError(f'Card with id "{card_id}" not found')

    if patch.statistics is not None and card.statistics is None:
        raise InvalidArgumentError(f'Statistics for card with id "{card_id}" do not exist')

    card_type = card.card_type
    sub_type = card.card_sub_type
    if patch.type_id is not None:
        card_type = await require_type(session, patch.type_id)
    if patch.sub_type_id is not None:
        sub_type = await require_sub_type(session, patch.sub_type_id)
    if patch.type_id is not None or patch.sub_type_id is not None:
        check_taxonomy(card_type, sub_type)

    apply_patch(card, patch.changes())
    card.card_type = card_type
    card.card_sub_type = sub_type
    await flush_or_conflict(session, f'Card "{card_id}" conflicts with an existing name or code')

    if patch.statistics is not None and card.statistics is not None:
        await update_statistics(session, card.statistics.id, patch.statistics)

    logger.info("Updated card %s", card_id)
    return await _reload_card(session, card_id)


async def soft_delete_card(session: AsyncSession, card_id: str) -> DeletionReceipt:
    """
    Mark a card as deleted; the row and its statistics are retained.

    Raises NotFoundError if the card does not exist or is already deleted.
    """
    card = await get_card(session, card_id)
    if card is None:
        raise NotFoundError(f'Card with id "{card_id}" not found')

    deleted_at = utcnow()
    card.deleted_at = deleted_at
    await session.flush()

    logger.info("Soft deleted card %s", card_id)
    return DeletionReceipt(
        message=f"Card with id {card_id} has been soft deleted successfully",
        deleted_at=deleted_at.isoformat(),
    )


async def hard_delete_card(session: AsyncSession, card_id: str) -> bool:
    """
    Physically delete a card, soft-deleted or not, with its statistics.

    Returns True if deleted, False if not found.
    """
    card = await get_card(session, card_id, include_deleted=True)
    if card is None:
        return False

    await session.delete(card)
    await session.flush()
    logger.info("Hard deleted card %s", card_id)
    return True


def card_to_view(card: CardDB) -> CardView:
    """Flatten a card joined with its taxonomy and statistics."""
    card_type = card.card_type
    sub_type = card.card_sub_type
    return CardView(
        id=card.id,
        name=card.name,
        code=card.code,
        description=card.description,
        image_url=card.image_url,
        type_id=card_type.id if card_type else None,
        type_name=card_type.name if card_type else None,
        sub_type_id=sub_type.id if sub_type else None,
        sub_type_name=sub_type.name if sub_type else None,
        statistics=statistics_to_view(card.statistics),
        created_at=card.created_at,
        updated_at=card.updated_at,
        deleted_at=card.deleted_at,
    )
