"""
Card statistics operations.

Statistics never exist on their own: they are created alongside a card and
only ever updated through it.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cardcatalog.models.catalog import StatisticsPatch, StatisticsView, apply_patch
from cardcatalog.models.db import CardDB, CardStatisticsDB
from cardcatalog.models.failure import NotFoundError

logger = logging.getLogger(__name__)


async def create_statistics(
    session: AsyncSession, card: CardDB, patch: StatisticsPatch
) -> CardStatisticsDB:
    """Create the statistics record bound to a freshly inserted card."""
    statistics = CardStatisticsDB(card=card, **patch.changes())
    session.add(statistics)
    await session.flush()
    logger.info("Created statistics for card %s", card.id)
    return statistics


async def update_statistics(
    session: AsyncSession, statistics_id: str, patch: StatisticsPatch
) -> CardStatisticsDB:
    """
    Merge supplied fields into an existing statistics record.

    Raises NotFoundError if the id does not resolve.
    """
    result = await session.execute(
        select(CardStatisticsDB).where(CardStatisticsDB.id == statistics_id)
    )
    statistics = result.scalar_one_or_none()
    if statistics is None:
        raise NotFoundError(f"Statistics with id {statistics_id} not found")

    apply_patch(statistics, patch.changes())
    await session.flush()
    return statistics


def statistics_to_view(statistics: CardStatisticsDB | None) -> StatisticsView | None:
    """Project a statistics record, or None for cards without one."""
    if statistics is None:
        return None
    return StatisticsView(
        id=statistics.id,
        attack=statistics.attack,
        defense=statistics.defense,
        stars=statistics.stars,
    )
