"""
Seed the catalog with the base taxonomy and a few sample cards.

Goes through the same store operations as the API, skipping entries that
already exist. Can be run as a standalone script:

    python -m cardcatalog.jobs.seed_catalog [--reset]
"""

import argparse
import asyncio
import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from cardcatalog.db.cards import create_card, get_card_by_code, list_cards
from cardcatalog.db.database import async_session_factory, drop_db, init_db
from cardcatalog.db.taxonomy import (
    create_sub_type,
    create_type,
    get_sub_type_by_name,
    get_type_by_name,
)
from cardcatalog.models.catalog import CardDraft, CardFilter, StatisticsPatch

logger = logging.getLogger(__name__)

SUB_TYPES_BY_TYPE: dict[str, list[str]] = {
    "Monster": ["Normal Monster", "Effect Monster", "Ritual Monster", "Fusion Monster"],
    "Spell": [
        "Normal Spell",
        "Quick-Play Spell",
        "Continuous Spell",
        "Field Spell",
        "Equip Spell",
        "Ritual Spell",
    ],
    "Trap": ["Normal Trap", "Continuous Trap", "Counter Trap"],
}


@dataclass(frozen=True, slots=True)
class SeedCard:
    name: str
    code: str
    description: str
    type_name: str
    sub_type_name: str
    attack: int | None = None
    defense: int | None = None
    stars: int | None = None

    def statistics(self) -> StatisticsPatch | None:
        if self.attack is None and self.defense is None and self.stars is None:
            return None
        return StatisticsPatch(attack=self.attack, defense=self.defense, stars=self.stars)


SEED_CARDS: list[SeedCard] = [
    SeedCard(
        name="Azure Dragon Whelp",
        code="YGS0001",
        description="A young dragon with swift strikes.",
        type_name="Monster",
        sub_type_name="Normal Monster",
        attack=1400,
        defense=1200,
        stars=4,
    ),
    SeedCard(
        name="Azure Dragon Elder",
        code="YGS0002",
        description="Elder of the Azure line, breathes lightning.",
        type_name="Monster",
        sub_type_name="Effect Monster",
        attack=2300,
        defense=1600,
        stars=6,
    ),
    SeedCard(
        name="Obsidian Ritualist",
        code="YGS0003",
        description="Requires a ritual to summon; draws power from darkness.",
        type_name="Monster",
        sub_type_name="Ritual Monster",
        attack=2500,
        defense=2000,
        stars=8,
    ),
    SeedCard(
        name="Mirror Chimera",
        code="YGS0004",
        description="Fusion of three mirror beasts.",
        type_name="Monster",
        sub_type_name="Fusion Monster",
        attack=2800,
        defense=2400,
        stars=8,
    ),
    SeedCard(
        name="Arcane Surge",
        code="YGS0101",
        description="Draw two cards.",
        type_name="Spell",
        sub_type_name="Normal Spell",
    ),
    SeedCard(
        name="Sanctum of Stars",
        code="YGS0102",
        description="All monsters on the field gain 300 attack.",
        type_name="Spell",
        sub_type_name="Field Spell",
    ),
    SeedCard(
        name="Binding Chains",
        code="YGS0201",
        description="Negate the attack of one opponent monster.",
        type_name="Trap",
        sub_type_name="Normal Trap",
    ),
    SeedCard(
        name="Silent Verdict",
        code="YGS0202",
        description="Negate the activation of a spell card and destroy it.",
        type_name="Trap",
        sub_type_name="Counter Trap",
    ),
]


async def seed_taxonomy(session: AsyncSession) -> int:
    """
    Create any missing types and subtypes.

    Returns the number of records created.
    """
    created = 0
    for type_name, sub_type_names in SUB_TYPES_BY_TYPE.items():
        card_type = await get_type_by_name(session, type_name)
        if card_type is None:
            card_type = await create_type(session, type_name)
            created += 1

        for sub_type_name in sub_type_names:
            if await get_sub_type_by_name(session, sub_type_name) is None:
                await create_sub_type(session, sub_type_name, card_type.id)
                created += 1

    logger.info("Seeded %d taxonomy records", created)
    return created


async def seed_cards(session: AsyncSession, cards: list[SeedCard] | None = None) -> int:
    """
    Create any missing sample cards. Taxonomy must already be seeded.

    Returns the number of cards created.
    """
    created = 0
    for seed in SEED_CARDS if cards is None else cards:
        if await list_cards(session, CardFilter(name=seed.name, include_deleted=True)):
            logger.debug("Skipping existing card %s", seed.name)
            continue
        if await get_card_by_code(session, seed.code) is not None:
            logger.warning("Skipping %s: code %s is already taken", seed.name, seed.code)
            continue

        card_type = await get_type_by_name(session, seed.type_name)
        sub_type = await get_sub_type_by_name(session, seed.sub_type_name)
        if card_type is None or sub_type is None:
            logger.warning(
                "Skipping %s: unknown taxonomy %s / %s",
                seed.name,
                seed.type_name,
                seed.sub_type_name,
            )
            continue

        await create_card(
            session,
            CardDraft(
                name=seed.name,
                code=seed.code,
                description=seed.description,
                type_id=card_type.id,
                sub_type_id=sub_type.id,
                statistics=seed.statistics(),
            ),
        )
        created += 1

    logger.info("Seeded %d cards", created)
    return created


async def run_seed(reset: bool = False) -> dict[str, int]:
    """
    Seed taxonomy and cards in a single unit of work.

    Args:
        reset: Drop and recreate all tables first

    Returns:
        Dict with the number of taxonomy records and cards created
    """
    if reset:
        logger.info("Resetting catalog tables...")
        await drop_db()
    await init_db()

    async with async_session_factory() as session:
        taxonomy = await seed_taxonomy(session)
        cards = await seed_cards(session)
        await session.commit()

    logger.info("Seed complete: %d taxonomy records, %d cards", taxonomy, cards)
    return {"taxonomy": taxonomy, "cards": cards}


def main() -> None:
    """CLI entry point for seeding the catalog."""
    parser = argparse.ArgumentParser(description="Seed the card catalog")
    parser.add_argument("--reset", action="store_true", help="drop and recreate all tables first")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_seed(reset=args.reset))


if __name__ == "__main__":
    main()
