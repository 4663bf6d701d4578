"""Tests for card store operations."""

import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import Taxonomy
from cardcatalog.config import settings
from cardcatalog.db.cards import (
    card_to_view,
    create_card,
    find_card,
    get_card,
    hard_delete_card,
    list_cards,
    soft_delete_card,
    update_card,
)
from cardcatalog.db.statistics import update_statistics
from cardcatalog.models.catalog import (
    CardDraft,
    CardFilter,
    CardPatch,
    Pagination,
    StatisticsPatch,
)
from cardcatalog.models.db import CardDB, CardStatisticsDB
from cardcatalog.models.failure import ConflictError, InvalidArgumentError, NotFoundError

DARK_MAGICIAN_STATS = StatisticsPatch(attack=2500, defense=2100, stars=7)


def _draft(taxonomy: Taxonomy, **overrides) -> CardDraft:
    fields = {
        "name": "Dark Magician",
        "code": "YGO0001",
        "description": "The ultimate wizard in terms of attack and defense.",
        "type_id": taxonomy.monster_id,
        "sub_type_id": taxonomy.normal_monster_id,
        "statistics": DARK_MAGICIAN_STATS,
    }
    fields.update(overrides)
    return CardDraft(**fields)


async def _count(session: AsyncSession, model) -> int:
    return await session.scalar(select(func.count()).select_from(model))


class TestCreateCard:
    async def test_create_with_statistics(
        self, session: AsyncSession, taxonomy: Taxonomy
    ) -> None:
        """The returned card has its taxonomy and statistics joined."""
        card = await create_card(session, _draft(taxonomy))

        assert card.name == "Dark Magician"
        assert card.card_type.name == "Monster"
        assert card.card_sub_type.name == "Normal Monster"
        assert card.statistics is not None
        assert card.statistics.attack == 2500
        assert card.statistics.card_id == card.id

    async def test_create_without_statistics(
        self, session: AsyncSession, taxonomy: Taxonomy
    ) -> None:
        card = await create_card(
            session,
            _draft(
                taxonomy,
                name="Pot of Greed",
                code="YGO0100",
                type_id=taxonomy.spell_id,
                sub_type_id=taxonomy.normal_spell_id,
                statistics=None,
            ),
        )

        assert card.statistics is None
        assert await _count(session, CardStatisticsDB) == 0

    async def test_create_unknown_type(self, session: AsyncSession, taxonomy: Taxonomy) -> None:
        with pytest.raises(NotFoundError):
            await create_card(session, _draft(taxonomy, type_id=str(uuid.uuid4())))

        assert await _count(session, CardDB) == 0

    async def test_create_unknown_sub_type(
        self, session: AsyncSession, taxonomy: Taxonomy
    ) -> None:
        with pytest.raises(NotFoundError):
            await create_card(session, _draft(taxonomy, sub_type_id=str(uuid.uuid4())))

    async def test_create_mismatched_sub_type(
        self, session: AsyncSession, taxonomy: Taxonomy
    ) -> None:
        """A spell subtype cannot be paired with the monster type."""
        with pytest.raises(InvalidArgumentError):
            await create_card(session, _draft(taxonomy, sub_type_id=taxonomy.normal_spell_id))

        assert await _count(session, CardDB) == 0

    async def test_create_mismatch_allowed_when_not_enforced(
        self, session: AsyncSession, taxonomy: Taxonomy, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(settings, "enforce_subtype_match", False)

        card = await create_card(session, _draft(taxonomy, sub_type_id=taxonomy.normal_spell_id))

        assert card.card_sub_type.name == "Normal Spell"

    async def test_create_duplicate_code(self, session: AsyncSession, taxonomy: Taxonomy) -> None:
        """Duplicate codes conflict and leave nothing behind."""
        await create_card(session, _draft(taxonomy))
        await session.commit()

        with pytest.raises(ConflictError):
            await create_card(session, _draft(taxonomy, name="Dark Magician Girl"))

        assert await _count(session, CardDB) == 1
        assert await _count(session, CardStatisticsDB) == 1

    async def test_create_duplicate_name(self, session: AsyncSession, taxonomy: Taxonomy) -> None:
        await create_card(session, _draft(taxonomy))
        await session.commit()

        with pytest.raises(ConflictError):
            await create_card(session, _draft(taxonomy, code="YGO0002"))


class TestListCards:
    async def _seed(self, session: AsyncSession, taxonomy: Taxonomy) -> dict[str, str]:
        cards = [
            _draft(taxonomy),
            _draft(
                taxonomy,
                name="Blue-Eyes White Dragon",
                code="YGO0002",
                statistics=StatisticsPatch(attack=3000, defense=2500, stars=8),
            ),
            _draft(
                taxonomy,
                name="Summoned Skull",
                code="YGO0003",
                sub_type_id=taxonomy.effect_monster_id,
                statistics=StatisticsPatch(attack=2500, defense=1200, stars=6),
            ),
            _draft(
                taxonomy,
                name="Pot of Greed",
                code="YGO0100",
                type_id=taxonomy.spell_id,
                sub_type_id=taxonomy.normal_spell_id,
                statistics=None,
            ),
        ]
        ids = {}
        for draft in cards:
            card = await create_card(session, draft)
            ids[draft.name] = card.id
        await session.commit()
        return ids

    async def test_list_all_ordered_by_id(
        self, session: AsyncSession, taxonomy: Taxonomy
    ) -> None:
        await self._seed(session, taxonomy)

        cards = await list_cards(session)

        ids = [c.id for c in cards]
        assert len(cards) == 4
        assert ids == sorted(ids)

    async def test_filter_by_stars_string(
        self, session: AsyncSession, taxonomy: Taxonomy
    ) -> None:
        """A numeric string star filter matches the statistics record."""
        await self._seed(session, taxonomy)

        cards = await list_cards(session, CardFilter(stars="7"))

        assert len(cards) == 1
        assert cards[0].name == "Dark Magician"
        assert cards[0].statistics.attack == 2500

    async def test_filter_by_stars_excludes_cards_without_statistics(
        self, session: AsyncSession, taxonomy: Taxonomy
    ) -> None:
        await self._seed(session, taxonomy)

        names = {c.name for c in await list_cards(session, CardFilter(stars=8))}

        assert names == {"Blue-Eyes White Dragon"}

    async def test_filter_by_type(self, session: AsyncSession, taxonomy: Taxonomy) -> None:
        await self._seed(session, taxonomy)

        cards = await list_cards(session, CardFilter(type_id=taxonomy.spell_id))

        assert [c.name for c in cards] == ["Pot of Greed"]
        assert cards[0].statistics is None

    async def test_filter_by_sub_type(self, session: AsyncSession, taxonomy: Taxonomy) -> None:
        await self._seed(session, taxonomy)

        cards = await list_cards(session, CardFilter(sub_type_id=taxonomy.effect_monster_id))

        assert [c.name for c in cards] == ["Summoned Skull"]

    async def test_filters_combine(self, session: AsyncSession, taxonomy: Taxonomy) -> None:
        """Supplied criteria are ANDed together."""
        await self._seed(session, taxonomy)

        cards = await list_cards(
            session, CardFilter(type_id=taxonomy.monster_id, name="Summoned Skull")
        )

        assert [c.name for c in cards] == ["Summoned Skull"]

    async def test_filter_no_match(self, session: AsyncSession, taxonomy: Taxonomy) -> None:
        await self._seed(session, taxonomy)

        assert await list_cards(session, CardFilter(name="Exodia")) == []

    async def test_invalid_stars(self, session: AsyncSession) -> None:
        with pytest.raises(InvalidArgumentError):
            await list_cards(session, CardFilter(stars="seven"))

    async def test_pagination_window(self, session: AsyncSession, taxonomy: Taxonomy) -> None:
        await self._seed(session, taxonomy)

        everything = await list_cards(session)
        window = await list_cards(session, CardFilter(pagination=Pagination(limit=2, offset=1)))

        assert [c.id for c in window] == [c.id for c in everything[1:3]]

    async def test_excludes_soft_deleted(
        self, session: AsyncSession, taxonomy: Taxonomy
    ) -> None:
        ids = await self._seed(session, taxonomy)
        await soft_delete_card(session, ids["Pot of Greed"])
        await session.commit()

        live = await list_cards(session)
        everything = await list_cards(session, CardFilter(include_deleted=True))

        assert "Pot of Greed" not in {c.name for c in live}
        assert len(live) == 3
        assert len(everything) == 4


class TestFindCard:
    async def test_requires_lookup_key(self, session: AsyncSession) -> None:
        with pytest.raises(InvalidArgumentError):
            await find_card(session, CardFilter())

    async def test_type_only_is_not_a_lookup(
        self, session: AsyncSession, taxonomy: Taxonomy
    ) -> None:
        with pytest.raises(InvalidArgumentError):
            await find_card(session, CardFilter(type_id=taxonomy.monster_id))

    async def test_find_by_name(self, session: AsyncSession, taxonomy: Taxonomy) -> None:
        created = await create_card(session, _draft(taxonomy))
        await session.commit()

        card = await find_card(session, CardFilter(name="Dark Magician"))

        assert card.id == created.id
        assert card.statistics.stars == 7

    async def test_find_by_id(self, session: AsyncSession, taxonomy: Taxonomy) -> None:
        created = await create_card(session, _draft(taxonomy))
        await session.commit()

        card = await find_card(session, CardFilter(id=created.id))

        assert card.name == "Dark Magician"

    async def test_find_by_stars(self, session: AsyncSession, taxonomy: Taxonomy) -> None:
        await create_card(session, _draft(taxonomy))
        await session.commit()

        card = await find_card(session, CardFilter(stars="7"))

        assert card.name == "Dark Magician"

    async def test_not_found(self, session: AsyncSession, taxonomy: Taxonomy) -> None:
        await create_card(session, _draft(taxonomy))
        await session.commit()

        with pytest.raises(NotFoundError):
            await find_card(session, CardFilter(name="Exodia"))

    async def test_soft_deleted_not_found(
        self, session: AsyncSession, taxonomy: Taxonomy
    ) -> None:
        created = await create_card(session, _draft(taxonomy))
        await soft_delete_card(session, created.id)
        await session.commit()

        with pytest.raises(NotFoundError):
            await find_card(session, CardFilter(name="Dark Magician"))


class TestUpdateCard:
    async def test_update_name_only(self, session: AsyncSession, taxonomy: Taxonomy) -> None:
        """Fields not in the patch keep their values."""
        created = await create_card(session, _draft(taxonomy))
        await session.commit()

        card = await update_card(session, created.id, CardPatch(name="Updated Name"))

        assert card.name == "Updated Name"
        assert card.code == "YGO0001"
        assert card.card_sub_type.name == "Normal Monster"
        assert card.statistics.attack == 2500

    async def test_merge_statistics(self, session: AsyncSession, taxonomy: Taxonomy) -> None:
        created = await create_card(session, _draft(taxonomy))
        await session.commit()

        card = await update_card(
            session, created.id, CardPatch(statistics=StatisticsPatch(attack=2800))
        )

        assert card.statistics.attack == 2800
        assert card.statistics.defense == 2100
        assert card.statistics.stars == 7

    async def test_statistics_patch_without_statistics(
        self, session: AsyncSession, taxonomy: Taxonomy
    ) -> None:
        """Updates never create a statistics record."""
        created = await create_card(
            session,
            _draft(
                taxonomy,
                name="Pot of Greed",
                code="YGO0100",
                type_id=taxonomy.spell_id,
                sub_type_id=taxonomy.normal_spell_id,
                statistics=None,
            ),
        )
        await session.commit()

        with pytest.raises(InvalidArgumentError):
            await update_card(
                session,
                created.id,
                CardPatch(name="Pot of Avarice", statistics=StatisticsPatch(stars=1)),
            )

        assert await _count(session, CardStatisticsDB) == 0
        card = await get_card(session, created.id)
        assert card is not None
        assert card.name == "Pot of Greed"

    async def test_change_sub_type(self, session: AsyncSession, taxonomy: Taxonomy) -> None:
        created = await create_card(session, _draft(taxonomy))
        await session.commit()

        card = await update_card(
            session, created.id, CardPatch(sub_type_id=taxonomy.effect_monster_id)
        )

        assert card.card_sub_type_id == taxonomy.effect_monster_id
        assert card.card_sub_type.name == "Effect Monster"

    async def test_change_to_mismatched_sub_type(
        self, session: AsyncSession, taxonomy: Taxonomy
    ) -> None:
        created = await create_card(session, _draft(taxonomy))
        await session.commit()

        with pytest.raises(InvalidArgumentError):
            await update_card(
                session, created.id, CardPatch(sub_type_id=taxonomy.normal_spell_id)
            )

    async def test_unknown_sub_type(self, session: AsyncSession, taxonomy: Taxonomy) -> None:
        created = await create_card(session, _draft(taxonomy))
        await session.commit()

        with pytest.raises(NotFoundError):
            await update_card(session, created.id, CardPatch(sub_type_id=str(uuid.uuid4())))

    async def test_rename_to_existing_name(
        self, session: AsyncSession, taxonomy: Taxonomy
    ) -> None:
        await create_card(session, _draft(taxonomy))
        other = await create_card(
            session, _draft(taxonomy, name="Dark Magician Girl", code="YGO0002")
        )
        await session.commit()
        other_id = other.id

        with pytest.raises(ConflictError):
            await update_card(session, other_id, CardPatch(name="Dark Magician"))

    async def test_not_found(self, session: AsyncSession) -> None:
        with pytest.raises(NotFoundError):
            await update_card(session, str(uuid.uuid4()), CardPatch(name="Nope"))

    async def test_soft_deleted_not_updatable(
        self, session: AsyncSession, taxonomy: Taxonomy
    ) -> None:
        created = await create_card(session, _draft(taxonomy))
        await soft_delete_card(session, created.id)
        await session.commit()

        with pytest.raises(NotFoundError):
            await update_card(session, created.id, CardPatch(name="Updated Name"))


class TestDeleteCard:
    async def test_soft_delete(self, session: AsyncSession, taxonomy: Taxonomy) -> None:
        """The row and its statistics remain after a soft delete."""
        created = await create_card(session, _draft(taxonomy))
        await session.commit()

        receipt = await soft_delete_card(session, created.id)
        await session.commit()

        assert receipt.message == f"Card with id {created.id} has been soft deleted successfully"
        assert receipt.deleted_at
        assert await get_card(session, created.id) is None
        kept = await get_card(session, created.id, include_deleted=True)
        assert kept is not None
        assert kept.is_deleted is True
        assert await _count(session, CardStatisticsDB) == 1

    async def test_soft_delete_twice(self, session: AsyncSession, taxonomy: Taxonomy) -> None:
        created = await create_card(session, _draft(taxonomy))
        await soft_delete_card(session, created.id)
        await session.commit()

        with pytest.raises(NotFoundError):
            await soft_delete_card(session, created.id)

    async def test_soft_delete_not_found(self, session: AsyncSession) -> None:
        with pytest.raises(NotFoundError):
            await soft_delete_card(session, str(uuid.uuid4()))

    async def test_hard_delete_cascades(self, session: AsyncSession, taxonomy: Taxonomy) -> None:
        created = await create_card(session, _draft(taxonomy))
        await session.commit()
        card_id = created.id

        assert await hard_delete_card(session, card_id) is True
        await session.commit()

        assert await get_card(session, card_id, include_deleted=True) is None
        assert await _count(session, CardStatisticsDB) == 0

    async def test_hard_delete_soft_deleted(
        self, session: AsyncSession, taxonomy: Taxonomy
    ) -> None:
        created = await create_card(session, _draft(taxonomy))
        await soft_delete_card(session, created.id)
        await session.commit()

        assert await hard_delete_card(session, created.id) is True

    async def test_hard_delete_not_found(self, session: AsyncSession) -> None:
        assert await hard_delete_card(session, str(uuid.uuid4())) is False


class TestCardView:
    async def test_flat_projection(self, session: AsyncSession, taxonomy: Taxonomy) -> None:
        card = await create_card(session, _draft(taxonomy))

        view = card_to_view(card)

        assert view.id == card.id
        assert view.type_id == taxonomy.monster_id
        assert view.type_name == "Monster"
        assert view.sub_type_id == taxonomy.normal_monster_id
        assert view.sub_type_name == "Normal Monster"
        assert view.statistics is not None
        assert view.statistics.defense == 2100
        assert view.deleted_at is None

    async def test_projection_without_statistics(
        self, session: AsyncSession, taxonomy: Taxonomy
    ) -> None:
        card = await create_card(session, _draft(taxonomy, statistics=None))

        assert card_to_view(card).statistics is None


class TestStatisticsStore:
    async def test_update_statistics_not_found(self, session: AsyncSession) -> None:
        with pytest.raises(NotFoundError):
            await update_statistics(session, str(uuid.uuid4()), StatisticsPatch(stars=1))

    async def test_update_statistics_merges(
        self, session: AsyncSession, taxonomy: Taxonomy
    ) -> None:
        card = await create_card(session, _draft(taxonomy))

        statistics = await update_statistics(
            session, card.statistics.id, StatisticsPatch(defense=1800)
        )

        assert statistics.defense == 1800
        assert statistics.attack == 2500
