"""
Query composition for card lookups.

Turns a sparse CardFilter into SQL predicates. Criteria that were not
supplied are left out of the WHERE clause entirely rather than being
matched against NULL.
"""

from typing import Any, TypeVar

from sqlalchemy import ColumnElement, Select

from cardcatalog.models.catalog import CardFilter, Pagination
from cardcatalog.models.db import CardDB, CardStatisticsDB
from cardcatalog.models.failure import InvalidArgumentError

SelectT = TypeVar("SelectT", bound=Select[Any])


def coerce_stars(value: int | str | None) -> int | None:
    """
    Normalize a star count coming from a query string.

    Returns None when no value was supplied.

    Raises:
        InvalidArgumentError: If the value is not a whole number
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise InvalidArgumentError(f"stars must be numeric, got {value!r}")
    if isinstance(value, int):
        return value
    text = value.strip()
    if not text.isdigit():
        raise InvalidArgumentError(f"stars must be numeric, got {value!r}")
    return int(text)


def requires_statistics_join(card_filter: CardFilter) -> bool:
    """True when the statistics table takes part in the predicate."""
    return coerce_stars(card_filter.stars) is not None


def card_filter_clauses(card_filter: CardFilter) -> list[ColumnElement[bool]]:
    """
    Build one predicate per supplied criterion.

    Soft-deleted cards are excluded unless the filter asks for them.
    A stars clause references CardStatisticsDB, so the caller must join
    statistics whenever requires_statistics_join() is True.
    """
    clauses: list[ColumnElement[bool]] = []

    if card_filter.id:
        clauses.append(CardDB.id == card_filter.id)
    if card_filter.name:
        clauses.append(CardDB.name == card_filter.name)
    if card_filter.type_id:
        clauses.append(CardDB.card_type_id == card_filter.type_id)
    if card_filter.sub_type_id:
        clauses.append(CardDB.card_sub_type_id == card_filter.sub_type_id)

    stars = coerce_stars(card_filter.stars)
    if stars is not None:
        clauses.append(CardStatisticsDB.stars == stars)

    if not card_filter.include_deleted:
        clauses.append(CardDB.deleted_at.is_(None))

    return clauses


def paginate(stmt: SelectT, pagination: Pagination, order_column: Any) -> SelectT:
    """Order by identifier ascending and apply the limit/offset window."""
    return stmt.order_by(order_column.asc()).limit(pagination.limit).offset(pagination.offset)
