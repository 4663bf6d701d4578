"""
Domain models for catalog queries and mutations.

Patches carry only the fields a caller supplied: None means "leave as is".
Views are the flat projections handed back to callers.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from cardcatalog.config import DEFAULT_PAGE_SIZE
from cardcatalog.models.failure import InvalidArgumentError


def apply_patch(record: Any, changes: dict[str, Any]) -> Any:
    """Copy each supplied field onto a record, leaving the others untouched."""
    for attr, value in changes.items():
        setattr(record, attr, value)
    return record


def _supplied(**fields: Any) -> dict[str, Any]:
    return {name: value for name, value in fields.items() if value is not None}


# --- Pagination & filters ---


@dataclass(frozen=True, slots=True)
class Pagination:
    """
    Window over an id-ordered result set.

    Attributes:
        limit: Maximum rows returned (positive)
        offset: Rows skipped before the window starts (non-negative)
    """

    limit: int = DEFAULT_PAGE_SIZE
    offset: int = 0

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise InvalidArgumentError(f"limit must be a positive integer, got {self.limit}")
        if self.offset < 0:
            raise InvalidArgumentError(f"offset must be non-negative, got {self.offset}")


@dataclass(frozen=True, slots=True)
class CardFilter:
    """
    Sparse card criteria.

    Every criterion is optional; absent ones are left out of the query
    entirely. `stars` accepts numeric strings as they arrive from a query string.
    """

    id: str | None = None
    name: str | None = None
    type_id: str | None = None
    sub_type_id: str | None = None
    stars: int | str | None = None
    include_deleted: bool = False
    pagination: Pagination = field(default_factory=Pagination)

    def has_lookup_key(self) -> bool:
        """Single-card lookups need an id, a name or a star count."""
        return any(value not in (None, "") for value in (self.id, self.name, self.stars))


# --- Patches ---


@dataclass(frozen=True, slots=True)
class CardTypePatch:
    name: str | None = None

    def changes(self) -> dict[str, Any]:
        return _supplied(name=self.name)


@dataclass(frozen=True, slots=True)
class CardSubTypePatch:
    name: str | None = None
    type_id: str | None = None

    def changes(self) -> dict[str, Any]:
        return _supplied(name=self.name, card_type_id=self.type_id)


@dataclass(frozen=True, slots=True)
class StatisticsPatch:
    attack: int | None = None
    defense: int | None = None
    stars: int | None = None

    def changes(self) -> dict[str, Any]:
        return _supplied(attack=self.attack, defense=self.defense, stars=self.stars)


@dataclass(frozen=True, slots=True)
class CardPatch:
    """
    Partial card update.

    Scalar fields and taxonomy references are merged into the card row;
    `statistics` is merged into the card's existing statistics record.
    """

    name: str | None = None
    code: str | None = None
    description: str | None = None
    image_url: str | None = None
    type_id: str | None = None
    sub_type_id: str | None = None
    statistics: StatisticsPatch | None = None

    def changes(self) -> dict[str, Any]:
        """Card-row changes only; statistics are handled separately."""
        return _supplied(
            name=self.name,
            code=self.code,
            description=self.description,
            image_url=self.image_url,
            card_type_id=self.type_id,
            card_sub_type_id=self.sub_type_id,
        )


@dataclass(frozen=True, slots=True)
class CardDraft:
    """Everything needed to create a card."""

    name: str
    code: str
    description: str
    type_id: str
    sub_type_id: str
    image_url: str | None = None
    statistics: StatisticsPatch | None = None


# --- Views ---


@dataclass(frozen=True, slots=True)
class StatisticsView:
    id: str
    attack: int | None
    defense: int | None
    stars: int | None


@dataclass(frozen=True, slots=True)
class CardView:
    """Flat card projection with taxonomy names and nested statistics."""

    id: str
    name: str
    code: str
    description: str
    image_url: str | None
    type_id: str | None
    type_name: str | None
    sub_type_id: str | None
    sub_type_name: str | None
    statistics: StatisticsView | None
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class SubTypeView:
    id: str
    type_id: str | None
    type_name: str | None
    name: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class DeletionReceipt:
    """Confirmation returned by a soft delete."""

    message: str
    deleted_at: str
