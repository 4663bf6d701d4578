"""
SQLAlchemy ORM models for persistent storage.

Four related tables: card types, card subtypes, cards and card statistics.
Foreign keys run type -> subtype -> card, and card -> statistics (one-to-one).
Only cards carry a soft-delete marker.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    """Timezone-aware current time used for row timestamps."""
    return datetime.now(UTC)


def new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class TimestampMixin:
    """Identifier and audit timestamps shared by every table."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    # Python-side defaults so values are populated on flush without a refresh
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class CardTypeDB(TimestampMixin, Base):
    """
    Top level of the taxonomy (Monster, Spell, Trap).

    Owns many subtypes and many cards.
    """

    __tablename__ = "card_types"

    name: Mapped[str] = mapped_column(String(50), unique=True, index=True)

    def __repr__(self) -> str:
        return f"<CardTypeDB(id={self.id}, name={self.name})>"


class CardSubTypeDB(TimestampMixin, Base):
    """A subtype always references exactly one parent type."""

    __tablename__ = "card_sub_types"

    name: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    card_type_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("card_types.id", ondelete="CASCADE"), index=True
    )

    card_type: Mapped["CardTypeDB"] = relationship()

    def __repr__(self) -> str:
        return f"<CardSubTypeDB(id={self.id}, name={self.name})>"


class CardDB(TimestampMixin, Base):
    """
    A catalog card.

    References one type and one subtype (non-owning) and exclusively owns
    at most one statistics record.
    """

    __tablename__ = "cards"

    name: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    code: Mapped[str] = mapped_column(String(7), unique=True)
    description: Mapped[str] = mapped_column(String(255))
    image_url: Mapped[str | None] = mapped_column(String(255), nullable=True)

    card_type_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("card_types.id", ondelete="CASCADE"), index=True
    )
    card_sub_type_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("card_sub_types.id", ondelete="CASCADE"), index=True
    )

    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    card_type: Mapped["CardTypeDB"] = relationship()
    card_sub_type: Mapped["CardSubTypeDB"] = relationship()

    # Hard deleting a card removes its statistics even without FK enforcement
    statistics: Mapped["CardStatisticsDB | None"] = relationship(
        back_populates="card", cascade="all, delete-orphan", uselist=False
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def __repr__(self) -> str:
        return f"<CardDB(id={self.id}, name={self.name}, code={self.code})>"


class CardStatisticsDB(TimestampMixin, Base):
    """Attack / defense / stars for a single card."""

    __tablename__ = "card_statistics"

    card_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("cards.id", ondelete="CASCADE"), unique=True
    )
    attack: Mapped[int | None] = mapped_column(Integer, nullable=True)
    defense: Mapped[int | None] = mapped_column(Integer, nullable=True)
    stars: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)

    card: Mapped["CardDB"] = relationship(back_populates="statistics")

    def __repr__(self) -> str:
        return (
            f"<CardStatisticsDB(card_id={self.card_id}, atk={self.attack}, "
            f"def={self.defense}, stars={self.stars})>"
        )
