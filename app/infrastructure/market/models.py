"""
SQLAlchemy ORM models for the market entity store.

Tables:
    - users              : credentials, unique email
    - teams              : one per user, integer budget
    - players            : belongs to one team
    - transfer_listings  : at most one per player, cascades with the player
    - transfer_history   : append-only trade ledger

These rows never leave the infrastructure layer; repositories map them
to domain entities.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from app.domain.market.entities import PlayerPosition


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for all market tables."""


class UserRow(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    team: Mapped[Optional["TeamRow"]] = relationship(back_populates="user")


class TeamRow(Base):
    __tablename__ = "teams"
    __table_args__ = (CheckConstraint("budget >= 0", name="ck_teams_budget_non_negative"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    budget: Mapped[int] = mapped_column(BigInteger, nullable=False, default=5_000_000)

    user: Mapped[UserRow] = relationship(back_populates="team")
    players: Mapped[list["PlayerRow"]] = relationship(back_populates="team")


class PlayerRow(Base):
    __tablename__ = "players"
    __table_args__ = (Index("ix_players_team_position", "team_id", "position"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    team_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("teams.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    position: Mapped[PlayerPosition] = mapped_column(
        Enum(PlayerPosition, name="player_position", native_enum=False, length=8),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    team: Mapped[TeamRow] = relationship(back_populates="players")
    listing: Mapped[Optional["TransferListingRow"]] = relationship(
        back_populates="player", passive_deletes=True
    )


class TransferListingRow(Base):
    __tablename__ = "transfer_listings"
    __table_args__ = (
        CheckConstraint("asking_price > 0", name="ck_listings_price_positive"),
        Index("ix_transfer_listings_asking_price", "asking_price"),
        Index("ix_transfer_listings_created_at", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    player_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("players.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    asking_price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    player: Mapped[PlayerRow] = relationship(back_populates="listing")


class TransferHistoryRow(Base):
    __tablename__ = "transfer_history"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    player_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("players.id"), nullable=False)
    from_team_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("teams.id"), nullable=False)
    to_team_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("teams.id"), nullable=False)
    price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    transferred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
