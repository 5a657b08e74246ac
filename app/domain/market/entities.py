"""
Domain entities for the market bounded context.

Entities represent core business objects with identity and lifecycle.
They contain no framework imports and no IO operations.
Money and counts are plain integers throughout.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID


class PlayerPosition(Enum):
    """Closed set of positions a player can occupy."""

    GK = "GK"
    DEF = "DEF"
    MID = "MID"
    ATT = "ATT"


@dataclass(frozen=True)
class User:
    """A registered manager. Owns at most one team."""

    id: UUID
    email: str
    password_hash: str
    created_at: Optional[datetime] = None
    team_id: Optional[UUID] = None


@dataclass
class Team:
    """A squad owner with a budget in whole currency units."""

    id: UUID
    user_id: UUID
    budget: int


@dataclass
class Player:
    """A footballer belonging to exactly one team."""

    id: UUID
    team_id: UUID
    name: str
    position: PlayerPosition
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class TransferListing:
    """An offer to sell a specific player at a fixed asking price."""

    id: UUID
    player_id: UUID
    asking_price: int
    created_at: datetime


@dataclass(frozen=True)
class ListingOwnership:
    """A listing resolved together with its player and the selling side.

    seller_team_id / seller_user_id are None when the player is orphaned,
    which the purchase flow rejects.
    """

    listing: TransferListing
    player: Player
    seller_team_id: Optional[UUID]
    seller_user_id: Optional[UUID]


@dataclass(frozen=True)
class PlayerOwnership:
    """A player resolved together with the user who owns its team."""

    player: Player
    owner_user_id: Optional[UUID]


@dataclass(frozen=True)
class ListingView:
    """Read model for a listing as shown in the browsable catalog."""

    id: UUID
    asking_price: int
    created_at: datetime
    player_id: UUID
    player_name: str
    player_position: PlayerPosition
    team_id: UUID


@dataclass(frozen=True)
class TransferHistory:
    """Immutable record of a completed trade."""

    id: UUID
    player_id: UUID
    from_team_id: UUID
    to_team_id: UUID
    price: int
    transferred_at: datetime
