"""
Data Transfer Objects for the market application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
from uuid import UUID


# ------------------------------------------------------------------
# Listing catalog
# ------------------------------------------------------------------


@dataclass(frozen=True)
class CreateListingCommand:
    """Input DTO for listing a player for sale.

    Attributes:
        player_id: Player to list.
        user_id: Authenticated caller; must own the player's team.
        asking_price: Positive integer price.
    """

    player_id: UUID
    user_id: UUID
    asking_price: int


@dataclass(frozen=True)
class ListingResult:
    """Output DTO for a freshly created listing."""

    id: UUID
    player_id: UUID
    asking_price: int
    created_at: datetime


@dataclass(frozen=True)
class RemoveListingCommand:
    """Input DTO for withdrawing a listing.

    Attributes:
        listing_id: Listing to remove.
        user_id: Authenticated caller; must own the seller team.
    """

    listing_id: UUID
    user_id: UUID


@dataclass(frozen=True)
class OperationResult:
    """Output DTO for mutations that only report success."""

    success: bool = True


@dataclass(frozen=True)
class ListListingsQuery:
    """Input DTO for browsing the catalog.

    Attributes:
        player_name: Case-insensitive substring of the player name.
        team_id: Only listings of players from this team.
        min_price: Inclusive lower bound on asking price.
        max_price: Inclusive upper bound on asking price.
        limit: Requested page size; clamped by the use case.
        offset: Requested page offset; clamped by the use case.
    """

    player_name: Optional[str] = None
    team_id: Optional[UUID] = None
    min_price: Optional[int] = None
    max_price: Optional[int] = None
    limit: Optional[int] = None
    offset: Optional[int] = None


@dataclass(frozen=True)
class ListedPlayer:
    """Nested player info of a catalog entry."""

    id: UUID
    name: str
    position: str
    team_id: UUID


@dataclass(frozen=True)
class ListingItem:
    """A single catalog entry."""

    id: UUID
    asking_price: int
    created_at: datetime
    player: ListedPlayer


@dataclass(frozen=True)
class PaginationMeta:
    """Pagination metadata of a catalog page."""

    limit: int
    offset: int
    total: int
    has_more: bool


@dataclass(frozen=True)
class ListingPageResult:
    """Output DTO for a catalog page."""

    data: list[ListingItem]
    pagination: PaginationMeta
    filters: dict[str, Any] = field(default_factory=dict)


# ------------------------------------------------------------------
# Trade executor
# ------------------------------------------------------------------


@dataclass(frozen=True)
class BuyPlayerCommand:
    """Input DTO for purchasing a listed player.

    Attributes:
        listing_id: Listing to buy.
        buyer_user_id: Authenticated caller buying on behalf of their team.
    """

    listing_id: UUID
    buyer_user_id: UUID


@dataclass(frozen=True)
class BuyPlayerResult:
    """Output DTO for a completed purchase."""

    success: bool
    final_price: int
    player_id: UUID
    buyer_team_id: UUID
    seller_team_id: UUID


# ------------------------------------------------------------------
# Identity
# ------------------------------------------------------------------


@dataclass(frozen=True)
class IdentifyCommand:
    """Input DTO for register-or-login."""

    email: str
    password: str


@dataclass(frozen=True)
class IdentifyResult:
    """Output DTO for register-or-login.

    Attributes:
        message: Human-readable outcome.
        token: Signed bearer token for the user.
        user_id: The registered or logged-in user.
        registered: True when a new account was created.
    """

    message: str
    token: str
    user_id: UUID
    registered: bool


@dataclass(frozen=True)
class UserResult:
    """Output DTO for a user profile."""

    id: UUID
    email: str
    team_id: Optional[UUID]
    created_at: Optional[datetime]


# ------------------------------------------------------------------
# Teams and players
# ------------------------------------------------------------------


@dataclass(frozen=True)
class CreateTeamCommand:
    """Input DTO for creating the team and squad of a user."""

    user_id: UUID


@dataclass(frozen=True)
class GetTeamQuery:
    """Input DTO for looking up a team by id or by owner.

    Exactly one of team_id / owner_user_id is expected.
    """

    team_id: Optional[UUID] = None
    owner_user_id: Optional[UUID] = None


@dataclass(frozen=True)
class TeamResult:
    """Output DTO for a team summary."""

    id: UUID
    user_id: UUID
    budget: int
    player_count: int


@dataclass(frozen=True)
class PlayerResult:
    """Output DTO for a player."""

    id: UUID
    team_id: UUID
    name: str
    position: str
    created_at: Optional[datetime]


@dataclass(frozen=True)
class UpdatePlayerCommand:
    """Input DTO for renaming or repositioning an owned player.

    Attributes:
        player_id: Player to update.
        user_id: Authenticated caller; must own the player's team.
        name: New display name, or None to keep.
        position: New position code (GK/DEF/MID/ATT), or None to keep.
    """

    player_id: UUID
    user_id: UUID
    name: Optional[str] = None
    position: Optional[str] = None
