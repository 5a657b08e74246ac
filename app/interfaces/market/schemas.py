"""
Pydantic schemas for market API request/response validation.

These schemas enforce input validation and define the API contract.
JSON field names are camelCase on the wire (``askingPrice``) and
snake_case in Python (``asking_price``); both are accepted on input.
No business logic belongs here.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from app.core.config import settings
from app.domain.market.entities import PlayerPosition

PLAYER_NAME_MAX_LEN = 100
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128


class CamelModel(BaseModel):
    """Base schema serializing field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ------------------------------------------------------------------
# Shared
# ------------------------------------------------------------------


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    cache: str | None = None


class ReadinessResponse(BaseModel):
    """Per-dependency readiness. ``status`` follows the entity store check."""

    status: str
    checks: dict[str, str]


class ErrorResponse(BaseModel):
    """Standard error response returned by all error handlers."""

    error: str
    code: str
    detail: str | None = None
    retryable: bool | None = None


class SuccessResponse(BaseModel):
    """Body of mutations that only report success."""

    success: bool = True


# ------------------------------------------------------------------
# Identity
# ------------------------------------------------------------------


class IdentifyRequest(BaseModel):
    """Request schema for register-or-login.

    Attributes:
        email: Account email; compared case-insensitively.
        password: Plain password (6-128 chars). Never logged.
    """

    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class IdentifyResponse(BaseModel):
    """Response schema for register-or-login."""

    message: str
    token: str


class UserResponse(CamelModel):
    id: UUID
    email: str
    team_id: Optional[UUID] = None
    created_at: Optional[datetime] = None


# ------------------------------------------------------------------
# Teams and players
# ------------------------------------------------------------------


class TeamResponse(CamelModel):
    id: UUID
    user_id: UUID
    budget: int
    player_count: int


class PlayerResponse(CamelModel):
    id: UUID
    team_id: UUID
    name: str
    position: PlayerPosition
    created_at: Optional[datetime] = None


class UpdatePlayerRequest(CamelModel):
    """Request schema for renaming or repositioning a player.

    Omitted fields are left unchanged.
    """

    name: Optional[str] = Field(
        default=None, min_length=1, max_length=PLAYER_NAME_MAX_LEN
    )
    position: Optional[PlayerPosition] = None


# ------------------------------------------------------------------
# Transfers
# ------------------------------------------------------------------


class CreateListingRequest(CamelModel):
    """Request schema for listing a player.

    Attributes:
        player_id: Player to put on the market.
        asking_price: Whole currency units, 1 to the configured maximum.
    """

    player_id: UUID
    asking_price: int = Field(..., ge=1, le=settings.max_asking_price, strict=True)


class ListingResponse(CamelModel):
    id: UUID
    player_id: UUID
    asking_price: int
    created_at: datetime


class ListedPlayerSchema(CamelModel):
    id: UUID
    name: str
    position: PlayerPosition
    team_id: UUID


class ListingItemSchema(CamelModel):
    id: UUID
    asking_price: int
    created_at: datetime
    player: ListedPlayerSchema


class PaginationSchema(CamelModel):
    limit: int
    offset: int
    total: int
    has_more: bool


class ListingPageResponse(CamelModel):
    """One catalog page, newest listing first."""

    data: list[ListingItemSchema]
    pagination: PaginationSchema
    filters: dict[str, Any]


class BuyPlayerRequest(CamelModel):
    listing_id: UUID


class BuyPlayerResponse(CamelModel):
    """Settled purchase. ``final_price`` is what moved between budgets."""

    success: bool
    final_price: int
    player_id: UUID
    buyer_team_id: UUID
    seller_team_id: UUID
