"""
FastAPI routers for the market bounded context.

All routes delegate to use cases. No business logic here.
Input validation is handled by Pydantic schemas.
Error mapping is handled by centralized error handlers.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic.alias_generators import to_camel

from app.application.market.buy_player import BuyPlayerUseCase
from app.application.market.create_listing import CreateListingUseCase
from app.application.market.dtos import (
    BuyPlayerCommand,
    CreateListingCommand,
    GetTeamQuery,
    IdentifyCommand,
    ListListingsQuery,
    PlayerResult,
    RemoveListingCommand,
    UpdatePlayerCommand,
)
from app.application.market.get_player import GetPlayerUseCase
from app.application.market.get_team import GetTeamUseCase
from app.application.market.get_team_players import GetTeamPlayersUseCase
from app.application.market.get_user import GetUserUseCase
from app.application.market.identify_user import IdentifyUserUseCase
from app.application.market.list_listings import ListListingsUseCase
from app.application.market.remove_listing import RemoveListingUseCase
from app.application.market.retry import run_with_contention_retry
from app.application.market.update_player import UpdatePlayerUseCase
from app.core.config import settings
from app.interfaces.market.dependencies import (
    get_buy_player_use_case,
    get_create_listing_use_case,
    get_current_user_id,
    get_identify_user_use_case,
    get_list_listings_use_case,
    get_player_use_case,
    get_remove_listing_use_case,
    get_team_players_use_case,
    get_team_use_case,
    get_update_player_use_case,
    get_user_use_case,
)
from app.interfaces.market.schemas import (
    PLAYER_NAME_MAX_LEN,
    BuyPlayerRequest,
    BuyPlayerResponse,
    CreateListingRequest,
    ErrorResponse,
    IdentifyRequest,
    IdentifyResponse,
    ListedPlayerSchema,
    ListingItemSchema,
    ListingPageResponse,
    ListingResponse,
    PaginationSchema,
    PlayerResponse,
    SuccessResponse,
    TeamResponse,
    UpdatePlayerRequest,
    UserResponse,
)
from app.shared.security.rate_limiting import HEAVY_RATE_LIMIT, limiter

AUTH_ERRORS = {401: {"model": ErrorResponse}}

auth_router = APIRouter(prefix="/auth", tags=["auth"])
users_router = APIRouter(prefix="/users", tags=["users"])
teams_router = APIRouter(prefix="/teams", tags=["teams"])
players_router = APIRouter(prefix="/players", tags=["players"])
transfers_router = APIRouter(prefix="/transfers", tags=["transfers"])


def _player_response(result: PlayerResult) -> PlayerResponse:
    return PlayerResponse(
        id=result.id,
        team_id=result.team_id,
        name=result.name,
        position=result.position,
        created_at=result.created_at,
    )


# ------------------------------------------------------------------
# Identity
# ------------------------------------------------------------------


@auth_router.post(
    "/identify",
    response_model=IdentifyResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Register or log in",
    description=(
        "Creates the account if the email is unknown (the team is created in "
        "the background), otherwise checks the password. Returns a bearer token."
    ),
)
@limiter.limit(HEAVY_RATE_LIMIT)
def identify(
    request: Request,
    payload: IdentifyRequest,
    use_case: IdentifyUserUseCase = Depends(get_identify_user_use_case),
) -> IdentifyResponse:
    """Register-or-login with email and password."""
    result = use_case.execute(
        IdentifyCommand(email=payload.email, password=payload.password)
    )
    return IdentifyResponse(message=result.message, token=result.token)


@users_router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get a user",
)
def get_user(
    user_id: UUID,
    use_case: GetUserUseCase = Depends(get_user_use_case),
) -> UserResponse:
    result = use_case.execute(user_id)
    return UserResponse(
        id=result.id,
        email=result.email,
        team_id=result.team_id,
        created_at=result.created_at,
    )


# ------------------------------------------------------------------
# Teams and players
# ------------------------------------------------------------------


@teams_router.get(
    "/me",
    response_model=TeamResponse,
    responses={**AUTH_ERRORS, 404: {"model": ErrorResponse}},
    summary="Get the caller's team",
    description="Returns 404 while team creation is still in progress.",
)
def get_my_team(
    user_id: UUID = Depends(get_current_user_id),
    use_case: GetTeamUseCase = Depends(get_team_use_case),
) -> TeamResponse:
    result = use_case.execute(GetTeamQuery(owner_user_id=user_id))
    return TeamResponse(
        id=result.id,
        user_id=result.user_id,
        budget=result.budget,
        player_count=result.player_count,
    )


@teams_router.get(
    "/{team_id}",
    response_model=TeamResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get a team",
)
def get_team(
    team_id: UUID,
    use_case: GetTeamUseCase = Depends(get_team_use_case),
) -> TeamResponse:
    result = use_case.execute(GetTeamQuery(team_id=team_id))
    return TeamResponse(
        id=result.id,
        user_id=result.user_id,
        budget=result.budget,
        player_count=result.player_count,
    )


@teams_router.get(
    "/{team_id}/players",
    response_model=list[PlayerResponse],
    responses={404: {"model": ErrorResponse}},
    summary="List the players of a team",
)
def get_team_players(
    team_id: UUID,
    use_case: GetTeamPlayersUseCase = Depends(get_team_players_use_case),
) -> list[PlayerResponse]:
    return [_player_response(r) for r in use_case.execute(team_id)]


@players_router.get(
    "/{player_id}",
    response_model=PlayerResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get a player",
)
def get_player(
    player_id: UUID,
    use_case: GetPlayerUseCase = Depends(get_player_use_case),
) -> PlayerResponse:
    return _player_response(use_case.execute(player_id))


@players_router.patch(
    "/{player_id}",
    response_model=PlayerResponse,
    responses={**AUTH_ERRORS, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Rename or reposition an owned player",
)
def update_player(
    player_id: UUID,
    payload: UpdatePlayerRequest,
    user_id: UUID = Depends(get_current_user_id),
    use_case: UpdatePlayerUseCase = Depends(get_update_player_use_case),
) -> PlayerResponse:
    command = UpdatePlayerCommand(
        player_id=player_id,
        user_id=user_id,
        name=payload.name,
        position=payload.position.value if payload.position else None,
    )
    return _player_response(use_case.execute(command))


# ------------------------------------------------------------------
# Transfers
# ------------------------------------------------------------------


@transfers_router.get(
    "",
    response_model=ListingPageResponse,
    summary="Browse transfer listings",
    description=(
        "Newest first. Optional filters: case-insensitive player name "
        "substring, seller team and an asking price range."
    ),
)
def list_transfers(
    player_name: Optional[str] = Query(
        default=None, alias="playerName", max_length=PLAYER_NAME_MAX_LEN
    ),
    team_id: Optional[UUID] = Query(default=None, alias="teamId"),
    min_price: Optional[int] = Query(
        default=None, alias="minPrice", ge=0, le=settings.max_asking_price
    ),
    max_price: Optional[int] = Query(
        default=None, alias="maxPrice", ge=0, le=settings.max_asking_price
    ),
    limit: Optional[int] = Query(default=None),
    offset: Optional[int] = Query(default=None),
    use_case: ListListingsUseCase = Depends(get_list_listings_use_case),
) -> ListingPageResponse:
    """Browse listings; limit and offset are clamped to the allowed range."""
    page = use_case.execute(
        ListListingsQuery(
            player_name=player_name,
            team_id=team_id,
            min_price=min_price,
            max_price=max_price,
            limit=limit,
            offset=offset,
        )
    )
    return ListingPageResponse(
        data=[
            ListingItemSchema(
                id=item.id,
                asking_price=item.asking_price,
                created_at=item.created_at,
                player=ListedPlayerSchema(
                    id=item.player.id,
                    name=item.player.name,
                    position=item.player.position,
                    team_id=item.player.team_id,
                ),
            )
            for item in page.data
        ],
        pagination=PaginationSchema(
            limit=page.pagination.limit,
            offset=page.pagination.offset,
            total=page.pagination.total,
            has_more=page.pagination.has_more,
        ),
        filters={to_camel(key): value for key, value in page.filters.items()},
    )


@transfers_router.post(
    "",
    response_model=ListingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        **AUTH_ERRORS,
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="List a player for sale",
)
def create_transfer(
    payload: CreateListingRequest,
    user_id: UUID = Depends(get_current_user_id),
    use_case: CreateListingUseCase = Depends(get_create_listing_use_case),
) -> ListingResponse:
    result = use_case.execute(
        CreateListingCommand(
            player_id=payload.player_id,
            user_id=user_id,
            asking_price=payload.asking_price,
        )
    )
    return ListingResponse(
        id=result.id,
        player_id=result.player_id,
        asking_price=result.asking_price,
        created_at=result.created_at,
    )


@transfers_router.delete(
    "/{listing_id}",
    response_model=SuccessResponse,
    responses={**AUTH_ERRORS, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Withdraw a listing",
)
def remove_transfer(
    listing_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    use_case: RemoveListingUseCase = Depends(get_remove_listing_use_case),
) -> SuccessResponse:
    result = use_case.execute(RemoveListingCommand(listing_id=listing_id, user_id=user_id))
    return SuccessResponse(success=result.success)


@transfers_router.post(
    "/buy",
    response_model=BuyPlayerResponse,
    responses={
        **AUTH_ERRORS,
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Buy a listed player",
    description=(
        "Pays 95% of the asking price from the caller's team to the seller "
        "and moves the player. Retried transparently on lock contention."
    ),
)
@limiter.limit(HEAVY_RATE_LIMIT)
def buy_player(
    request: Request,
    payload: BuyPlayerRequest,
    user_id: UUID = Depends(get_current_user_id),
    use_case: BuyPlayerUseCase = Depends(get_buy_player_use_case),
) -> BuyPlayerResponse:
    """Execute a purchase as one atomic transaction."""
    command = BuyPlayerCommand(listing_id=payload.listing_id, buyer_user_id=user_id)
    result = run_with_contention_retry(
        lambda: use_case.execute(command),
        retries=settings.buy_retry_attempts,
    )
    return BuyPlayerResponse(
        success=result.success,
        final_price=result.final_price,
        player_id=result.player_id,
        buyer_team_id=result.buyer_team_id,
        seller_team_id=result.seller_team_id,
    )


router = APIRouter()
router.include_router(auth_router)
router.include_router(users_router)
router.include_router(teams_router)
router.include_router(players_router)
router.include_router(transfers_router)
