"""
Dependency injection for the market bounded context.

Provides FastAPI dependency functions that wire infrastructure
adapters into use cases via constructor injection.
These are the composition root for the market context; tests swap
adapters through ``app.dependency_overrides``.
"""

from functools import lru_cache
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.application.market.buy_player import BuyPlayerUseCase
from app.application.market.create_listing import CreateListingUseCase
from app.application.market.create_team import CreateTeamUseCase
from app.application.market.get_player import GetPlayerUseCase
from app.application.market.get_team import GetTeamUseCase
from app.application.market.get_team_players import GetTeamPlayersUseCase
from app.application.market.get_user import GetUserUseCase
from app.application.market.identify_user import IdentifyUserUseCase
from app.application.market.list_listings import ListListingsUseCase
from app.application.market.remove_listing import RemoveListingUseCase
from app.application.market.update_player import UpdatePlayerUseCase
from app.core.config import settings
from app.domain.market.errors import AuthenticationError
from app.domain.market.ports import (
    ListingCache,
    MarketUnitOfWork,
    PasswordHasher,
    TeamCreationQueue,
    TokenIssuer,
)
from app.infrastructure.market.database import build_engine, build_session_factory
from app.infrastructure.market.listing_cache import RedisListingCache
from app.infrastructure.market.security import BcryptPasswordHasher, JwtTokenIssuer
from app.infrastructure.market.team_creation_queue import (
    CeleryTeamCreationQueue,
    InlineTeamCreationQueue,
)
from app.infrastructure.market.unit_of_work import SqlAlchemyUnitOfWork

bearer_scheme = HTTPBearer(auto_error=False)


# ------------------------------------------------------------------
# Adapters (process-wide)
# ------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Build the SQLAlchemy engine from application settings."""
    return build_engine(
        settings.database_url,
        echo=settings.db_echo,
        lock_timeout_ms=settings.db_lock_timeout_ms,
    )


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker[Session]:
    return build_session_factory(get_engine())


@lru_cache(maxsize=1)
def get_listing_cache() -> RedisListingCache:
    return RedisListingCache(
        redis_url=settings.redis_url,
        ttl_seconds=settings.listing_cache_ttl_seconds,
    )


@lru_cache(maxsize=1)
def get_password_hasher() -> PasswordHasher:
    return BcryptPasswordHasher()


@lru_cache(maxsize=1)
def get_token_issuer() -> TokenIssuer:
    return JwtTokenIssuer(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expire_minutes=settings.jwt_expire_minutes,
    )


def get_unit_of_work() -> MarketUnitOfWork:
    """Return a fresh unit of work bound to the shared session factory."""
    return SqlAlchemyUnitOfWork(get_session_factory())


def get_team_creation_queue(
    uow: MarketUnitOfWork = Depends(get_unit_of_work),
) -> TeamCreationQueue:
    """Select the team creation queue configured by ``team_creation_mode``."""
    if settings.team_creation_mode == "inline":
        return InlineTeamCreationQueue(
            CreateTeamUseCase(uow, rules=settings.market_rules())
        )

    from app.workers.tasks import create_team_for_user

    return CeleryTeamCreationQueue(create_team_for_user)


# ------------------------------------------------------------------
# Identity
# ------------------------------------------------------------------


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    tokens: TokenIssuer = Depends(get_token_issuer),
) -> UUID:
    """Resolve the caller from the ``Authorization: Bearer`` header.

    Raises:
        AuthenticationError: If the header is missing or the token is invalid.
    """
    if credentials is None:
        raise AuthenticationError("Not authenticated")
    return tokens.verify(credentials.credentials)


# ------------------------------------------------------------------
# Use cases
# ------------------------------------------------------------------


def get_identify_user_use_case(
    uow: MarketUnitOfWork = Depends(get_unit_of_work),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenIssuer = Depends(get_token_issuer),
    team_queue: TeamCreationQueue = Depends(get_team_creation_queue),
) -> IdentifyUserUseCase:
    """Build IdentifyUserUseCase with its infrastructure dependencies."""
    return IdentifyUserUseCase(
        uow=uow, hasher=hasher, tokens=tokens, team_queue=team_queue
    )


def get_list_listings_use_case(
    uow: MarketUnitOfWork = Depends(get_unit_of_work),
    cache: ListingCache = Depends(get_listing_cache),
) -> ListListingsUseCase:
    """Build ListListingsUseCase with its infrastructure dependencies."""
    return ListListingsUseCase(uow, cache, pagination=settings.pagination_rules())


def get_create_listing_use_case(
    uow: MarketUnitOfWork = Depends(get_unit_of_work),
    cache: ListingCache = Depends(get_listing_cache),
) -> CreateListingUseCase:
    """Build CreateListingUseCase with its infrastructure dependencies."""
    return CreateListingUseCase(uow, cache)


def get_remove_listing_use_case(
    uow: MarketUnitOfWork = Depends(get_unit_of_work),
    cache: ListingCache = Depends(get_listing_cache),
) -> RemoveListingUseCase:
    """Build RemoveListingUseCase with its infrastructure dependencies."""
    return RemoveListingUseCase(uow, cache)


def get_buy_player_use_case(
    uow: MarketUnitOfWork = Depends(get_unit_of_work),
    cache: ListingCache = Depends(get_listing_cache),
) -> BuyPlayerUseCase:
    """Build BuyPlayerUseCase with its infrastructure dependencies."""
    return BuyPlayerUseCase(uow, cache, rules=settings.market_rules())


def get_user_use_case(
    uow: MarketUnitOfWork = Depends(get_unit_of_work),
) -> GetUserUseCase:
    return GetUserUseCase(uow)


def get_team_use_case(
    uow: MarketUnitOfWork = Depends(get_unit_of_work),
) -> GetTeamUseCase:
    return GetTeamUseCase(uow)


def get_team_players_use_case(
    uow: MarketUnitOfWork = Depends(get_unit_of_work),
) -> GetTeamPlayersUseCase:
    return GetTeamPlayersUseCase(uow)


def get_player_use_case(
    uow: MarketUnitOfWork = Depends(get_unit_of_work),
) -> GetPlayerUseCase:
    return GetPlayerUseCase(uow)


def get_update_player_use_case(
    uow: MarketUnitOfWork = Depends(get_unit_of_work),
    cache: ListingCache = Depends(get_listing_cache),
) -> UpdatePlayerUseCase:
    return UpdatePlayerUseCase(uow, cache)
