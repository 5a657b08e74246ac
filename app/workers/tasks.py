"""
Celery tasks.

teams.create_team_for_user:
    Creates the team and starting squad of a freshly registered user.
    Retried on store contention; a retry that finds the team already
    created returns it unchanged.
"""

import logging
from functools import lru_cache
from uuid import UUID

from app.application.market.create_team import CreateTeamUseCase
from app.application.market.dtos import CreateTeamCommand
from app.core.config import settings
from app.domain.market.errors import StoreContentionError
from app.infrastructure.market.database import build_engine, build_session_factory
from app.infrastructure.market.unit_of_work import SqlAlchemyUnitOfWork
from app.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _create_team_use_case() -> CreateTeamUseCase:
    engine = build_engine(
        settings.database_url,
        echo=settings.db_echo,
        lock_timeout_ms=settings.db_lock_timeout_ms,
    )
    uow = SqlAlchemyUnitOfWork(build_session_factory(engine))
    return CreateTeamUseCase(uow, rules=settings.market_rules())


@celery_app.task(
    name="teams.create_team_for_user",
    autoretry_for=(StoreContentionError,),
    retry_backoff=True,
    max_retries=5,
)
def create_team_for_user(user_id: str) -> dict:
    """Create the team of a user and return a summary of it."""
    team = _create_team_use_case().execute(CreateTeamCommand(user_id=UUID(user_id)))
    logger.info("Team %s ready for user %s", team.id, user_id)
    return {
        "team_id": str(team.id),
        "user_id": str(team.user_id),
        "budget": team.budget,
        "player_count": team.player_count,
    }
