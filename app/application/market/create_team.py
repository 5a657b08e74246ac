"""
Use case: Create the team and starting squad of a user.

Input: CreateTeamCommand (user_id)
Output: TeamResult
Side effects: Inserts one team and its generated players.
Failure cases: UserNotFoundError.

Idempotent: the user row is locked and an existing team is returned as-is,
so a redelivered job never creates a second team.
"""

import logging

from app.application.market.dtos import CreateTeamCommand, TeamResult
from app.domain.market.errors import UserNotFoundError
from app.domain.market.ports import MarketUnitOfWork
from app.domain.market.roster_generator import RosterGenerator
from app.domain.market.rules import MarketRules

logger = logging.getLogger(__name__)


class CreateTeamUseCase:
    """Orchestrates team creation for a newly registered user."""

    def __init__(
        self,
        uow: MarketUnitOfWork,
        generator: RosterGenerator | None = None,
        rules: MarketRules | None = None,
    ) -> None:
        self._uow = uow
        self._generator = generator or RosterGenerator()
        self._rules = rules or MarketRules()

    def execute(self, command: CreateTeamCommand) -> TeamResult:
        """Create (or return the existing) team for a user."""
        with self._uow:
            user = self._uow.users.get(command.user_id, for_update=True)
            if user is None:
                raise UserNotFoundError(command.user_id)

            existing = self._uow.teams.get_by_user(command.user_id)
            if existing is not None:
                logger.info(
                    "User %s already has team %s; skipping creation.",
                    command.user_id,
                    existing.id,
                )
                return TeamResult(
                    id=existing.id,
                    user_id=existing.user_id,
                    budget=existing.budget,
                    player_count=self._uow.players.count_by_team(existing.id),
                )

            team = self._uow.teams.add(command.user_id, self._rules.starting_budget)
            players = self._uow.players.add_squad(team.id, self._generator.generate())
            self._uow.commit()

        logger.info(
            "Created team %s with %d players for user %s.",
            team.id,
            len(players),
            command.user_id,
        )
        return TeamResult(
            id=team.id,
            user_id=team.user_id,
            budget=team.budget,
            player_count=len(players),
        )
