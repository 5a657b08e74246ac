"""
Use case: Look up a team summary.

Input: GetTeamQuery (team_id or owner_user_id)
Output: TeamResult
Side effects: None (read-only query).
Failure cases: TeamNotFoundError.
"""

from app.application.market.dtos import GetTeamQuery, TeamResult
from app.domain.market.errors import TeamNotFoundError
from app.domain.market.ports import MarketUnitOfWork


class GetTeamUseCase:
    """Returns a team with its current budget and roster size."""

    def __init__(self, uow: MarketUnitOfWork) -> None:
        self._uow = uow

    def execute(self, query: GetTeamQuery) -> TeamResult:
        with self._uow:
            if query.team_id is not None:
                team = self._uow.teams.get(query.team_id)
                missing = query.team_id
            else:
                team = self._uow.teams.get_by_user(query.owner_user_id)
                missing = f"owned by user {query.owner_user_id}"
            if team is None:
                raise TeamNotFoundError(missing)

            return TeamResult(
                id=team.id,
                user_id=team.user_id,
                budget=team.budget,
                player_count=self._uow.players.count_by_team(team.id),
            )
