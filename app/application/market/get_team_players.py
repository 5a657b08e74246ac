"""
Use case: List the squad of a team.

Input: team id
Output: list[PlayerResult]
Side effects: None (read-only query).
Failure cases: TeamNotFoundError.
"""

from uuid import UUID

from app.application.market.dtos import PlayerResult
from app.domain.market.errors import TeamNotFoundError
from app.domain.market.ports import MarketUnitOfWork


class GetTeamPlayersUseCase:
    """Returns every player currently owned by a team."""

    def __init__(self, uow: MarketUnitOfWork) -> None:
        self._uow = uow

    def execute(self, team_id: UUID) -> list[PlayerResult]:
        with self._uow:
            if self._uow.teams.get(team_id) is None:
                raise TeamNotFoundError(team_id)
            players = self._uow.players.list_by_team(team_id)

        return [
            PlayerResult(
                id=p.id,
                team_id=p.team_id,
                name=p.name,
                position=p.position.value,
                created_at=p.created_at,
            )
            for p in players
        ]
