"""
Use case: Look up a single player.

Input: player id
Output: PlayerResult
Side effects: None (read-only query).
Failure cases: PlayerNotFoundError.
"""

from uuid import UUID

from app.application.market.dtos import PlayerResult
from app.domain.market.errors import PlayerNotFoundError
from app.domain.market.ports import MarketUnitOfWork


class GetPlayerUseCase:
    def __init__(self, uow: MarketUnitOfWork) -> None:
        self._uow = uow

    def execute(self, player_id: UUID) -> PlayerResult:
        with self._uow:
            owned = self._uow.players.get_with_owner(player_id)
        if owned is None:
            raise PlayerNotFoundError(player_id)

        player = owned.player
        return PlayerResult(
            id=player.id,
            team_id=player.team_id,
            name=player.name,
            position=player.position.value,
            created_at=player.created_at,
        )
