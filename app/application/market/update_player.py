"""
Use case: Rename or reposition an owned player.

Input: UpdatePlayerCommand (player_id, user_id, name?, position?)
Output: PlayerResult
Side effects: Updates the player row, invalidates cached listing pages.
Failure cases: PlayerNotFoundError, NotOwnerError.

Team membership is never changed here; only a purchase moves a player.
"""

import logging

from app.application.market.catalog_cache import invalidate_listing_pages
from app.application.market.dtos import PlayerResult, UpdatePlayerCommand
from app.domain.market.entities import PlayerPosition
from app.domain.market.errors import NotOwnerError, PlayerNotFoundError
from app.domain.market.ports import ListingCache, MarketUnitOfWork

logger = logging.getLogger(__name__)


class UpdatePlayerUseCase:
    """Orchestrates owner-only edits of a player's display attributes."""

    def __init__(self, uow: MarketUnitOfWork, cache: ListingCache) -> None:
        self._uow = uow
        self._cache = cache

    def execute(self, command: UpdatePlayerCommand) -> PlayerResult:
        """Apply the provided fields to the player.

        Raises:
            PlayerNotFoundError: If the player does not exist.
            NotOwnerError: If the caller does not own the player's team.
        """
        with self._uow:
            owned = self._uow.players.get_with_owner(command.player_id, for_update=True)
            if owned is None:
                raise PlayerNotFoundError(command.player_id)
            if owned.owner_user_id != command.user_id:
                raise NotOwnerError("Player")

            player = owned.player
            if command.name is not None:
                player.name = command.name
            if command.position is not None:
                player.position = PlayerPosition(command.position)

            self._uow.players.save(player)
            self._uow.commit()

        # Listing pages embed name and position.
        invalidate_listing_pages(self._cache)
        logger.info("Updated player %s.", player.id)
        return PlayerResult(
            id=player.id,
            team_id=player.team_id,
            name=player.name,
            position=player.position.value,
            created_at=player.created_at,
        )
