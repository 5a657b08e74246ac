"""
Use case: List a player on the transfer market.

Input: CreateListingCommand (player_id, user_id, asking_price)
Output: ListingResult
Side effects: Inserts a transfer listing; invalidates cached catalog pages.
Failure cases: PlayerNotFoundError, NotOwnerError, PlayerAlreadyListedError.

The roster bound is not checked here: a team at the minimum size may
still list a player. The bound is enforced when a purchase executes.
"""

import logging

from app.application.market.catalog_cache import invalidate_listing_pages
from app.application.market.dtos import CreateListingCommand, ListingResult
from app.domain.market.errors import (
    NotOwnerError,
    PlayerAlreadyListedError,
    PlayerNotFoundError,
)
from app.domain.market.ports import ListingCache, MarketUnitOfWork

logger = logging.getLogger(__name__)


class CreateListingUseCase:
    """Orchestrates creation of a transfer listing."""

    def __init__(self, uow: MarketUnitOfWork, cache: ListingCache) -> None:
        self._uow = uow
        self._cache = cache

    def execute(self, command: CreateListingCommand) -> ListingResult:
        """Create a listing for a player owned by the caller.

        Args:
            command: Player, caller and asking price.

        Returns:
            The created listing.

        Raises:
            PlayerNotFoundError: If the player does not exist.
            NotOwnerError: If the caller does not own the player's team.
            PlayerAlreadyListedError: If the player already has a listing.
        """
        with self._uow:
            owned = self._uow.players.get_with_owner(command.player_id, for_update=True)
            if owned is None:
                raise PlayerNotFoundError(command.player_id)

            if owned.owner_user_id is None or owned.owner_user_id != command.user_id:
                logger.warning(
                    "User %s tried to list player %s they do not own.",
                    command.user_id,
                    command.player_id,
                )
                raise NotOwnerError("Player")

            if self._uow.listings.find_by_player(command.player_id) is not None:
                raise PlayerAlreadyListedError(command.player_id)

            listing = self._uow.listings.add(command.player_id, command.asking_price)
            self._uow.commit()

        invalidate_listing_pages(self._cache)
        logger.info(
            "Created listing %s for player %s at %d.",
            listing.id,
            listing.player_id,
            listing.asking_price,
        )

        return ListingResult(
            id=listing.id,
            player_id=listing.player_id,
            asking_price=listing.asking_price,
            created_at=listing.created_at,
        )
