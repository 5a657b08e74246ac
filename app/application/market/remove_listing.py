"""
Use case: Withdraw a transfer listing.

Input: RemoveListingCommand (listing_id, user_id)
Output: OperationResult
Side effects: Deletes the listing; invalidates cached catalog pages.
Failure cases: ListingNotFoundError, NotOwnerError.
"""

import logging

from app.application.market.catalog_cache import invalidate_listing_pages
from app.application.market.dtos import OperationResult, RemoveListingCommand
from app.domain.market.errors import ListingNotFoundError, NotOwnerError
from app.domain.market.ports import ListingCache, MarketUnitOfWork

logger = logging.getLogger(__name__)


class RemoveListingUseCase:
    """Orchestrates removal of a listing by the selling team's owner."""

    def __init__(self, uow: MarketUnitOfWork, cache: ListingCache) -> None:
        self._uow = uow
        self._cache = cache

    def execute(self, command: RemoveListingCommand) -> OperationResult:
        """Remove a listing owned by the caller.

        The listing row is locked first, so a removal racing a purchase
        either wins or finds the listing gone.

        Raises:
            ListingNotFoundError: If the listing does not exist.
            NotOwnerError: If the caller does not own the seller team.
        """
        with self._uow:
            resolved = self._uow.listings.get_for_update(command.listing_id)
            if resolved is None:
                raise ListingNotFoundError(command.listing_id)

            if resolved.seller_user_id != command.user_id:
                logger.warning(
                    "User %s tried to remove listing %s they do not own.",
                    command.user_id,
                    command.listing_id,
                )
                raise NotOwnerError("Listing")

            self._uow.listings.delete(command.listing_id)
            self._uow.commit()

        invalidate_listing_pages(self._cache)
        logger.info("Removed listing %s.", command.listing_id)
        return OperationResult(success=True)
