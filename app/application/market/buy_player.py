"""
Use case: Buy a listed player.

Input: BuyPlayerCommand (listing_id, buyer_user_id)
Output: BuyPlayerResult (final price, player, buyer and seller teams)
Side effects:
    - Debits the buyer team and credits the seller team.
    - Moves the player to the buyer team.
    - Deletes the listing and appends a transfer history record.
    - Invalidates cached catalog pages after commit.
Failure cases:
    - ListingNotFoundError: listing missing (or just bought/removed).
    - SelfPurchaseError, MissingTeamError, OrphanPlayerError,
      RosterLimitError, InsufficientFundsError: business rule violations.
    - StoreContentionError: lock wait gave up; safe to retry.

Every failure rolls back the whole unit of work, so budgets, rosters and
the listing are left exactly as they were.

Lock order (the only order used anywhere in the service):
    1. listing row, then its player row (one statement)
    2. team rows, ascending by id (see rules.team_lock_order)
Trades on disjoint listings and teams take no common lock.
"""

import logging

from app.application.market.catalog_cache import invalidate_listing_pages
from app.application.market.dtos import BuyPlayerCommand, BuyPlayerResult
from app.domain.market.errors import (
    InsufficientFundsError,
    ListingNotFoundError,
    MarketDomainError,
    MissingTeamError,
    OrphanPlayerError,
    SelfPurchaseError,
)
from app.domain.market.ports import ListingCache, MarketUnitOfWork
from app.domain.market.rules import (
    MarketRules,
    check_roster_bounds,
    compute_final_price,
)

logger = logging.getLogger(__name__)


class BuyPlayerUseCase:
    """Executes a purchase as a single atomic unit."""

    def __init__(
        self,
        uow: MarketUnitOfWork,
        cache: ListingCache,
        rules: MarketRules | None = None,
    ) -> None:
        self._uow = uow
        self._cache = cache
        self._rules = rules or MarketRules()

    def execute(self, command: BuyPlayerCommand) -> BuyPlayerResult:
        """Run the purchase.

        Args:
            command: Listing to buy and the buying user.

        Returns:
            The settled trade.
        """
        logger.info(
            "Transfer initiated for listing=%s, buyer=%s",
            command.listing_id,
            command.buyer_user_id,
        )
        try:
            result = self._execute_atomic(command)
        except MarketDomainError as exc:
            logger.warning(
                "Transfer failed for listing=%s, buyer=%s: %s",
                command.listing_id,
                command.buyer_user_id,
                exc.message,
            )
            raise

        invalidate_listing_pages(self._cache)
        logger.info(
            "Transfer completed: player=%s from=%s to=%s price=%d",
            result.player_id,
            result.seller_team_id,
            result.buyer_team_id,
            result.final_price,
        )
        return result

    def _execute_atomic(self, command: BuyPlayerCommand) -> BuyPlayerResult:
        with self._uow:
            resolved = self._uow.listings.get_for_update(command.listing_id)
            if resolved is None:
                raise ListingNotFoundError(command.listing_id)

            player = resolved.player
            if resolved.seller_team_id is None or resolved.seller_user_id is None:
                raise OrphanPlayerError(player.id)

            if resolved.seller_user_id == command.buyer_user_id:
                raise SelfPurchaseError()

            buyer_team = self._uow.teams.get_by_user(command.buyer_user_id)
            if buyer_team is None:
                raise MissingTeamError("Buyer")

            locked = self._uow.teams.lock_in_order(
                [buyer_team.id, resolved.seller_team_id]
            )
            buyer = locked.get(buyer_team.id)
            seller = locked.get(resolved.seller_team_id)
            if buyer is None:
                raise MissingTeamError("Buyer")
            if seller is None:
                raise MissingTeamError("Seller")

            check_roster_bounds(
                seller_count=self._uow.players.count_by_team(seller.id),
                buyer_count=self._uow.players.count_by_team(buyer.id),
                rules=self._rules,
            )

            final_price = compute_final_price(
                resolved.listing.asking_price, self._rules.seller_receives_percent
            )
            if buyer.budget < final_price:
                raise InsufficientFundsError(
                    required=final_price, available=buyer.budget
                )

            buyer.budget -= final_price
            seller.budget += final_price
            player.team_id = buyer.id

            self._uow.players.save(player)
            self._uow.teams.save(buyer)
            self._uow.teams.save(seller)
            self._uow.listings.delete(resolved.listing.id)
            self._uow.history.append(
                player_id=player.id,
                from_team_id=seller.id,
                to_team_id=buyer.id,
                price=final_price,
            )
            self._uow.commit()

        return BuyPlayerResult(
            success=True,
            final_price=final_price,
            player_id=player.id,
            buyer_team_id=buyer.id,
            seller_team_id=seller.id,
        )
