"""
Use case: Browse active transfer listings.

Input: ListListingsQuery (filters, limit, offset)
Output: ListingPageResult
Side effects: Populates the listing cache on a miss.
Failure cases: None. Cache failures degrade to a store read.

The cache generation is read before the store. A page whose read raced a
committed mutation is written under the old generation and never served.
"""

import logging
from datetime import datetime
from typing import Any
from uuid import UUID

from app.application.market.catalog_cache import listing_page_key
from app.application.market.dtos import (
    ListedPlayer,
    ListingItem,
    ListingPageResult,
    ListListingsQuery,
    PaginationMeta,
)
from app.domain.market.ports import ListingCache, ListingFilters, MarketUnitOfWork
from app.domain.market.rules import PaginationRules, clamp_page

logger = logging.getLogger(__name__)


class ListListingsUseCase:
    """Read-through cached query over the listing catalog."""

    def __init__(
        self,
        uow: MarketUnitOfWork,
        cache: ListingCache,
        pagination: PaginationRules | None = None,
    ) -> None:
        self._uow = uow
        self._cache = cache
        self._pagination = pagination or PaginationRules()

    def execute(self, query: ListListingsQuery) -> ListingPageResult:
        """Return one page of listings, newest first.

        Args:
            query: Filters and the requested page window.

        Returns:
            The page with pagination metadata and the applied filters.
        """
        limit, offset = clamp_page(query.limit, query.offset, self._pagination)
        filters = ListingFilters(
            player_name=query.player_name or None,
            team_id=query.team_id,
            min_price=query.min_price,
            max_price=query.max_price,
        )
        applied = _applied_filters(filters, limit, offset)
        generation = self._cache.generation()
        key = listing_page_key(applied, generation or 0)

        if generation is not None:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug("Cache hit for transfers list: %s", key)
                return _page_from_payload(cached)

        with self._uow:
            views, total = self._uow.listings.search(filters, limit, offset)

        page = ListingPageResult(
            data=[
                ListingItem(
                    id=view.id,
                    asking_price=view.asking_price,
                    created_at=view.created_at,
                    player=ListedPlayer(
                        id=view.player_id,
                        name=view.player_name,
                        position=view.player_position.value,
                        team_id=view.team_id,
                    ),
                )
                for view in views
            ],
            pagination=PaginationMeta(
                limit=limit,
                offset=offset,
                total=total,
                has_more=offset + len(views) < total,
            ),
            filters=applied,
        )

        if generation is not None:
            self._cache.set(key, _page_to_payload(page))
            logger.debug("Cached transfers list: %s", key)
        return page


def _applied_filters(
    filters: ListingFilters, limit: int, offset: int
) -> dict[str, Any]:
    """Return the normalized, JSON-friendly filter set used as cache key."""
    return {
        "player_name": filters.player_name,
        "team_id": str(filters.team_id) if filters.team_id else None,
        "min_price": filters.min_price,
        "max_price": filters.max_price,
        "limit": limit,
        "offset": offset,
    }


def _page_to_payload(page: ListingPageResult) -> dict[str, Any]:
    return {
        "data": [
            {
                "id": str(item.id),
                "asking_price": item.asking_price,
                "created_at": item.created_at.isoformat(),
                "player": {
                    "id": str(item.player.id),
                    "name": item.player.name,
                    "position": item.player.position,
                    "team_id": str(item.player.team_id),
                },
            }
            for item in page.data
        ],
        "pagination": {
            "limit": page.pagination.limit,
            "offset": page.pagination.offset,
            "total": page.pagination.total,
            "has_more": page.pagination.has_more,
        },
        "filters": page.filters,
    }


def _page_from_payload(payload: dict[str, Any]) -> ListingPageResult:
    meta = payload["pagination"]
    return ListingPageResult(
        data=[
            ListingItem(
                id=UUID(item["id"]),
                asking_price=item["asking_price"],
                created_at=datetime.fromisoformat(item["created_at"]),
                player=ListedPlayer(
                    id=UUID(item["player"]["id"]),
                    name=item["player"]["name"],
                    position=item["player"]["position"],
                    team_id=UUID(item["player"]["team_id"]),
                ),
            )
            for item in payload["data"]
        ],
        pagination=PaginationMeta(
            limit=meta["limit"],
            offset=meta["offset"],
            total=meta["total"],
            has_more=meta["has_more"],
        ),
        filters=payload.get("filters", {}),
    )
