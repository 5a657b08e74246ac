"""
Cache helpers shared by the listing catalog use cases.

Keys are derived from the cache generation and the normalized filter
set, so equivalent requests share an entry. Invalidation is
all-or-nothing: every mutation advances the generation and drops every
tracked page.
"""

import json
import logging
from typing import Any

from app.domain.market.ports import ListingCache

logger = logging.getLogger(__name__)

LISTING_PAGE_PREFIX = "transfers:list:"


def listing_page_key(filters: dict[str, Any], generation: int = 0) -> str:
    """Return the cache key for a normalized filter set."""
    return f"{LISTING_PAGE_PREFIX}{generation}:" + json.dumps(
        filters, sort_keys=True, default=str
    )


def invalidate_listing_pages(cache: ListingCache) -> None:
    """Drop all cached listing pages.

    Runs after the store transaction committed; a failure here only
    leaves stale pages until their TTL expires, so it is logged and
    swallowed.
    """
    try:
        removed = cache.invalidate_all()
        logger.debug("Invalidated %d listing cache keys.", removed)
    except Exception:
        logger.warning("Listing cache invalidation failed.", exc_info=True)
