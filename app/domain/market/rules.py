"""
Pure business rules for transfers.

Price settlement, roster bounds and pagination clamping live here so that
both the use cases and the tests exercise a single definition.
No IO, no framework imports.
"""

from dataclasses import dataclass
from uuid import UUID

from app.domain.market.errors import RosterLimitError

MIN_ROSTER_SIZE = 15
MAX_ROSTER_SIZE = 25
SELLER_RECEIVES_PERCENT = 95
STARTING_BUDGET = 5_000_000


@dataclass(frozen=True)
class MarketRules:
    """Tunable constants of the transfer market."""

    min_roster_size: int = MIN_ROSTER_SIZE
    max_roster_size: int = MAX_ROSTER_SIZE
    seller_receives_percent: int = SELLER_RECEIVES_PERCENT
    starting_budget: int = STARTING_BUDGET


@dataclass(frozen=True)
class PaginationRules:
    """Bounds applied to catalog page requests."""

    default_limit: int = 20
    min_limit: int = 1
    max_limit: int = 100
    max_offset: int = 1_000_000


def compute_final_price(asking_price: int, seller_receives_percent: int) -> int:
    """Return the settled price of a trade.

    Integer floor division, never rounding, so the retained difference
    is always >= 0.

    Examples:
        >>> compute_final_price(1000, 95)
        950
        >>> compute_final_price(999, 95)
        949
    """
    return asking_price * seller_receives_percent // 100


def check_roster_bounds(
    seller_count: int, buyer_count: int, rules: MarketRules
) -> None:
    """Raise RosterLimitError if moving one player breaks either roster.

    Args:
        seller_count: Current player count of the selling team.
        buyer_count: Current player count of the buying team.
        rules: Market constants carrying the bounds.
    """
    if seller_count - 1 < rules.min_roster_size:
        raise RosterLimitError("seller", rules.min_roster_size)
    if buyer_count + 1 > rules.max_roster_size:
        raise RosterLimitError("buyer", rules.max_roster_size)


def clamp_page(
    limit: int | None, offset: int | None, rules: PaginationRules
) -> tuple[int, int]:
    """Clamp a requested page window into the configured range."""
    take = limit if limit is not None else rules.default_limit
    take = min(max(take, rules.min_limit), rules.max_limit)
    skip = min(max(offset or 0, 0), rules.max_offset)
    return take, skip


def team_lock_order(*team_ids: UUID) -> list[UUID]:
    """Return the distinct team ids in the order their rows must be locked.

    Every transaction that locks more than one team row acquires the locks
    in ascending id order, after any listing/player locks it needs.
    """
    return sorted(set(team_ids), key=lambda team_id: team_id.hex)
