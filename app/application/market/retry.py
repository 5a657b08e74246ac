"""
Bounded retry for store contention.

Only StoreContentionError is retried: the failed attempt rolled back
and had no effect. Business rule failures propagate on first raise.
"""

import logging
import time
from typing import Callable, TypeVar

from app.domain.market.errors import StoreContentionError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_with_contention_retry(
    operation: Callable[[], T],
    retries: int = 2,
    backoff_seconds: float = 0.05,
) -> T:
    """Run an operation, retrying it on StoreContentionError.

    Args:
        operation: Zero-argument callable running one full unit of work.
        retries: Extra attempts after the first one.
        backoff_seconds: Base delay, doubled after each failed attempt.

    Returns:
        The operation's result.

    Raises:
        StoreContentionError: If every attempt hit contention.
    """
    attempt = 0
    while True:
        try:
            return operation()
        except StoreContentionError as exc:
            if attempt >= retries:
                raise
            delay = backoff_seconds * (2 ** attempt)
            attempt += 1
            logger.warning(
                "Store contention (%s); retry %d/%d in %.2fs.",
                exc.reason,
                attempt,
                retries,
                delay,
            )
            time.sleep(delay)
