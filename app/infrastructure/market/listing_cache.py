"""
Redis cache for listing catalog pages.

Implements:
- Page cache (TTL: 60 seconds by default)
- Tracked key index for all-or-nothing invalidation
- Generation counter, bumped on invalidation and embedded in page keys

Falls back to an in-memory dict if Redis is unavailable. No method raises:
a Redis failure degrades to a miss and is logged.
"""

import json
import logging
import time
from typing import Any

import redis

from app.domain.market.ports import ListingCache

logger = logging.getLogger(__name__)

LISTING_INDEX_KEY = "transfers:index"
LISTING_GENERATION_KEY = "transfers:generation"


class RedisListingCache(ListingCache):
    """Redis-backed listing page cache.

    Every stored key is added to the ``transfers:index`` set, so
    invalidation deletes exactly the pages that were written instead of
    scanning the keyspace.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        ttl_seconds: int = 60,
    ) -> None:
        self._ttl = ttl_seconds
        self._redis: "redis.Redis | None" = None
        self._memory_cache: dict[str, tuple[float, dict]] = {}
        self._memory_generation = 0

        try:
            self._redis = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_timeout=2,
                socket_connect_timeout=2,
            )
            self._redis.ping()
            logger.info("Listing cache connected to Redis at %s", redis_url)
        except redis.RedisError:
            logger.warning("Cannot connect to Redis. Using in-memory listing cache.")
            self._redis = None

    # ------------------------------------------------------------------
    # ListingCache port
    # ------------------------------------------------------------------

    def get(self, key: str) -> dict | None:
        if self._redis is not None:
            try:
                val = self._redis.get(key)
                return json.loads(val) if val is not None else None
            except (redis.RedisError, ValueError):
                logger.warning("Redis GET failed for key %s", key)
                return None

        entry = self._memory_cache.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= time.monotonic():
            del self._memory_cache[key]
            return None
        return value

    def set(self, key: str, value: dict) -> None:
        serialized = json.dumps(value, default=str)
        if self._redis is not None:
            try:
                pipe = self._redis.pipeline()
                pipe.setex(key, self._ttl, serialized)
                pipe.sadd(LISTING_INDEX_KEY, key)
                pipe.expire(LISTING_INDEX_KEY, self._ttl)
                pipe.execute()
            except redis.RedisError:
                logger.warning("Redis SET failed for key %s", key)
            return

        self._memory_cache[key] = (time.monotonic() + self._ttl, json.loads(serialized))

    def generation(self) -> int | None:
        if self._redis is not None:
            try:
                return int(self._redis.get(LISTING_GENERATION_KEY) or 0)
            except (redis.RedisError, ValueError):
                logger.warning("Redis GET failed for the listing generation.")
                return None
        return self._memory_generation

    def invalidate_all(self) -> int:
        if self._redis is not None:
            try:
                keys = list(self._redis.smembers(LISTING_INDEX_KEY))
                pipe = self._redis.pipeline()
                pipe.incr(LISTING_GENERATION_KEY)
                if keys:
                    pipe.delete(*keys, LISTING_INDEX_KEY)
                pipe.execute()
                return len(keys)
            except redis.RedisError:
                logger.warning("Redis invalidation of listing pages failed.")
                return 0

        removed = len(self._memory_cache)
        self._memory_generation += 1
        self._memory_cache.clear()
        return removed

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    def ping(self) -> bool:
        """Return True if the backing store answers."""
        if self._redis is None:
            return True
        try:
            return bool(self._redis.ping())
        except redis.RedisError:
            return False

    def describe(self) -> dict[str, Any]:
        """Return a small status dict for the health endpoint."""
        return {
            "backend": "redis" if self._redis is not None else "memory",
            "ttl_seconds": self._ttl,
        }
