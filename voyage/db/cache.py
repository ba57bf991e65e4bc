"""Redis-backed local fallback cache for itinerary lists."""

import json
import logging
import uuid

import redis

from voyage.models.itinerary import Itinerary

logger = logging.getLogger(__name__)


def make_cache_key(owner_id: uuid.UUID) -> str:
    """Cache key for one owner's itinerary list."""
    return f"itineraries:{owner_id}"


class RedisItineraryCache:
    """Redis implementation of ItineraryCache using SET + EX."""

    def __init__(self, redis_client: redis.Redis, ttl_seconds: int) -> None:
        """Initialize cache.

        Args:
            redis_client: Redis client
            ttl_seconds: Expiry for each cached list
        """
        self._redis = redis_client
        self._ttl_seconds = ttl_seconds

    def get(self, owner_id: uuid.UUID) -> list[Itinerary] | None:
        """Cached list, or None when missing or Redis is unreachable."""
        try:
            raw = self._redis.get(make_cache_key(owner_id))
        except redis.RedisError:
            logger.warning("Itinerary cache read failed", exc_info=True)
            return None

        if raw is None:
            return None

        return [Itinerary.from_document(d) for d in json.loads(raw)]

    def set(self, owner_id: uuid.UUID, itineraries: list[Itinerary]) -> None:
        """Replace the cached list."""
        payload = json.dumps([i.to_document() for i in itineraries], ensure_ascii=False)
        try:
            self._redis.set(make_cache_key(owner_id), payload, ex=self._ttl_seconds)
        except redis.RedisError:
            logger.warning("Itinerary cache write failed", exc_info=True)
