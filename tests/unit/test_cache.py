"""Unit tests for the Redis itinerary cache."""

import json
import uuid
from unittest.mock import MagicMock

import redis

from voyage.db.cache import RedisItineraryCache, make_cache_key
from voyage.models.itinerary import Itinerary


def test_make_cache_key() -> None:
    owner = uuid.UUID("00000000-0000-0000-0000-000000000002")

    assert make_cache_key(owner) == "itineraries:00000000-0000-0000-0000-000000000002"


def test_set_writes_documents_with_ttl(owner_id: uuid.UUID, tokyo_trip: Itinerary) -> None:
    client = MagicMock()
    cache = RedisItineraryCache(client, ttl_seconds=3600)

    cache.set(owner_id, [tokyo_trip])

    key, payload = client.set.call_args.args
    assert key == make_cache_key(owner_id)
    assert json.loads(payload) == [tokyo_trip.to_document()]
    assert client.set.call_args.kwargs == {"ex": 3600}


def test_get_parses_cached_list(owner_id: uuid.UUID, tokyo_trip: Itinerary) -> None:
    client = MagicMock()
    client.get.return_value = json.dumps([tokyo_trip.to_document()])

    assert RedisItineraryCache(client, ttl_seconds=60).get(owner_id) == [tokyo_trip]


def test_get_miss_and_redis_error(owner_id: uuid.UUID) -> None:
    client = MagicMock()
    client.get.return_value = None
    cache = RedisItineraryCache(client, ttl_seconds=60)
    assert cache.get(owner_id) is None

    client.get.side_effect = redis.ConnectionError("down")
    assert cache.get(owner_id) is None

    client.set.side_effect = redis.ConnectionError("down")
    cache.set(owner_id, [])
