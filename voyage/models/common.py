"""Common types and helpers shared across all document models."""

import random
import string
import time
from enum import Enum
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

MAP_SEARCH_URL = "https://www.google.com/maps/search/?api=1&query={query}"

_ID_ALPHABET = string.ascii_lowercase + string.digits


class Currency(str, Enum):
    """Supported currencies. Amounts are never converted between them."""

    TWD = "TWD"
    JPY = "JPY"
    USD = "USD"


class TransportMode(str, Enum):
    """Transport variant tag."""

    flight = "飛機"
    metro = "地鐵"
    bus = "巴士"
    car_rental = "租車"


class ShoppingPriority(str, Enum):
    """Shopping list priority."""

    must_buy = "重要必買"
    optional = "不買沒關係"
    local_food = "在地美食"


class DocumentModel(BaseModel):
    """Base for everything stored inside the itinerary JSON document."""

    model_config = ConfigDict(populate_by_name=True)


class CamelDocumentModel(DocumentModel):
    """Document model whose stored keys are camelCase."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


def new_id() -> str:
    """Short random id for child entries (days, activities)."""
    return "".join(random.choices(_ID_ALPHABET, k=9))


def timestamp_id(ms: int | None = None) -> str:
    """Epoch-millisecond id for top-level entries.

    A short random tail keeps ids distinct when several entries are created
    within the same millisecond.
    """
    if ms is None:
        ms = now_ms()
    return f"{ms}{new_id()[:5]}"


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return time.time_ns() // 1_000_000


def map_search_url(location: str) -> str:
    """Build a map search link for a free-text location.

    No geocoding is done; the location is only percent-encoded.
    """
    return MAP_SEARCH_URL.format(query=quote(location, safe=""))
