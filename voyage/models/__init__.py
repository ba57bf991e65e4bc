"""Models package - re-exports for convenience."""

from voyage.models.common import (
    Currency,
    ShoppingPriority,
    TransportMode,
    map_search_url,
    new_id,
    timestamp_id,
)
from voyage.models.expenses import CategoryBreakdown, ExpenseLine, ExpenseSummary
from voyage.models.itinerary import (
    Activity,
    ChecklistItem,
    ConcertInfo,
    DailyPlan,
    Itinerary,
    PackingItem,
    ShoppingItem,
    TripSummary,
)
from voyage.models.transport import (
    BusTransport,
    CarRentalTransport,
    FlightTransport,
    MetroTransport,
    TransportInfo,
)

__all__ = [
    # Common
    "Currency",
    "ShoppingPriority",
    "TransportMode",
    "map_search_url",
    "new_id",
    "timestamp_id",
    # Itinerary
    "Itinerary",
    "TripSummary",
    "DailyPlan",
    "Activity",
    "PackingItem",
    "ConcertInfo",
    "ChecklistItem",
    "ShoppingItem",
    # Transport
    "TransportInfo",
    "FlightTransport",
    "MetroTransport",
    "BusTransport",
    "CarRentalTransport",
    # Expenses
    "ExpenseSummary",
    "CategoryBreakdown",
    "ExpenseLine",
]
