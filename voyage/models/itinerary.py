"""Itinerary document models - the full trip stored as one JSON payload."""

import datetime as dt
from typing import Any

from pydantic import Field, model_validator

from voyage.models.common import (
    CamelDocumentModel,
    Currency,
    DocumentModel,
    ShoppingPriority,
    map_search_url,
    new_id,
    now_ms,
    timestamp_id,
)
from voyage.models.transport import TransportInfo

DEFAULT_CONCERT_CHECKLIST = ("票券", "證件", "手燈", "應援物")


class Activity(DocumentModel):
    """Single stop within a day."""

    id: str = Field(default_factory=new_id)
    location: str
    time_slot: str = ""
    notes: str = ""
    map_url: str | None = Field(None, alias="mapUrl")

    @model_validator(mode="after")
    def derive_map_url(self) -> "Activity":
        """Fill in the map link when the stored document lacks one."""
        if self.map_url is None and self.location:
            self.map_url = map_search_url(self.location)
        return self


class DailyPlan(DocumentModel):
    """One calendar day of the trip."""

    id: str = Field(default_factory=new_id)
    day: int = Field(..., ge=1)
    date: dt.date | None = None
    theme: str = ""
    activities: list[Activity] = Field(default_factory=list)


class PackingItem(DocumentModel):
    """Packing list entry."""

    id: str = Field(default_factory=timestamp_id)
    name: str
    checked: bool = False
    category: str


class ChecklistItem(DocumentModel):
    """Named boolean on a concert's checklist."""

    id: str
    name: str
    checked: bool = False


def default_checklist() -> list[ChecklistItem]:
    """Fresh unchecked concert checklist."""
    return [
        ChecklistItem(id=str(i), name=name)
        for i, name in enumerate(DEFAULT_CONCERT_CHECKLIST, start=1)
    ]


class ConcertInfo(CamelDocumentModel):
    """Concert / event booking."""

    id: str = Field(default_factory=timestamp_id)
    artist: str
    venue: str = ""
    date: dt.date
    merch_time: str = ""
    entry_time: str = ""
    start_time: str = ""
    venue_map_url: str | None = None
    seat: str = ""
    ticket_cost: float = Field(0, ge=0)
    merch_cost: float = Field(0, ge=0)
    currency: Currency = Currency.TWD
    notes: str = ""
    checklist: list[ChecklistItem] = Field(default_factory=default_checklist)
    image_url: str | None = None


class ShoppingItem(CamelDocumentModel):
    """Shopping list entry. Only checked items count as spent."""

    id: str = Field(default_factory=timestamp_id)
    name: str
    price: float = Field(0, ge=0)
    currency: Currency = Currency.TWD
    quantity: int = Field(1, ge=1)
    priority: ShoppingPriority = ShoppingPriority.must_buy
    date: dt.date | None = None
    image_url: str | None = None
    location_url: str | None = None
    link: str | None = None
    checked: bool = False


class TripSummary(DocumentModel):
    """Destination, length and style tags."""

    city: str
    total_days: int = Field(..., ge=1)
    vibe: list[str] = Field(default_factory=list)


class Itinerary(DocumentModel):
    """Complete trip document.

    ``trip_summary.total_days`` always equals ``len(daily_itinerary)`` and the
    inclusive day count of ``start_date..end_date``.
    """

    id: str = Field(default_factory=timestamp_id)
    title: str
    start_date: dt.date = Field(..., alias="startDate")
    end_date: dt.date = Field(..., alias="endDate")
    trip_summary: TripSummary
    daily_itinerary: list[DailyPlan] = Field(default_factory=list)
    packing_list: list[PackingItem] = Field(default_factory=list)
    transports: list[TransportInfo] = Field(default_factory=list)
    concerts: list[ConcertInfo] = Field(default_factory=list)
    shopping_list: list[ShoppingItem] = Field(default_factory=list)
    created_at: int = Field(default_factory=now_ms, alias="createdAt")

    @model_validator(mode="after")
    def validate_dates_and_days(self) -> "Itinerary":
        """Ensure start <= end and day numbering matches the summary."""
        if self.start_date > self.end_date:
            raise ValueError("startDate must be <= endDate")
        span = (self.end_date - self.start_date).days + 1
        if self.trip_summary.total_days != span:
            raise ValueError(
                f"total_days={self.trip_summary.total_days} but date range spans {span} days"
            )
        if self.trip_summary.total_days != len(self.daily_itinerary):
            raise ValueError(
                f"total_days={self.trip_summary.total_days} but "
                f"{len(self.daily_itinerary)} daily plans"
            )
        for index, plan in enumerate(self.daily_itinerary):
            if plan.day != index + 1:
                raise ValueError(f"daily plan at position {index} has day={plan.day}")
        return self

    def to_document(self) -> dict[str, Any]:
        """Serialize to the stored JSON document."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> "Itinerary":
        """Parse a stored JSON document."""
        return cls.model_validate(data)
