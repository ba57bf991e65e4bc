"""Section editors - pure functions from an Itinerary to its replacement.

Each editor validates its input, then returns a new Itinerary via
``model_copy``; the input document is never mutated. Callers hand the
result to ``TripWorkspace.replace``.
"""

from collections import defaultdict
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from voyage.errors import ItemNotFoundError, SectionValidationError
from voyage.models.common import map_search_url, new_id, timestamp_id
from voyage.models.itinerary import (
    Activity,
    ConcertInfo,
    DailyPlan,
    Itinerary,
    PackingItem,
    ShoppingItem,
)
from voyage.models.transport import CarRentalTransport, TransportInfo

PACKING_PRESETS = ("重要文件", "託運", "手提")
CUSTOM_CATEGORY = "自定義名稱"
FALLBACK_CATEGORY = "其他"

T = TypeVar("T")


def _find(items: Sequence[T], item_id: str, kind: str) -> T:
    for item in items:
        if item.id == item_id:  # type: ignore[attr-defined]
            return item
    raise ItemNotFoundError(kind, item_id)


def _replace_item(items: Sequence[T], item_id: str, new: T) -> list[T]:
    return [new if item.id == item_id else item for item in items]  # type: ignore[attr-defined]


def _without(items: Sequence[T], item_id: str, kind: str) -> list[T]:
    _find(items, item_id, kind)
    return [item for item in items if item.id != item_id]  # type: ignore[attr-defined]


def _with_field(itinerary: Itinerary, field: str, value: Any) -> Itinerary:
    return itinerary.model_copy(update={field: value})


# --- Daily itinerary ---


def _update_day(
    itinerary: Itinerary, day_id: str, change: Callable[[DailyPlan], DailyPlan]
) -> Itinerary:
    day = _find(itinerary.daily_itinerary, day_id, "day")
    return _with_field(
        itinerary, "daily_itinerary", _replace_item(itinerary.daily_itinerary, day_id, change(day))
    )


def add_activity(
    itinerary: Itinerary, day_id: str, location: str, time_slot: str = "", notes: str = ""
) -> Itinerary:
    """Append an activity to a day. Location is required."""
    location = location.strip()
    if not location:
        raise SectionValidationError("location is required")

    activity = Activity(
        id=new_id(),
        location=location,
        time_slot=time_slot.strip(),
        notes=notes.strip(),
        map_url=map_search_url(location),
    )
    return _update_day(
        itinerary,
        day_id,
        lambda d: d.model_copy(update={"activities": [*d.activities, activity]}),
    )


def update_activity(
    itinerary: Itinerary,
    day_id: str,
    activity_id: str,
    *,
    location: str | None = None,
    time_slot: str | None = None,
    notes: str | None = None,
) -> Itinerary:
    """Edit fields of an activity; a new location refreshes its map link."""
    day = _find(itinerary.daily_itinerary, day_id, "day")
    activity = _find(day.activities, activity_id, "activity")

    changes: dict[str, Any] = {}
    if location is not None:
        location = location.strip()
        if not location:
            raise SectionValidationError("location is required")
        changes["location"] = location
        changes["map_url"] = map_search_url(location)
    if time_slot is not None:
        changes["time_slot"] = time_slot.strip()
    if notes is not None:
        changes["notes"] = notes.strip()

    updated = activity.model_copy(update=changes)
    return _update_day(
        itinerary,
        day_id,
        lambda d: d.model_copy(
            update={"activities": _replace_item(d.activities, activity_id, updated)}
        ),
    )


def remove_activity(itinerary: Itinerary, day_id: str, activity_id: str) -> Itinerary:
    """Delete an activity from its day."""
    day = _find(itinerary.daily_itinerary, day_id, "day")
    remaining = _without(day.activities, activity_id, "activity")
    return _update_day(
        itinerary, day_id, lambda d: d.model_copy(update={"activities": remaining})
    )


def copy_activity(itinerary: Itinerary, day_id: str, activity_id: str) -> Itinerary:
    """Duplicate an activity (new id) at the end of the same day."""
    day = _find(itinerary.daily_itinerary, day_id, "day")
    duplicate = _find(day.activities, activity_id, "activity").model_copy(update={"id": new_id()})
    return _update_day(
        itinerary,
        day_id,
        lambda d: d.model_copy(update={"activities": [*d.activities, duplicate]}),
    )


def move_activity(
    itinerary: Itinerary, source_day_id: str, activity_id: str, target_day: int
) -> Itinerary:
    """Move an activity to the end of the day numbered ``target_day``."""
    total = itinerary.trip_summary.total_days
    if not 1 <= target_day <= total:
        raise SectionValidationError(f"target day must be between 1 and {total}")

    source = _find(itinerary.daily_itinerary, source_day_id, "day")
    activity = _find(source.activities, activity_id, "activity")
    if source.day == target_day:
        return itinerary

    plans = []
    for plan in itinerary.daily_itinerary:
        if plan.id == source_day_id:
            plan = plan.model_copy(
                update={"activities": [a for a in plan.activities if a.id != activity_id]}
            )
        elif plan.day == target_day:
            plan = plan.model_copy(update={"activities": [*plan.activities, activity]})
        plans.append(plan)
    return _with_field(itinerary, "daily_itinerary", plans)


def set_day_theme(itinerary: Itinerary, day_id: str, theme: str) -> Itinerary:
    """Rename a day's theme."""
    return _update_day(itinerary, day_id, lambda d: d.model_copy(update={"theme": theme.strip()}))


# --- Packing ---


def add_packing_item(
    itinerary: Itinerary, name: str, category: str = PACKING_PRESETS[0], custom_category: str = ""
) -> Itinerary:
    """Add an unchecked packing item.

    Picking the custom option uses ``custom_category``, or a generic bucket
    when that is blank.
    """
    name = name.strip()
    if not name:
        raise SectionValidationError("item name is required")

    if category == CUSTOM_CATEGORY:
        category = custom_category.strip() or FALLBACK_CATEGORY

    item = PackingItem(id=timestamp_id(), name=name, category=category)
    return _with_field(itinerary, "packing_list", [*itinerary.packing_list, item])


def toggle_packing_item(itinerary: Itinerary, item_id: str) -> Itinerary:
    item = _find(itinerary.packing_list, item_id, "packing item")
    flipped = item.model_copy(update={"checked": not item.checked})
    return _with_field(
        itinerary, "packing_list", _replace_item(itinerary.packing_list, item_id, flipped)
    )


def remove_packing_item(itinerary: Itinerary, item_id: str) -> Itinerary:
    return _with_field(
        itinerary, "packing_list", _without(itinerary.packing_list, item_id, "packing item")
    )


def packing_categories(itinerary: Itinerary) -> list[str]:
    """Categories in use, in first-seen order."""
    return list(dict.fromkeys(item.category for item in itinerary.packing_list))


# --- Transport ---


def save_transport(
    itinerary: Itinerary, info: TransportInfo, edit_id: str | None = None
) -> Itinerary:
    """Add a booking, or replace the one with ``edit_id``.

    Rentals flagged as same-location get their return location mirrored.
    """
    if isinstance(info, CarRentalTransport):
        info = info.with_mirrored_return()

    if edit_id is not None:
        _find(itinerary.transports, edit_id, "transport")
        info = info.model_copy(update={"id": edit_id})
        return _with_field(
            itinerary, "transports", _replace_item(itinerary.transports, edit_id, info)
        )

    info = info.model_copy(update={"id": timestamp_id()})
    return _with_field(itinerary, "transports", [*itinerary.transports, info])


def remove_transport(itinerary: Itinerary, transport_id: str) -> Itinerary:
    return _with_field(
        itinerary, "transports", _without(itinerary.transports, transport_id, "transport")
    )


def attach_transport_image(itinerary: Itinerary, transport_id: str, image: str) -> Itinerary:
    """Append an inline image blob to a booking."""
    if not image:
        raise SectionValidationError("image is empty")
    booking = _find(itinerary.transports, transport_id, "transport")
    updated = booking.model_copy(update={"images": [*booking.images, image]})
    return _with_field(
        itinerary, "transports", _replace_item(itinerary.transports, transport_id, updated)
    )


def remove_transport_image(itinerary: Itinerary, transport_id: str, index: int) -> Itinerary:
    booking = _find(itinerary.transports, transport_id, "transport")
    if not 0 <= index < len(booking.images):
        raise ItemNotFoundError("image", str(index))
    images = [img for i, img in enumerate(booking.images) if i != index]
    updated = booking.model_copy(update={"images": images})
    return _with_field(
        itinerary, "transports", _replace_item(itinerary.transports, transport_id, updated)
    )


def rental_days(rental: CarRentalTransport) -> int | None:
    """Inclusive rental length in days, at least 1; None if dates are missing."""
    if rental.pickup_date is None or rental.return_date is None:
        return None
    return max(1, (rental.return_date - rental.pickup_date).days + 1)


# --- Concerts ---


def save_concert(itinerary: Itinerary, info: ConcertInfo, edit_id: str | None = None) -> Itinerary:
    """Add a concert, or replace the one with ``edit_id``."""
    if not info.artist.strip():
        raise SectionValidationError("artist is required")
    info = info.model_copy(update={"venue_map_url": map_search_url(info.venue)})

    if edit_id is not None:
        _find(itinerary.concerts, edit_id, "concert")
        info = info.model_copy(update={"id": edit_id})
        return _with_field(itinerary, "concerts", _replace_item(itinerary.concerts, edit_id, info))

    info = info.model_copy(update={"id": timestamp_id()})
    return _with_field(itinerary, "concerts", [*itinerary.concerts, info])


def remove_concert(itinerary: Itinerary, concert_id: str) -> Itinerary:
    return _with_field(itinerary, "concerts", _without(itinerary.concerts, concert_id, "concert"))


def toggle_concert_checklist(itinerary: Itinerary, concert_id: str, item_id: str) -> Itinerary:
    concert = _find(itinerary.concerts, concert_id, "concert")
    entry = _find(concert.checklist, item_id, "checklist item")
    flipped = entry.model_copy(update={"checked": not entry.checked})
    updated = concert.model_copy(
        update={"checklist": _replace_item(concert.checklist, item_id, flipped)}
    )
    return _with_field(
        itinerary, "concerts", _replace_item(itinerary.concerts, concert_id, updated)
    )


def concerts_by_month(itinerary: Itinerary) -> list[tuple[str, list[ConcertInfo]]]:
    """Concerts grouped by ``YYYY-MM``, months ascending, dates ascending within."""
    grouped: dict[str, list[ConcertInfo]] = defaultdict(list)
    for concert in itinerary.concerts:
        grouped[concert.date.strftime("%Y-%m")].append(concert)
    return [
        (month, sorted(concerts, key=lambda c: c.date))
        for month, concerts in sorted(grouped.items())
    ]


# --- Shopping ---


def save_shopping_item(
    itinerary: Itinerary, item: ShoppingItem, edit_id: str | None = None
) -> Itinerary:
    """Add a shopping entry, or replace the one with ``edit_id``."""
    if not item.name.strip():
        raise SectionValidationError("item name is required")

    if edit_id is not None:
        _find(itinerary.shopping_list, edit_id, "shopping item")
        item = item.model_copy(update={"id": edit_id})
        return _with_field(
            itinerary, "shopping_list", _replace_item(itinerary.shopping_list, edit_id, item)
        )

    item = item.model_copy(update={"id": timestamp_id()})
    return _with_field(itinerary, "shopping_list", [*itinerary.shopping_list, item])


def toggle_shopping_item(itinerary: Itinerary, item_id: str) -> Itinerary:
    """Flip the bought flag, which gates inclusion in expense totals."""
    item = _find(itinerary.shopping_list, item_id, "shopping item")
    flipped = item.model_copy(update={"checked": not item.checked})
    return _with_field(
        itinerary, "shopping_list", _replace_item(itinerary.shopping_list, item_id, flipped)
    )


def remove_shopping_item(itinerary: Itinerary, item_id: str) -> Itinerary:
    return _with_field(
        itinerary,
        "shopping_list",
        _without(itinerary.shopping_list, item_id, "shopping item"),
    )
