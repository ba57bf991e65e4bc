"""Day-plan reconciliation - keeps daily plans in step with trip dates."""

import logging
import math
from datetime import date, datetime, timedelta

from voyage.errors import InvalidDateRangeError, SectionValidationError
from voyage.models.common import now_ms, timestamp_id
from voyage.models.itinerary import DailyPlan, Itinerary, TripSummary

logger = logging.getLogger(__name__)

FREE_DAY_THEME = "Free Day"


def inclusive_day_count(start: date, end: date) -> int:
    """Number of calendar days in ``start..end``, both ends included.

    Raises:
        InvalidDateRangeError: If start is after end.
    """
    if start > end:
        raise InvalidDateRangeError(start, end)
    delta = end - start
    return max(1, math.ceil(delta / timedelta(days=1)) + 1)


def _theme_for(index: int, days: int) -> str:
    if index == 0:
        return "Arrival"
    if index == days - 1:
        return "Departure"
    return "Exploration"


def build_daily_plans(start: date, days: int) -> list[DailyPlan]:
    """Fresh plans for a new trip: Arrival, Exploration..., Departure."""
    return [
        DailyPlan(day=i + 1, date=start + timedelta(days=i), theme=_theme_for(i, days))
        for i in range(days)
    ]


def reconcile_daily_plans(plans: list[DailyPlan], start: date, days: int) -> list[DailyPlan]:
    """Resize ``plans`` to ``days`` entries and re-date every plan.

    Growing appends empty "Free Day" plans numbered after the last one.
    Shrinking drops trailing plans together with their activities.
    """
    current = len(plans)
    if days > current:
        added = [
            DailyPlan(day=current + i + 1, theme=FREE_DAY_THEME) for i in range(days - current)
        ]
        resized = [*plans, *added]
    elif days < current:
        dropped = sum(len(p.activities) for p in plans[days:])
        if dropped:
            logger.warning(
                "Trip shortened: discarding %d activities on %d removed days",
                dropped,
                current - days,
                extra={"structured": {"removed_days": current - days, "activities": dropped}},
            )
        resized = plans[:days]
    else:
        resized = list(plans)

    return [
        plan.model_copy(update={"date": start + timedelta(days=i)})
        for i, plan in enumerate(resized)
    ]


def _validate_trip_fields(title: str, city: str) -> tuple[str, str]:
    if not title.strip():
        raise SectionValidationError("title is required")
    if not city.strip():
        raise SectionValidationError("destination city is required")
    return title.strip(), city.strip()


def create_itinerary(
    title: str,
    city: str,
    start: date,
    end: date,
    vibe: list[str] | None = None,
    now: datetime | None = None,
) -> Itinerary:
    """Create a new trip with one plan per day and empty sections.

    ``now`` sets the creation time (and the id prefix); defaults to the clock.
    """
    title, city = _validate_trip_fields(title, city)
    days = inclusive_day_count(start, end)
    created_ms = int(now.timestamp() * 1000) if now is not None else now_ms()

    return Itinerary(
        id=timestamp_id(created_ms),
        created_at=created_ms,
        title=title,
        start_date=start,
        end_date=end,
        trip_summary=TripSummary(city=city, total_days=days, vibe=list(vibe or [])),
        daily_itinerary=build_daily_plans(start, days),
    )


def apply_trip_details(
    itinerary: Itinerary,
    title: str,
    city: str,
    start: date,
    end: date,
    vibe: list[str] | None = None,
) -> Itinerary:
    """Edit title/destination/dates/vibe, resizing the day list to match.

    Validation happens before anything is built, so a bad date range leaves
    the caller's itinerary untouched.
    """
    title, city = _validate_trip_fields(title, city)
    days = inclusive_day_count(start, end)

    return itinerary.model_copy(
        update={
            "title": title,
            "start_date": start,
            "end_date": end,
            "trip_summary": itinerary.trip_summary.model_copy(
                update={
                    "city": city,
                    "total_days": days,
                    "vibe": list(vibe) if vibe is not None else itinerary.trip_summary.vibe,
                }
            ),
            "daily_itinerary": reconcile_daily_plans(itinerary.daily_itinerary, start, days),
        }
    )
