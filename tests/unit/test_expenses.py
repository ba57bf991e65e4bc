"""Unit tests for expense aggregation."""

from datetime import date

from voyage.models.common import Currency
from voyage.models.expenses import CategoryBreakdown, ExpenseSummary
from voyage.models.itinerary import ConcertInfo, Itinerary, ShoppingItem
from voyage.models.transport import CarRentalTransport, FlightTransport, MetroTransport
from voyage.planning import sections
from voyage.planning.expenses import summarize_expenses


def _category(summary: ExpenseSummary, name: str) -> CategoryBreakdown:
    return next(c for c in summary.categories if c.category == name)


def test_empty_trip_has_zero_in_every_currency(tokyo_trip: Itinerary) -> None:
    summary = summarize_expenses(tokyo_trip)

    assert summary.totals == {Currency.TWD: 0, Currency.JPY: 0, Currency.USD: 0}
    assert [c.category for c in summary.categories] == ["transport", "concert", "shopping"]


def test_checking_shopping_item_adds_to_total(tokyo_trip: Itinerary) -> None:
    """Flight 500 + concert 2000+300 + unchecked 100x2 = 2800; checked = 3000."""
    trip = sections.save_transport(tokyo_trip, FlightTransport(detail="TPE-HND", cost=500))
    trip = sections.save_concert(
        trip,
        ConcertInfo(artist="Band", date=date(2026, 3, 2), ticket_cost=2000, merch_cost=300),
    )
    trip = sections.save_shopping_item(trip, ShoppingItem(name="Towel", price=100, quantity=2))

    assert summarize_expenses(trip).totals[Currency.TWD] == 2800

    item_id = trip.shopping_list[0].id
    trip = sections.toggle_shopping_item(trip, item_id)

    summary = summarize_expenses(trip)
    assert summary.totals[Currency.TWD] == 3000
    assert _category(summary, "shopping").totals[Currency.TWD] == 200


def test_currencies_are_never_mixed(tokyo_trip: Itinerary) -> None:
    trip = sections.save_transport(
        tokyo_trip, FlightTransport(detail="TPE-NRT", cost=10000, currency=Currency.JPY)
    )
    trip = sections.save_concert(
        trip,
        ConcertInfo(
            artist="Band", date=date(2026, 3, 2), ticket_cost=50, currency=Currency.USD
        ),
    )

    summary = summarize_expenses(trip)

    assert summary.totals == {Currency.TWD: 0, Currency.JPY: 10000, Currency.USD: 50}


def test_totals_are_exact_decimal_sums(tokyo_trip: Itinerary) -> None:
    trip = sections.save_transport(tokyo_trip, MetroTransport(detail="a", cost=0.1))
    trip = sections.save_transport(trip, MetroTransport(detail="b", cost=0.2))

    assert summarize_expenses(trip).totals[Currency.TWD] == 0.3


def test_transport_lines_name_and_date(tokyo_trip: Itinerary) -> None:
    trip = sections.save_transport(
        tokyo_trip,
        CarRentalTransport(detail="Compact", cost=3000, pickup_date=date(2026, 3, 2)),
    )
    trip = sections.save_transport(trip, MetroTransport(detail="Suica", cost=1000))

    lines = _category(summarize_expenses(trip), "transport").items

    assert lines[0].name == "(租車) Compact"
    assert lines[0].date == "2026-03-02"
    assert lines[1].name == "(地鐵) Suica"
    assert lines[1].date == "TBD"


def test_unchecked_shopping_has_no_lines(tokyo_trip: Itinerary) -> None:
    trip = sections.save_shopping_item(tokyo_trip, ShoppingItem(name="Snacks", price=300))

    assert _category(summarize_expenses(trip), "shopping").items == []
