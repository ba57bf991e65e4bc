"""Expense aggregation - per-currency totals, never converted."""

from collections.abc import Iterable
from decimal import Decimal

from voyage.models.common import Currency
from voyage.models.expenses import CategoryBreakdown, ExpenseLine, ExpenseSummary
from voyage.models.itinerary import Itinerary
from voyage.models.transport import CarRentalTransport

UNDATED = "TBD"


def _dec(value: float) -> Decimal:
    return Decimal(str(value))


def _empty_totals() -> dict[Currency, Decimal]:
    return {currency: Decimal(0) for currency in Currency}


def _bucket(lines: Iterable[tuple[ExpenseLine, Decimal]]) -> dict[Currency, Decimal]:
    totals = _empty_totals()
    for line, amount in lines:
        totals[line.currency] += amount
    return totals


def _as_float(totals: dict[Currency, Decimal]) -> dict[Currency, float]:
    return {currency: float(amount) for currency, amount in totals.items()}


def transport_lines(itinerary: Itinerary) -> list[tuple[ExpenseLine, Decimal]]:
    """Every transport counts."""
    lines = []
    for t in itinerary.transports:
        if isinstance(t, CarRentalTransport):
            when = t.pickup_date
        else:
            when = t.date
        amount = _dec(t.cost)
        line = ExpenseLine(
            name=f"({t.type}) {t.detail}",
            amount=float(amount),
            currency=t.currency,
            date=when.isoformat() if when else UNDATED,
        )
        lines.append((line, amount))
    return lines


def concert_lines(itinerary: Itinerary) -> list[tuple[ExpenseLine, Decimal]]:
    """Every concert counts, ticket plus merch."""
    lines = []
    for c in itinerary.concerts:
        amount = _dec(c.ticket_cost) + _dec(c.merch_cost)
        line = ExpenseLine(
            name=c.artist,
            amount=float(amount),
            currency=c.currency,
            date=c.date.isoformat(),
        )
        lines.append((line, amount))
    return lines


def shopping_lines(itinerary: Itinerary) -> list[tuple[ExpenseLine, Decimal]]:
    """Only checked (bought) shopping items count."""
    lines = []
    for s in itinerary.shopping_list:
        if not s.checked:
            continue
        amount = _dec(s.price) * s.quantity
        line = ExpenseLine(
            name=s.name,
            amount=float(amount),
            currency=s.currency,
            date=s.date.isoformat() if s.date else UNDATED,
        )
        lines.append((line, amount))
    return lines


CATEGORIES = (
    ("transport", transport_lines),
    ("concert", concert_lines),
    ("shopping", shopping_lines),
)


def summarize_expenses(itinerary: Itinerary) -> ExpenseSummary:
    """Aggregate spending for one itinerary.

    Transports and concerts are always included; shopping items only when
    checked. Totals are bucketed by currency and never combined.
    """
    grand_total = _empty_totals()
    categories: list[CategoryBreakdown] = []

    for name, collect in CATEGORIES:
        lines = collect(itinerary)
        totals = _bucket(lines)
        for currency, amount in totals.items():
            grand_total[currency] += amount
        categories.append(
            CategoryBreakdown(
                category=name,
                totals=_as_float(totals),
                items=[line for line, _ in lines],
            )
        )

    return ExpenseSummary(
        itinerary_id=itinerary.id,
        totals=_as_float(grand_total),
        categories=categories,
    )
