"""Expense summary models - derived, never stored."""

from pydantic import BaseModel

from voyage.models.common import Currency


class ExpenseLine(BaseModel):
    """Single contributing entry."""

    name: str
    amount: float
    currency: Currency
    date: str


class CategoryBreakdown(BaseModel):
    """Per-currency totals and lines for one category."""

    category: str
    totals: dict[Currency, float]
    items: list[ExpenseLine]


class ExpenseSummary(BaseModel):
    """Per-currency totals across transport, concert and shopping."""

    itinerary_id: str
    totals: dict[Currency, float]
    categories: list[CategoryBreakdown]
