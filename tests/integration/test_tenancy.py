"""Tests for tenancy enforcement."""

import uuid

import pytest

from voyage.db.inmemory import InMemoryItineraryTable
from voyage.models.itinerary import Itinerary
from voyage.store.workspace import WorkspaceRegistry


@pytest.mark.asyncio
async def test_itinerary_table_tenancy_isolation(tokyo_trip: Itinerary) -> None:
    """Test that the in-memory table enforces owner isolation."""
    table = InMemoryItineraryTable()
    user_a = uuid.uuid4()
    user_b = uuid.uuid4()

    await table.bulk_upsert(user_a, [tokyo_trip])

    # user_b cannot see user_a's trip
    assert await table.select_all(user_b) == []

    # user_b cannot overwrite it
    await table.bulk_upsert(user_b, [tokyo_trip.model_copy(update={"title": "Hijacked"})])
    assert [t.title for t in await table.select_all(user_a)] == ["Tokyo Spring"]

    # user_b cannot delete it
    assert await table.delete(user_b, tokyo_trip.id) is False
    assert await table.delete(user_a, tokyo_trip.id) is True


@pytest.mark.asyncio
async def test_registry_keeps_workspaces_apart(tokyo_trip: Itinerary) -> None:
    table = InMemoryItineraryTable()
    user_a = uuid.uuid4()
    user_b = uuid.uuid4()
    await table.bulk_upsert(user_a, [tokyo_trip])
    registry = WorkspaceRegistry(table)

    workspace_a = await registry.get(user_a)
    workspace_b = await registry.get(user_b)

    assert workspace_a is not workspace_b
    assert [t.id for t in workspace_a.itineraries] == [tokyo_trip.id]
    assert workspace_b.itineraries == []
