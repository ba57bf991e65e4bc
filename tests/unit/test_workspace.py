"""Unit tests for the per-owner trip workspace."""

import asyncio
import uuid
from datetime import date

import pytest

from voyage.db.inmemory import InMemoryItineraryCache, InMemoryItineraryTable
from voyage.errors import ItineraryNotFoundError, RemoteDeleteError
from voyage.models.itinerary import Itinerary
from voyage.planning import sections
from voyage.store.workspace import TripWorkspace, WorkspaceRegistry


class BrokenTable(InMemoryItineraryTable):
    """Table whose reads and deletes fail."""

    async def select_all(self, owner_id: uuid.UUID) -> list[Itinerary]:
        raise ConnectionError("remote unavailable")

    async def delete(self, owner_id: uuid.UUID, itinerary_id: str) -> bool:
        raise ConnectionError("remote unavailable")


class SlowTable(InMemoryItineraryTable):
    """Table whose bulk writes take a while to land."""

    async def bulk_upsert(self, owner_id: uuid.UUID, itineraries: list[Itinerary]) -> None:
        await asyncio.sleep(0.2)
        await super().bulk_upsert(owner_id, itineraries)


def _workspace(owner_id: uuid.UUID, table: InMemoryItineraryTable) -> TripWorkspace:
    return TripWorkspace(owner_id, table, save_delay=60)


@pytest.mark.asyncio
async def test_create_then_flush_persists(owner_id: uuid.UUID) -> None:
    table = InMemoryItineraryTable()
    workspace = _workspace(owner_id, table)

    trip = workspace.create("Tokyo", "Tokyo", date(2026, 3, 1), date(2026, 3, 3))
    assert workspace.save_pending

    await workspace.flush()

    assert table.upsert_calls == 1
    assert await table.select_all(owner_id) == [trip]


@pytest.mark.asyncio
async def test_replace_updates_list_and_selection(owner_id: uuid.UUID) -> None:
    workspace = _workspace(owner_id, InMemoryItineraryTable())
    trip = workspace.create("Tokyo", "Tokyo", date(2026, 3, 1), date(2026, 3, 3))

    edited = sections.add_packing_item(trip, "Passport")
    workspace.replace(edited)

    assert workspace.get(trip.id) == edited
    assert workspace.selected == edited


@pytest.mark.asyncio
async def test_replace_switches_selection_to_edited_trip(owner_id: uuid.UUID) -> None:
    workspace = _workspace(owner_id, InMemoryItineraryTable())
    tokyo = workspace.create("Tokyo", "Tokyo", date(2026, 3, 1), date(2026, 3, 3))
    osaka = workspace.create("Osaka", "Osaka", date(2026, 5, 1), date(2026, 5, 2))
    workspace.select(tokyo.id)

    edited = sections.add_packing_item(osaka, "Umbrella")
    workspace.replace(edited)

    assert workspace.selected == edited


@pytest.mark.asyncio
async def test_replace_with_identical_copy_is_a_no_op(owner_id: uuid.UUID) -> None:
    table = InMemoryItineraryTable()
    workspace = _workspace(owner_id, table)
    trip = workspace.create("Tokyo", "Tokyo", date(2026, 3, 1), date(2026, 3, 3))
    await workspace.flush()

    workspace.replace(trip.model_copy(deep=True))

    assert not workspace.save_pending
    assert workspace.itineraries == [trip]
    await workspace.flush()
    assert table.upsert_calls == 1


@pytest.mark.asyncio
async def test_replace_unknown_id_raises(owner_id: uuid.UUID, tokyo_trip: Itinerary) -> None:
    workspace = _workspace(owner_id, InMemoryItineraryTable())

    with pytest.raises(ItineraryNotFoundError):
        workspace.replace(tokyo_trip)


@pytest.mark.asyncio
async def test_delete_removes_remote_then_local(owner_id: uuid.UUID) -> None:
    table = InMemoryItineraryTable()
    workspace = _workspace(owner_id, table)
    keep = workspace.create("Keep", "Osaka", date(2026, 5, 1), date(2026, 5, 2))
    drop = workspace.create("Drop", "Tokyo", date(2026, 3, 1), date(2026, 3, 3))
    await workspace.flush()
    workspace.select(drop.id)

    await workspace.delete(drop.id)

    assert workspace.itineraries == [keep]
    assert workspace.selected is None
    assert await table.select_all(owner_id) == [keep]


@pytest.mark.asyncio
async def test_pending_save_does_not_resurrect_deleted_trip(owner_id: uuid.UUID) -> None:
    table = InMemoryItineraryTable()
    workspace = _workspace(owner_id, table)
    keep = workspace.create("Keep", "Osaka", date(2026, 5, 1), date(2026, 5, 2))
    drop = workspace.create("Drop", "Tokyo", date(2026, 3, 1), date(2026, 3, 3))
    await workspace.flush()

    workspace.replace(sections.add_packing_item(keep, "Umbrella"))
    await workspace.delete(drop.id)
    await workspace.flush()

    assert [t.id for t in await table.select_all(owner_id)] == [keep.id]


@pytest.mark.asyncio
async def test_delete_waits_for_running_write(owner_id: uuid.UUID) -> None:
    table = SlowTable()
    workspace = TripWorkspace(owner_id, table, save_delay=0.01)
    keep = workspace.create("Keep", "Osaka", date(2026, 5, 1), date(2026, 5, 2))
    drop = workspace.create("Drop", "Tokyo", date(2026, 3, 1), date(2026, 3, 3))
    await workspace.flush()

    workspace.replace(sections.add_packing_item(keep, "Umbrella"))
    await asyncio.sleep(0.05)  # write with both trips is now running
    assert workspace.save_pending

    await workspace.delete(drop.id)
    await asyncio.sleep(0.3)

    assert [t.id for t in await table.select_all(owner_id)] == [keep.id]


@pytest.mark.asyncio
async def test_flush_waits_for_running_write(owner_id: uuid.UUID) -> None:
    table = SlowTable()
    workspace = TripWorkspace(owner_id, table, save_delay=0.01)
    trip = workspace.create("Tokyo", "Tokyo", date(2026, 3, 1), date(2026, 3, 3))
    await asyncio.sleep(0.05)

    await workspace.flush()

    assert not workspace.save_pending
    assert await table.select_all(owner_id) == [trip]


@pytest.mark.asyncio
async def test_failed_delete_keeps_local_entry(owner_id: uuid.UUID) -> None:
    workspace = _workspace(owner_id, BrokenTable())
    trip = workspace.create("Tokyo", "Tokyo", date(2026, 3, 1), date(2026, 3, 3))

    with pytest.raises(RemoteDeleteError):
        await workspace.delete(trip.id)

    assert workspace.itineraries == [trip]
    await workspace.flush()


@pytest.mark.asyncio
async def test_load_falls_back_to_cache(owner_id: uuid.UUID, tokyo_trip: Itinerary) -> None:
    cache = InMemoryItineraryCache()
    cache.set(owner_id, [tokyo_trip])
    workspace = TripWorkspace(owner_id, BrokenTable(), cache=cache)

    await workspace.ensure_loaded()

    assert workspace.itineraries == [tokyo_trip]


@pytest.mark.asyncio
async def test_list_sorted(owner_id: uuid.UUID) -> None:
    workspace = _workspace(owner_id, InMemoryItineraryTable())
    late = workspace.create("B", "osaka", date(2026, 5, 1), date(2026, 5, 1))
    early = workspace.create("A", "Tokyo", date(2026, 3, 1), date(2026, 3, 1))
    mid = workspace.create("C", "Kyoto", date(2026, 4, 1), date(2026, 4, 1))

    assert workspace.list_sorted("date") == [early, mid, late]
    assert workspace.list_sorted("destination") == [mid, late, early]
    await workspace.flush()


@pytest.mark.asyncio
async def test_edit_details_resizes_days(owner_id: uuid.UUID) -> None:
    workspace = _workspace(owner_id, InMemoryItineraryTable())
    trip = workspace.create("Tokyo", "Tokyo", date(2026, 3, 1), date(2026, 3, 3))

    updated = workspace.edit_details(trip.id, "Tokyo", "Tokyo", date(2026, 3, 1), date(2026, 3, 5))

    assert len(updated.daily_itinerary) == 5
    assert workspace.get(trip.id) == updated
    await workspace.flush()


@pytest.mark.asyncio
async def test_registry_reuses_and_evicts(owner_id: uuid.UUID) -> None:
    table = InMemoryItineraryTable()
    registry = WorkspaceRegistry(table, save_delay=60)

    workspace = await registry.get(owner_id)
    assert await registry.get(owner_id) is workspace

    workspace.create("Tokyo", "Tokyo", date(2026, 3, 1), date(2026, 3, 3))
    await registry.evict(owner_id)

    assert table.upsert_calls == 1
    reloaded = await registry.get(owner_id)
    assert reloaded is not workspace
    assert len(reloaded.itineraries) == 1
