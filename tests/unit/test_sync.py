"""Unit tests for the debounced saver."""

import asyncio
import logging
import uuid

import pytest

from voyage.db.inmemory import InMemoryItineraryCache, InMemoryItineraryTable
from voyage.models.itinerary import Itinerary
from voyage.store.sync import DebouncedSaver


class FailingTable(InMemoryItineraryTable):
    """Table whose writes always fail."""

    async def bulk_upsert(self, owner_id: uuid.UUID, itineraries: list[Itinerary]) -> None:
        self.upsert_calls += 1
        raise ConnectionError("remote unavailable")


@pytest.mark.asyncio
async def test_burst_of_schedules_writes_once(owner_id: uuid.UUID, tokyo_trip: Itinerary) -> None:
    table = InMemoryItineraryTable()
    saver = DebouncedSaver(table, owner_id, lambda: [tokyo_trip], delay=0.02)

    for _ in range(5):
        saver.schedule()
    assert saver.pending

    await asyncio.sleep(0.1)

    assert table.upsert_calls == 1
    assert not saver.pending
    assert await table.select_all(owner_id) == [tokyo_trip]


@pytest.mark.asyncio
async def test_snapshot_read_at_write_time(owner_id: uuid.UUID, tokyo_trip: Itinerary) -> None:
    table = InMemoryItineraryTable()
    trips: list[Itinerary] = []
    saver = DebouncedSaver(table, owner_id, lambda: list(trips), delay=0.02)

    saver.schedule()
    trips.append(tokyo_trip)
    await asyncio.sleep(0.1)

    assert await table.select_all(owner_id) == [tokyo_trip]


@pytest.mark.asyncio
async def test_flush_writes_immediately(owner_id: uuid.UUID, tokyo_trip: Itinerary) -> None:
    table = InMemoryItineraryTable()
    cache = InMemoryItineraryCache()
    saver = DebouncedSaver(table, owner_id, lambda: [tokyo_trip], cache=cache, delay=60)

    saver.schedule()
    await saver.flush()

    assert table.upsert_calls == 1
    assert not saver.pending
    assert cache.get(owner_id) == [tokyo_trip]

    # nothing pending, nothing written
    await saver.flush()
    assert table.upsert_calls == 1


@pytest.mark.asyncio
async def test_empty_list_is_not_written(owner_id: uuid.UUID) -> None:
    table = InMemoryItineraryTable()
    saver = DebouncedSaver(table, owner_id, lambda: [], delay=0.01)

    await saver.save()

    assert table.upsert_calls == 0


@pytest.mark.asyncio
async def test_failed_save_is_logged_not_raised(
    owner_id: uuid.UUID, tokyo_trip: Itinerary, caplog: pytest.LogCaptureFixture
) -> None:
    table = FailingTable()
    cache = InMemoryItineraryCache()
    saver = DebouncedSaver(table, owner_id, lambda: [tokyo_trip], cache=cache, delay=0.01)

    with caplog.at_level(logging.ERROR):
        saver.schedule()
        await asyncio.sleep(0.05)

    assert table.upsert_calls == 1
    assert "Bulk itinerary save failed" in caplog.text
    assert cache.get(owner_id) is None
