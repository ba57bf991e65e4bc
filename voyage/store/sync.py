"""Debounced bulk persistence of an owner's itinerary list."""

import asyncio
import logging
import time
import uuid
from collections.abc import Callable

from voyage.db.repositories import ItineraryCache, ItineraryTable
from voyage.models.itinerary import Itinerary
from voyage.utils.logging import StructuredSyncLogger
from voyage.utils.metrics import PrometheusSyncMetrics

logger = logging.getLogger(__name__)

# Quiet period after the last change before the whole list is written
SAVE_DEBOUNCE_SECONDS = 1.0


class DebouncedSaver:
    """Coalesces bursts of changes into one bulk upsert.

    ``schedule()`` cancels any pending save task and starts a new one, so only
    the last call in a burst writes. The list is read via ``snapshot`` when
    the write happens, never when it is scheduled.

    Writes run under ``write_lock``. Remote deletes take the same lock, so a
    write never overlaps a delete and never carries a list from before it.

    A failed save is logged and counted, never raised or retried.
    """

    def __init__(
        self,
        table: ItineraryTable,
        owner_id: uuid.UUID,
        snapshot: Callable[[], list[Itinerary]],
        cache: ItineraryCache | None = None,
        delay: float = SAVE_DEBOUNCE_SECONDS,
    ) -> None:
        self._table = table
        self._owner_id = owner_id
        self._snapshot = snapshot
        self._cache = cache
        self._delay = delay
        self._task: asyncio.Task[None] | None = None
        self._write_lock = asyncio.Lock()
        self._sync_logger = StructuredSyncLogger()
        self._metrics = PrometheusSyncMetrics()

    @property
    def pending(self) -> bool:
        """True while a save is scheduled or a write is running."""
        scheduled = self._task is not None and not self._task.done()
        return scheduled or self._write_lock.locked()

    @property
    def write_lock(self) -> asyncio.Lock:
        """Held for the duration of every remote write."""
        return self._write_lock

    def schedule(self) -> None:
        """(Re)start the quiet period. Must be called from a running event loop."""
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._save_after_delay())

    def cancel(self) -> None:
        """Drop the pending save, if any."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def flush(self) -> None:
        """Write right away if a save is scheduled, and wait for any running write."""
        if self._task is not None and not self._task.done():
            self.cancel()
            await self.save()
            return
        async with self._write_lock:
            pass

    async def _save_after_delay(self) -> None:
        await asyncio.sleep(self._delay)
        # Detach before writing so a new schedule() starts a fresh timer
        # instead of cancelling a write already in flight.
        self._task = None
        await self.save()

    async def save(self) -> None:
        """Bulk upsert the current list. Errors are logged only."""
        async with self._write_lock:
            await self._write()

    async def _write(self) -> None:
        itineraries = self._snapshot()
        if not itineraries:
            return

        start = time.perf_counter()
        try:
            await self._table.bulk_upsert(self._owner_id, itineraries)
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            logger.exception("Bulk itinerary save failed")
            self._sync_logger.log_save(
                self._owner_id, len(itineraries), "error", latency_ms, type(e).__name__
            )
            self._metrics.record_save("error", latency_ms)
            return

        latency_ms = (time.perf_counter() - start) * 1000
        self._sync_logger.log_save(self._owner_id, len(itineraries), "success", latency_ms)
        self._metrics.record_save("success", latency_ms)

        if self._cache is not None:
            self._cache.set(self._owner_id, itineraries)
