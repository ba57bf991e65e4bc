"""Per-owner application state: the master itinerary list and its views.

All edits go through ``TripWorkspace.replace``. It keeps the selected
itinerary and the master list in step and schedules a debounced save.
"""

import asyncio
import logging
import uuid
from datetime import date
from typing import Literal

from voyage.db.repositories import ItineraryCache, ItineraryTable
from voyage.errors import ItineraryNotFoundError, RemoteDeleteError
from voyage.models.itinerary import Itinerary
from voyage.planning.days import apply_trip_details, create_itinerary
from voyage.store.sync import SAVE_DEBOUNCE_SECONDS, DebouncedSaver
from voyage.utils.logging import StructuredSyncLogger
from voyage.utils.metrics import PrometheusSyncMetrics

logger = logging.getLogger(__name__)

SortKey = Literal["date", "destination"]


class TripWorkspace:
    """State container for one owner's trips."""

    def __init__(
        self,
        owner_id: uuid.UUID,
        table: ItineraryTable,
        cache: ItineraryCache | None = None,
        save_delay: float = SAVE_DEBOUNCE_SECONDS,
    ) -> None:
        self.owner_id = owner_id
        self._table = table
        self._cache = cache
        self._itineraries: list[Itinerary] = []
        self.selected: Itinerary | None = None
        self._saver = DebouncedSaver(
            table, owner_id, lambda: list(self._itineraries), cache=cache, delay=save_delay
        )
        self._loading: asyncio.Task[None] | None = None
        self._loaded = False
        self._sync_logger = StructuredSyncLogger()
        self._metrics = PrometheusSyncMetrics()

    @property
    def itineraries(self) -> list[Itinerary]:
        return list(self._itineraries)

    @property
    def save_pending(self) -> bool:
        return self._saver.pending

    async def load(self) -> None:
        """Replace local state with the remote list, or the cache if remote fails."""
        try:
            loaded = await self._table.select_all(self.owner_id)
        except Exception:
            logger.warning("Loading itineraries failed, using local cache", exc_info=True)
            cached = self._cache.get(self.owner_id) if self._cache is not None else None
            loaded = cached or []

        self._itineraries = loaded
        self.selected = None
        self._loaded = True

    async def ensure_loaded(self) -> None:
        """Load once; concurrent callers share the same load."""
        if self._loaded:
            return
        if self._loading is None:
            self._loading = asyncio.ensure_future(self.load())
        await self._loading

    def list_sorted(self, sort_by: SortKey = "date") -> list[Itinerary]:
        """Trips ordered by start date or by destination city."""
        if sort_by == "destination":
            return sorted(self._itineraries, key=lambda i: i.trip_summary.city.casefold())
        return sorted(self._itineraries, key=lambda i: i.start_date)

    def _index_of(self, itinerary_id: str) -> int:
        for index, itinerary in enumerate(self._itineraries):
            if itinerary.id == itinerary_id:
                return index
        raise ItineraryNotFoundError(itinerary_id)

    def get(self, itinerary_id: str) -> Itinerary:
        return self._itineraries[self._index_of(itinerary_id)]

    def select(self, itinerary_id: str) -> Itinerary:
        """Make an itinerary the one being viewed."""
        self.selected = self.get(itinerary_id)
        return self.selected

    def replace(self, itinerary: Itinerary) -> Itinerary:
        """Single update entry point.

        Swaps the list entry with the same id, points the current view at the
        new document and schedules a save. An identical copy changes nothing.
        """
        index = self._index_of(itinerary.id)
        self.selected = itinerary

        if self._itineraries[index] == itinerary:
            return itinerary

        self._itineraries[index] = itinerary
        self._saver.schedule()
        return itinerary

    def create(
        self, title: str, city: str, start: date, end: date, vibe: list[str] | None = None
    ) -> Itinerary:
        """Create a trip and append it to the list."""
        itinerary = create_itinerary(title, city, start, end, vibe)
        self._itineraries.append(itinerary)
        self._saver.schedule()
        return itinerary

    def edit_details(
        self,
        itinerary_id: str,
        title: str,
        city: str,
        start: date,
        end: date,
        vibe: list[str] | None = None,
    ) -> Itinerary:
        """Edit trip details; day plans are resized to the new date range."""
        updated = apply_trip_details(self.get(itinerary_id), title, city, start, end, vibe)
        return self.replace(updated)

    async def delete(self, itinerary_id: str) -> None:
        """Delete remotely first; the local entry goes only if that succeeds.

        Holds the save lock, so a bulk write that is already running finishes
        first and the next one reads the list without this trip.

        Raises:
            ItineraryNotFoundError: Unknown id
            RemoteDeleteError: The remote delete failed; nothing changed locally
        """
        self._index_of(itinerary_id)

        async with self._saver.write_lock:
            try:
                await self._table.delete(self.owner_id, itinerary_id)
            except Exception as e:
                self._sync_logger.log_delete(
                    self.owner_id, itinerary_id, "error", type(e).__name__
                )
                self._metrics.record_delete("error")
                raise RemoteDeleteError(f"failed to delete itinerary {itinerary_id}") from e

            self._sync_logger.log_delete(self.owner_id, itinerary_id, "success")
            self._metrics.record_delete("success")

            del self._itineraries[self._index_of(itinerary_id)]
            if self.selected is not None and self.selected.id == itinerary_id:
                self.selected = None

    async def flush(self) -> None:
        """Write any pending save now and wait for a write already running."""
        await self._saver.flush()


class WorkspaceRegistry:
    """One workspace per owner for the lifetime of the process."""

    def __init__(
        self,
        table: ItineraryTable,
        cache: ItineraryCache | None = None,
        save_delay: float = SAVE_DEBOUNCE_SECONDS,
    ) -> None:
        self._table = table
        self._cache = cache
        self._save_delay = save_delay
        self._workspaces: dict[uuid.UUID, TripWorkspace] = {}

    async def get(self, owner_id: uuid.UUID) -> TripWorkspace:
        """Workspace for an owner, loaded from the remote table on first use."""
        workspace = self._workspaces.get(owner_id)
        if workspace is None:
            workspace = TripWorkspace(owner_id, self._table, self._cache, self._save_delay)
            self._workspaces[owner_id] = workspace
        await workspace.ensure_loaded()
        return workspace

    async def evict(self, owner_id: uuid.UUID) -> None:
        """Flush and forget an owner's workspace (on sign-out)."""
        workspace = self._workspaces.pop(owner_id, None)
        if workspace is not None:
            await workspace.flush()

    async def close(self) -> None:
        """Flush every workspace."""
        for workspace in list(self._workspaces.values()):
            await workspace.flush()
