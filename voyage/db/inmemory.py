"""In-memory implementations of repository interfaces."""

import copy
import uuid

from voyage.db.repositories import AccountRecord
from voyage.errors import AccountExistsError
from voyage.models.itinerary import Itinerary


class InMemoryAccountRepository:
    """In-memory implementation of AccountRepository."""

    def __init__(self) -> None:
        self._accounts: dict[str, AccountRecord] = {}

    async def get(self, username: str) -> AccountRecord | None:
        """Get account by username."""
        record = self._accounts.get(username)
        return copy.copy(record) if record else None

    async def add(self, account: AccountRecord) -> None:
        """Insert a new account."""
        if account.username in self._accounts:
            raise AccountExistsError(account.username)
        self._accounts[account.username] = copy.copy(account)

    async def save(self, account: AccountRecord) -> None:
        """Persist changes to an existing account."""
        self._accounts[account.username] = copy.copy(account)


class InMemoryItineraryTable:
    """In-memory implementation of ItineraryTable.

    Rows hold serialized documents so callers never share model instances
    with the table.
    """

    def __init__(self) -> None:
        self._rows: dict[str, tuple[uuid.UUID, dict]] = {}
        self.upsert_calls = 0

    async def bulk_upsert(self, owner_id: uuid.UUID, itineraries: list[Itinerary]) -> None:
        """Insert or overwrite rows by id."""
        self.upsert_calls += 1
        for itinerary in itineraries:
            existing = self._rows.get(itinerary.id)
            # Enforce ownership
            if existing is not None and existing[0] != owner_id:
                continue
            self._rows[itinerary.id] = (owner_id, itinerary.to_document())

    async def delete(self, owner_id: uuid.UUID, itinerary_id: str) -> bool:
        """Delete one row."""
        existing = self._rows.get(itinerary_id)
        if existing is None or existing[0] != owner_id:
            return False
        del self._rows[itinerary_id]
        return True

    async def select_all(self, owner_id: uuid.UUID) -> list[Itinerary]:
        """Load every itinerary owned by the user."""
        return [
            Itinerary.from_document(data)
            for stored_owner, data in self._rows.values()
            if stored_owner == owner_id
        ]


class InMemoryItineraryCache:
    """In-memory implementation of ItineraryCache."""

    def __init__(self) -> None:
        self._lists: dict[uuid.UUID, list[dict]] = {}

    def get(self, owner_id: uuid.UUID) -> list[Itinerary] | None:
        """Cached list, or None."""
        documents = self._lists.get(owner_id)
        if documents is None:
            return None
        return [Itinerary.from_document(d) for d in documents]

    def set(self, owner_id: uuid.UUID, itineraries: list[Itinerary]) -> None:
        """Replace the cached list."""
        self._lists[owner_id] = [i.to_document() for i in itineraries]
