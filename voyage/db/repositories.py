"""Repository protocol interfaces for data access."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol
from uuid import UUID

from voyage.models.itinerary import Itinerary


@dataclass
class AccountRecord:
    """Stored account. Secrets are salted digests, never plaintext."""

    user_id: UUID
    username: str
    password_hash: str
    password_salt: str
    security_question: str
    answer_hash: str
    answer_salt: str
    failed_attempts: int = 0
    locked_until: datetime | None = None
    created_at: datetime = field(default_factory=datetime.now)


class AccountRepository(Protocol):
    """Account storage keyed by username."""

    async def get(self, username: str) -> AccountRecord | None:
        """Get account by username.

        Returns:
            Account record or None if not registered
        """
        ...

    async def add(self, account: AccountRecord) -> None:
        """Insert a new account.

        Raises:
            AccountExistsError: If the username is taken
        """
        ...

    async def save(self, account: AccountRecord) -> None:
        """Persist changes to an existing account."""
        ...


class ItineraryTable(Protocol):
    """Remote row table: one JSON document per itinerary, keyed by id."""

    async def bulk_upsert(self, owner_id: UUID, itineraries: list[Itinerary]) -> None:
        """Insert or overwrite rows by itinerary id.

        Cannot express deletions; rows missing from ``itineraries`` are left alone.

        Args:
            owner_id: Owning user
            itineraries: Full documents to write
        """
        ...

    async def delete(self, owner_id: UUID, itinerary_id: str) -> bool:
        """Delete one row.

        Returns:
            True if a row owned by ``owner_id`` was removed
        """
        ...

    async def select_all(self, owner_id: UUID) -> list[Itinerary]:
        """Load every itinerary owned by ``owner_id``."""
        ...


class ItineraryCache(Protocol):
    """Local fallback copy of the last successfully saved list."""

    def get(self, owner_id: UUID) -> list[Itinerary] | None:
        """Cached list, or None when nothing is cached."""
        ...

    def set(self, owner_id: UUID, itineraries: list[Itinerary]) -> None:
        """Replace the cached list."""
        ...
