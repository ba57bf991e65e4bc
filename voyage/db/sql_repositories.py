"""SQL implementations of repository interfaces."""

import logging
import uuid

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from voyage.db.models import Account, ItineraryRow
from voyage.db.repositories import AccountRecord
from voyage.errors import AccountExistsError
from voyage.models.itinerary import Itinerary

logger = logging.getLogger(__name__)


def _to_record(row: Account) -> AccountRecord:
    return AccountRecord(
        user_id=row.user_id,
        username=row.username,
        password_hash=row.password_hash,
        password_salt=row.password_salt,
        security_question=row.security_question,
        answer_hash=row.answer_hash,
        answer_salt=row.answer_salt,
        failed_attempts=row.failed_attempts,
        locked_until=row.locked_until,
        created_at=row.created_at,
    )


class SqlAccountRepository:
    """SQL implementation of AccountRepository."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def get(self, username: str) -> AccountRecord | None:
        """Get account by username."""
        async with AsyncSession(self._engine) as session:
            result = await session.execute(select(Account).where(Account.username == username))
            row = result.scalar_one_or_none()

        if row is None:
            return None

        return _to_record(row)

    async def add(self, account: AccountRecord) -> None:
        """Insert a new account."""
        async with AsyncSession(self._engine) as session:
            session.add(
                Account(
                    user_id=account.user_id,
                    username=account.username,
                    password_hash=account.password_hash,
                    password_salt=account.password_salt,
                    security_question=account.security_question,
                    answer_hash=account.answer_hash,
                    answer_salt=account.answer_salt,
                    failed_attempts=account.failed_attempts,
                    locked_until=account.locked_until,
                )
            )
            try:
                await session.commit()
            except IntegrityError as e:
                raise AccountExistsError(account.username) from e

    async def save(self, account: AccountRecord) -> None:
        """Persist changes to an existing account."""
        async with AsyncSession(self._engine) as session:
            result = await session.execute(
                select(Account).where(Account.user_id == account.user_id)
            )
            row = result.scalar_one()

            row.password_hash = account.password_hash
            row.password_salt = account.password_salt
            row.security_question = account.security_question
            row.answer_hash = account.answer_hash
            row.answer_salt = account.answer_salt
            row.failed_attempts = account.failed_attempts
            row.locked_until = account.locked_until

            await session.commit()


class SqlItineraryTable:
    """SQL implementation of ItineraryTable.

    Each call opens its own session, since saves run from background tasks
    outside any request.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def bulk_upsert(self, owner_id: uuid.UUID, itineraries: list[Itinerary]) -> None:
        """Insert or overwrite rows by id in a single transaction."""
        if not itineraries:
            return

        async with AsyncSession(self._engine) as session:
            ids = [i.id for i in itineraries]
            result = await session.execute(select(ItineraryRow).where(ItineraryRow.id.in_(ids)))
            existing = {row.id: row for row in result.scalars().all()}

            for itinerary in itineraries:
                row = existing.get(itinerary.id)
                if row is None:
                    session.add(
                        ItineraryRow(
                            id=itinerary.id, user_id=owner_id, data=itinerary.to_document()
                        )
                    )
                elif row.user_id != owner_id:
                    # Enforce ownership
                    logger.warning(
                        "Skipping upsert of itinerary owned by another user",
                        extra={"structured": {"itinerary_id": itinerary.id}},
                    )
                else:
                    row.data = itinerary.to_document()

            await session.commit()

    async def delete(self, owner_id: uuid.UUID, itinerary_id: str) -> bool:
        """Delete one row owned by the user."""
        async with AsyncSession(self._engine) as session:
            result = await session.execute(
                delete(ItineraryRow).where(
                    ItineraryRow.id == itinerary_id, ItineraryRow.user_id == owner_id
                )
            )
            await session.commit()

        return bool(result.rowcount)

    async def select_all(self, owner_id: uuid.UUID) -> list[Itinerary]:
        """Load every itinerary owned by the user."""
        async with AsyncSession(self._engine) as session:
            result = await session.execute(
                select(ItineraryRow.data)
                .where(ItineraryRow.user_id == owner_id)
                .order_by(ItineraryRow.created_at)
            )
            documents = list(result.scalars().all())

        return [Itinerary.from_document(data) for data in documents]
