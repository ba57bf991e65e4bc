"""Dev seeding helper - a login and one sample trip."""

import asyncio
from datetime import date

from voyage.accounts.credentials import SECURITY_QUESTIONS, CredentialGate
from voyage.config import get_settings
from voyage.db.engine import create_async_engine_from_settings
from voyage.db.sql_repositories import SqlAccountRepository, SqlItineraryTable
from voyage.models.transport import FlightTransport
from voyage.planning import sections
from voyage.planning.days import create_itinerary

DEV_USERNAME = "dev"
DEV_PASSWORD = "dev-password"
DEV_SECURITY_ANSWER = "voyage"


async def seed_dev_account_and_trip() -> None:
    """Seed a dev account and a sample trip.

    This function is idempotent - safe to run multiple times.
    Creates:
    - Account DEV_USERNAME / DEV_PASSWORD if it doesn't exist
    - A three-day Tokyo trip if the account has no trips
    """
    engine = create_async_engine_from_settings(get_settings())
    accounts = SqlAccountRepository(engine)
    table = SqlItineraryTable(engine)

    try:
        account = await accounts.get(DEV_USERNAME)
        if account is None:
            print(f"Creating dev account {DEV_USERNAME!r}...")
            gate = CredentialGate(accounts)
            account = await gate.register(
                DEV_USERNAME, DEV_PASSWORD, SECURITY_QUESTIONS[0], DEV_SECURITY_ANSWER
            )
        else:
            print(f"Dev account already exists: {account.username}")

        if await table.select_all(account.user_id):
            print("Dev account already has trips")
        else:
            print("Creating sample trip...")
            trip = create_itinerary(
                "Tokyo Spring", "Tokyo", date(2026, 3, 1), date(2026, 3, 3), ["food", "music"]
            )
            day_one = trip.daily_itinerary[0]
            trip = sections.add_activity(trip, day_one.id, "Shibuya Crossing", "18:00")
            trip = sections.add_packing_item(trip, "Passport")
            trip = sections.save_transport(
                trip,
                FlightTransport(
                    type="飛機",
                    detail="TPE → HND",
                    cost=500,
                    date=date(2026, 3, 1),
                    time="08:30",
                    flight_number="BR192",
                ),
            )
            await table.bulk_upsert(account.user_id, [trip])
    finally:
        await engine.dispose()

    print("✅ Dev seeding complete")


if __name__ == "__main__":
    asyncio.run(seed_dev_account_and_trip())
