"""Integration tests for dev seeding helper (file-backed SQLite)."""

from pathlib import Path
from unittest.mock import patch

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from voyage.db.models import Base
from voyage.db.seed_dev import DEV_PASSWORD, DEV_USERNAME, seed_dev_account_and_trip
from voyage.db.sql_repositories import SqlAccountRepository, SqlItineraryTable


@pytest.mark.asyncio
async def test_seed_is_idempotent(tmp_path: Path) -> None:
    url = f"sqlite+aiosqlite:///{tmp_path / 'seed.db'}"
    setup = create_async_engine(url)
    async with setup.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await setup.dispose()

    with patch(
        "voyage.db.seed_dev.create_async_engine_from_settings",
        side_effect=lambda _settings: create_async_engine(url),
    ):
        await seed_dev_account_and_trip()
        await seed_dev_account_and_trip()

    engine = create_async_engine(url)
    try:
        account = await SqlAccountRepository(engine).get(DEV_USERNAME)
        assert account is not None
        assert account.password_hash != DEV_PASSWORD

        trips = await SqlItineraryTable(engine).select_all(account.user_id)
        assert len(trips) == 1
        assert trips[0].trip_summary.city == "Tokyo"
        assert trips[0].transports[0].cost == 500
    finally:
        await engine.dispose()
