"""Service wiring - picks in-memory or SQL/Redis backends from settings."""

import logging
from dataclasses import dataclass
from datetime import timedelta

import redis
from sqlalchemy.ext.asyncio import AsyncEngine

from voyage.accounts.credentials import CredentialGate
from voyage.accounts.identity import IdentityService
from voyage.config import Settings
from voyage.db.cache import RedisItineraryCache
from voyage.db.engine import create_async_engine_from_settings
from voyage.db.inmemory import (
    InMemoryAccountRepository,
    InMemoryItineraryCache,
    InMemoryItineraryTable,
)
from voyage.db.repositories import AccountRepository, ItineraryCache, ItineraryTable
from voyage.db.sql_repositories import SqlAccountRepository, SqlItineraryTable
from voyage.store.sync import SAVE_DEBOUNCE_SECONDS
from voyage.store.workspace import WorkspaceRegistry

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything the routes need, built once per app."""

    identity: IdentityService
    registry: WorkspaceRegistry
    engine: AsyncEngine | None = None
    redis_client: redis.Redis | None = None

    async def close(self) -> None:
        """Flush pending saves, then release connections."""
        await self.registry.close()
        if self.engine is not None:
            await self.engine.dispose()


def _assemble(
    settings: Settings,
    accounts: AccountRepository,
    table: ItineraryTable,
    cache: ItineraryCache | None,
    save_delay: float,
) -> Services:
    gate = CredentialGate(
        accounts,
        max_attempts=settings.login_max_attempts,
        lockout=timedelta(minutes=settings.login_lockout_minutes),
    )
    identity = IdentityService(gate, session_ttl=timedelta(hours=settings.session_ttl_hours))
    registry = WorkspaceRegistry(table, cache, save_delay=save_delay)
    return Services(identity=identity, registry=registry)


def build_in_memory_services(
    settings: Settings | None = None, save_delay: float = SAVE_DEBOUNCE_SECONDS
) -> Services:
    """Process-local backends (dev, tests)."""
    return _assemble(
        settings or Settings(),
        InMemoryAccountRepository(),
        InMemoryItineraryTable(),
        InMemoryItineraryCache(),
        save_delay,
    )


def build_services(settings: Settings) -> Services:
    """SQL tables plus an optional Redis cache, unless in-memory is requested."""
    if settings.use_inmemory_store:
        logger.info("Using in-memory itinerary store")
        return build_in_memory_services(settings)

    engine = create_async_engine_from_settings(settings)

    redis_client: redis.Redis | None = None
    cache: ItineraryCache
    if settings.redis_url:
        redis_client = redis.from_url(  # type: ignore[no-untyped-call]
            settings.redis_url, decode_responses=True
        )
        cache = RedisItineraryCache(redis_client, ttl_seconds=settings.cache_ttl_hours * 3600)
    else:
        cache = InMemoryItineraryCache()

    services = _assemble(
        settings,
        SqlAccountRepository(engine),
        SqlItineraryTable(engine),
        cache,
        SAVE_DEBOUNCE_SECONDS,
    )
    services.engine = engine
    services.redis_client = redis_client
    return services
