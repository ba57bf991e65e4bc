"""FastAPI application."""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from voyage.accounts.identity import AuthEvent, AuthEventType
from voyage.api.errors import voyage_error_handler
from voyage.api.routes.auth import router as auth_router
from voyage.api.routes.health import router as health_router
from voyage.api.routes.itineraries import router as itineraries_router
from voyage.api.routes.metrics import router as metrics_router
from voyage.api.routes.sections import router as sections_router
from voyage.config import get_settings
from voyage.errors import VoyageError
from voyage.services import Services, build_services

logger = logging.getLogger(__name__)


def _evict_on_sign_out(
    services: Services,
) -> tuple[set[asyncio.Task[None]], Callable[[], None]]:
    """Flush and drop a user's workspace when their session ends."""
    pending: set[asyncio.Task[None]] = set()

    def listener(event: AuthEvent) -> None:
        if event.type is not AuthEventType.signed_out:
            return
        task = asyncio.get_running_loop().create_task(
            services.registry.evict(event.session.user_id)
        )
        pending.add(task)
        task.add_done_callback(pending.discard)

    return pending, services.identity.subscribe(listener)


def create_app(services: Services | None = None) -> FastAPI:
    """Build the API app.

    Args:
        services: Pre-built services (tests); built from settings when omitted

    Returns:
        Configured FastAPI app
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.services = services if services is not None else build_services(settings)
        pending, unsubscribe = _evict_on_sign_out(app.state.services)
        logger.info("Voyage API started")
        try:
            yield
        finally:
            unsubscribe()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
            await app.state.services.close()
            logger.info("Voyage API stopped; pending saves flushed")

    app = FastAPI(title="Voyage Trip Planner API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.ui_origin],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(VoyageError, voyage_error_handler)

    # Register routes
    app.include_router(health_router, tags=["health"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(auth_router)
    app.include_router(itineraries_router)
    app.include_router(sections_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {"message": "Voyage Trip Planner API", "version": "0.1.0"}

    return app


app = create_app()
