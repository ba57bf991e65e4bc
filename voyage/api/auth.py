"""Auth dependencies - resolve bearer session tokens into a request context."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status

from voyage.accounts.identity import IdentityService, Session
from voyage.db.context import RequestContext
from voyage.services import Services
from voyage.store.workspace import TripWorkspace


def get_services(request: Request) -> Services:
    """Services attached to the running app."""
    services: Services = request.app.state.services
    return services


def get_identity(services: Annotated[Services, Depends(get_services)]) -> IdentityService:
    return services.identity


def parse_bearer(authorization: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header.

    Raises:
        HTTPException: If the header is missing or malformed
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return authorization[7:]  # Strip "Bearer "


async def get_current_session(
    identity: Annotated[IdentityService, Depends(get_identity)],
    authorization: Annotated[str | None, Header()] = None,
) -> Session:
    """Resolve the bearer token into a live session.

    Args:
        identity: Identity service holding live sessions
        authorization: Authorization header (e.g., "Bearer <token>")

    Returns:
        The caller's session

    Raises:
        HTTPException: If the token is missing, malformed, unknown or expired
    """
    token = parse_bearer(authorization)
    session = identity.get_session(token)

    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired or invalid",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return session


async def get_current_context(
    session: Annotated[Session, Depends(get_current_session)],
) -> RequestContext:
    """Request context (user_id, username) for the authenticated caller."""
    return RequestContext(user_id=session.user_id, username=session.username)


async def get_workspace(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    services: Annotated[Services, Depends(get_services)],
) -> TripWorkspace:
    """The caller's trip workspace, loaded on first use."""
    return await services.registry.get(ctx.user_id)
