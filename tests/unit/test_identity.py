"""Unit tests for sessions and auth events."""

from datetime import datetime, timedelta

import pytest

from voyage.accounts.credentials import CredentialGate
from voyage.accounts.identity import AuthEvent, AuthEventType, IdentityService
from voyage.db.inmemory import InMemoryAccountRepository

NOW = datetime(2026, 3, 1, 12, 0, 0)


@pytest.fixture
def identity() -> IdentityService:
    return IdentityService(
        CredentialGate(InMemoryAccountRepository()), session_ttl=timedelta(hours=1)
    )


@pytest.mark.asyncio
async def test_sign_up_opens_session_and_notifies(identity: IdentityService) -> None:
    events: list[AuthEvent] = []
    identity.subscribe(events.append)

    session = await identity.sign_up("amy", "pw", "q", "a", now=NOW)

    assert session.username == "amy"
    assert session.expires_at == NOW + timedelta(hours=1)
    assert [e.type for e in events] == [AuthEventType.signed_in]
    assert identity.get_session(session.token, now=NOW) == session


@pytest.mark.asyncio
async def test_sign_out_notifies_and_invalidates(identity: IdentityService) -> None:
    await identity.sign_up("amy", "pw", "q", "a", now=NOW)
    session = await identity.sign_in("amy", "pw", now=NOW)
    events: list[AuthEvent] = []
    identity.subscribe(events.append)

    identity.sign_out(session.token)

    assert [e.type for e in events] == [AuthEventType.signed_out]
    assert events[0].session.user_id == session.user_id
    assert identity.get_session(session.token, now=NOW) is None
    # unknown token is ignored
    assert identity.sign_out(session.token) is None


@pytest.mark.asyncio
async def test_expired_session_is_dropped(identity: IdentityService) -> None:
    session = await identity.sign_up("amy", "pw", "q", "a", now=NOW)

    assert identity.get_session(session.token, now=NOW + timedelta(hours=2)) is None
    assert identity.get_session(session.token, now=NOW) is None


@pytest.mark.asyncio
async def test_unsubscribe_and_failing_listener(identity: IdentityService) -> None:
    events: list[AuthEvent] = []

    def broken(event: AuthEvent) -> None:
        raise RuntimeError("boom")

    identity.subscribe(broken)
    unsubscribe = identity.subscribe(events.append)
    unsubscribe()

    # a failing listener does not break sign-in
    session = await identity.sign_up("amy", "pw", "q", "a", now=NOW)

    assert session.username == "amy"
    assert events == []
