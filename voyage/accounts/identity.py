"""Session-based identity service on top of the credential gate."""

import logging
import secrets
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from voyage.accounts.credentials import CredentialGate

logger = logging.getLogger(__name__)


class AuthEventType(str, Enum):
    """Session transition."""

    signed_in = "SIGNED_IN"
    signed_out = "SIGNED_OUT"


@dataclass(frozen=True)
class Session:
    """Authenticated session handed to clients as a bearer token."""

    token: str
    user_id: uuid.UUID
    username: str
    expires_at: datetime


@dataclass(frozen=True)
class AuthEvent:
    """Notification sent to subscribers on sign-in / sign-out."""

    type: AuthEventType
    session: Session


AuthListener = Callable[[AuthEvent], None]


class IdentityService:
    """Sign-in, sign-up, sign-out, session lookup and change events."""

    def __init__(self, gate: CredentialGate, session_ttl: timedelta = timedelta(days=7)) -> None:
        self.gate = gate
        self._session_ttl = session_ttl
        self._sessions: dict[str, Session] = {}
        self._listeners: list[AuthListener] = []

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: AuthEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "Auth listener failed", extra={"structured": {"event": event.type.value}}
                )

    def _open_session(self, user_id: uuid.UUID, username: str, now: datetime) -> Session:
        session = Session(
            token=secrets.token_urlsafe(32),
            user_id=user_id,
            username=username,
            expires_at=now + self._session_ttl,
        )
        self._sessions[session.token] = session
        self._emit(AuthEvent(AuthEventType.signed_in, session))
        return session

    async def sign_up(
        self,
        username: str,
        password: str,
        security_question: str,
        security_answer: str,
        now: datetime | None = None,
    ) -> Session:
        """Register and sign in."""
        account = await self.gate.register(username, password, security_question, security_answer)
        return self._open_session(account.user_id, account.username, now or datetime.now())

    async def sign_in(self, username: str, password: str, now: datetime | None = None) -> Session:
        """Check credentials and open a session."""
        now = now or datetime.now()
        account = await self.gate.login(username, password, now=now)
        return self._open_session(account.user_id, account.username, now)

    def sign_out(self, token: str) -> Session | None:
        """Close a session. Unknown tokens are ignored."""
        session = self._sessions.pop(token, None)
        if session is not None:
            self._emit(AuthEvent(AuthEventType.signed_out, session))
        return session

    def get_session(self, token: str, now: datetime | None = None) -> Session | None:
        """Look up a live session; expired ones are dropped."""
        session = self._sessions.get(token)
        if session is None:
            return None
        if session.expires_at <= (now or datetime.now()):
            del self._sessions[token]
            return None
        return session
