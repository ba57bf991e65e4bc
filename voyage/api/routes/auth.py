"""Account endpoints - register, login, logout, password flows."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Query, status
from pydantic import BaseModel, Field

from voyage.accounts.credentials import SECURITY_QUESTIONS
from voyage.accounts.identity import IdentityService, Session
from voyage.api.auth import (
    get_current_context,
    get_current_session,
    get_identity,
    parse_bearer,
)
from voyage.db.context import RequestContext

router = APIRouter(prefix="/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    """Request body for POST /auth/register."""

    username: str
    password: str
    security_question: str = SECURITY_QUESTIONS[0]
    security_answer: str


class LoginRequest(BaseModel):
    """Request body for POST /auth/login."""

    username: str
    password: str


class ChangePasswordRequest(BaseModel):
    """Request body for POST /auth/change-password."""

    old_password: str
    new_password: str = Field(..., min_length=1)


class ResetPasswordRequest(BaseModel):
    """Request body for POST /auth/reset-password."""

    username: str
    security_answer: str
    new_password: str = Field(..., min_length=1)


class SessionResponse(BaseModel):
    """An open session."""

    token: str
    user_id: str
    username: str
    expires_at: datetime


class SecurityQuestionResponse(BaseModel):
    """Response for GET /auth/security-question."""

    username: str
    question: str


def _session_response(session: Session) -> SessionResponse:
    return SessionResponse(
        token=session.token,
        user_id=str(session.user_id),
        username=session.username,
        expires_at=session.expires_at,
    )


@router.post("/register", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    identity: Annotated[IdentityService, Depends(get_identity)],
) -> SessionResponse:
    """Create an account and sign in.

    Args:
        request: Username, password and security question/answer
        identity: Identity service

    Returns:
        The new session
    """
    session = await identity.sign_up(
        request.username, request.password, request.security_question, request.security_answer
    )
    return _session_response(session)


@router.post("/login", response_model=SessionResponse)
async def login(
    request: LoginRequest,
    identity: Annotated[IdentityService, Depends(get_identity)],
) -> SessionResponse:
    """Sign in.

    Wrong credentials return 401 with ``remaining_attempts``; a locked
    account returns 423 with ``retry_after_minutes``.
    """
    session = await identity.sign_in(request.username, request.password)
    return _session_response(session)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    identity: Annotated[IdentityService, Depends(get_identity)],
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Close the caller's session. Unknown tokens are ignored."""
    identity.sign_out(parse_bearer(authorization))


@router.get("/session", response_model=SessionResponse)
async def current_session(
    session: Annotated[Session, Depends(get_current_session)],
) -> SessionResponse:
    """The caller's live session (401 once expired)."""
    return _session_response(session)


@router.post("/change-password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    request: ChangePasswordRequest,
    identity: Annotated[IdentityService, Depends(get_identity)],
    ctx: Annotated[RequestContext, Depends(get_current_context)],
) -> None:
    """Change the signed-in user's password after checking the old one."""
    await identity.gate.change_password(ctx.username, request.old_password, request.new_password)


@router.get("/security-question", response_model=SecurityQuestionResponse)
async def security_question(
    username: Annotated[str, Query(min_length=1)],
    identity: Annotated[IdentityService, Depends(get_identity)],
) -> SecurityQuestionResponse:
    """Question for the forgot-password flow."""
    question = await identity.gate.security_question(username)
    return SecurityQuestionResponse(username=username, question=question)


@router.post("/reset-password", status_code=status.HTTP_204_NO_CONTENT)
async def reset_password(
    request: ResetPasswordRequest,
    identity: Annotated[IdentityService, Depends(get_identity)],
) -> None:
    """Set a new password using the security answer."""
    await identity.gate.reset_password(
        request.username, request.security_answer, request.new_password
    )


@router.get("/security-questions", response_model=list[str])
async def security_questions() -> list[str]:
    """Preset questions offered at registration."""
    return list(SECURITY_QUESTIONS)
