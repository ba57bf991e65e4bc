"""Translate domain errors into HTTP responses."""

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from voyage.errors import (
    AccountExistsError,
    AccountLockedError,
    AccountNotFoundError,
    AuthValidationError,
    InvalidCredentialsError,
    InvalidDateRangeError,
    ItemNotFoundError,
    ItineraryNotFoundError,
    RemoteDeleteError,
    SecurityAnswerError,
    SectionValidationError,
    VoyageError,
)


def http_error(exc: VoyageError) -> HTTPException:
    """Map a domain error to an HTTPException."""
    if isinstance(exc, InvalidCredentialsError):
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": str(exc), "remaining_attempts": exc.remaining_attempts},
        )
    if isinstance(exc, AccountLockedError):
        return HTTPException(
            status_code=status.HTTP_423_LOCKED,
            detail={"message": str(exc), "retry_after_minutes": exc.retry_after_minutes},
            headers={"Retry-After": str(exc.retry_after_minutes * 60)},
        )
    if isinstance(exc, AccountExistsError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Username already registered"
        )
    if isinstance(exc, (ItineraryNotFoundError, ItemNotFoundError, AccountNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, RemoteDeleteError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    if isinstance(
        exc,
        (InvalidDateRangeError, SectionValidationError, AuthValidationError, SecurityAnswerError),
    ):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


async def voyage_error_handler(request: Request, exc: VoyageError) -> JSONResponse:
    """Exception handler registered on the app for all VoyageError subclasses."""
    http_exc = http_error(exc)
    return JSONResponse(
        status_code=http_exc.status_code,
        content={"detail": http_exc.detail},
        headers=http_exc.headers,
    )
