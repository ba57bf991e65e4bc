"""Domain exceptions raised by planning, store and account code.

Routes translate these into HTTP responses; nothing below the API layer
knows about status codes.
"""


class VoyageError(Exception):
    """Base class for all domain errors."""


class InvalidDateRangeError(VoyageError):
    """Start date falls after end date."""

    def __init__(self, start: object, end: object) -> None:
        super().__init__(f"start date {start} is after end date {end}")
        self.start = start
        self.end = end


class SectionValidationError(VoyageError):
    """A section edit is missing a required field or has a bad value."""


class ItemNotFoundError(VoyageError):
    """A child entry (day, activity, packing item, ...) does not exist."""

    def __init__(self, kind: str, item_id: str) -> None:
        super().__init__(f"{kind} not found: {item_id}")
        self.kind = kind
        self.item_id = item_id


class ItineraryNotFoundError(VoyageError):
    """No itinerary with this id in the owner's list."""

    def __init__(self, itinerary_id: str) -> None:
        super().__init__(f"itinerary not found: {itinerary_id}")
        self.itinerary_id = itinerary_id


class RemoteDeleteError(VoyageError):
    """The remote store refused or failed a delete; local state is kept."""


# --- Accounts ---


class AuthValidationError(VoyageError):
    """Required credential fields are missing."""


class InvalidCredentialsError(VoyageError):
    """Wrong username or password."""

    def __init__(self, remaining_attempts: int) -> None:
        super().__init__(f"invalid username or password ({remaining_attempts} attempts left)")
        self.remaining_attempts = remaining_attempts


class AccountLockedError(VoyageError):
    """Too many failed logins; the account is in its cooldown window."""

    def __init__(self, retry_after_minutes: int) -> None:
        super().__init__(f"too many attempts, retry in {retry_after_minutes} minutes")
        self.retry_after_minutes = retry_after_minutes


class AccountExistsError(VoyageError):
    """Username is already registered."""


class AccountNotFoundError(VoyageError):
    """Username is not registered."""


class SecurityAnswerError(VoyageError):
    """Security answer did not match, or the account has no question set."""
