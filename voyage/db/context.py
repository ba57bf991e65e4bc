"""Request context for per-owner scoping."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class RequestContext:
    """Authenticated caller.

    Every itinerary read and write is scoped by ``user_id``.
    """

    user_id: UUID
    username: str
