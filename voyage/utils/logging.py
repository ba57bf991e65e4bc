"""Structured logging for itinerary persistence."""

import logging
import uuid
from typing import Any

logger = logging.getLogger(__name__)


class StructuredSyncLogger:
    """Structured logger for save/delete outcomes."""

    def log_save(
        self,
        owner_id: uuid.UUID,
        count: int,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log a bulk save with structured data."""
        log_data: dict[str, Any] = {
            "owner_id": str(owner_id),
            "itineraries": count,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Itinerary bulk save - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.error(log_msg, extra={"structured": log_data})

    def log_delete(
        self,
        owner_id: uuid.UUID,
        itinerary_id: str,
        outcome: str,
        error_reason: str | None = None,
    ) -> None:
        """Log an explicit delete with structured data."""
        log_data: dict[str, Any] = {
            "owner_id": str(owner_id),
            "itinerary_id": itinerary_id,
            "outcome": outcome,
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Itinerary delete: {itinerary_id} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
