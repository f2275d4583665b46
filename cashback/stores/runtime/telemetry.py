"""Structured logging for listing operations.

This module provides telemetry hooks for page fetches, resets and scroll
advances, emitting event-named log records with structured `extra` fields.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def log_listing_reset(*, generation: int, query: str, reason: str) -> None:
    """Log a reset of the listing to page 1.

    Args:
        generation: Generation number the new query was assigned
        query: Filter portion of the new active query
        reason: What triggered the reset ("mount", "filters", "navigation", ...)
    """
    logger.info(
        "listing_reset",
        extra={"generation": generation, "query": query, "reason": reason},
    )


def log_page_fetch_started(*, page: int, generation: int, query: str) -> None:
    """Log the start of a page fetch."""
    logger.debug(
        "page_fetch_started",
        extra={"page": page, "generation": generation, "query": query},
    )


def log_page_fetch_completed(
    *,
    page: int,
    generation: int,
    rows_received: int,
    rows_added: int,
    has_more: bool,
    latency_ms: float | None = None,
) -> None:
    """Log a page that was applied to the listing.

    Args:
        page: Page number
        generation: Generation the fetch was issued for
        rows_received: Records in the response
        rows_added: Records appended after deduplication
        has_more: Whether more pages are expected
        latency_ms: Round-trip latency in milliseconds (optional)
    """
    logger.info(
        "page_fetch_completed",
        extra={
            "page": page,
            "generation": generation,
            "rows_received": rows_received,
            "rows_added": rows_added,
            "has_more": has_more,
            "latency_ms": latency_ms,
        },
    )


def log_page_fetch_error(
    *,
    page: int,
    generation: int,
    error_type: str,
    error_message: str,
) -> None:
    """Log a failed page fetch.

    Args:
        page: Page number that failed
        generation: Generation the fetch was issued for
        error_type: Exception class name (e.g. "TransportError", "DecodeError")
        error_message: Exception message
    """
    logger.error(
        "page_fetch_error",
        extra={
            "page": page,
            "generation": generation,
            "error_type": error_type,
            "error_message": error_message,
        },
    )


def log_stale_page_discarded(*, page: int, generation: int, current_generation: int) -> None:
    """Log a fetch result dropped because its query is no longer current."""
    logger.info(
        "stale_page_discarded",
        extra={
            "page": page,
            "generation": generation,
            "current_generation": current_generation,
        },
    )


def log_scroll_advance(*, target: object, attach_count: int) -> None:
    """Log an advance token emitted by the scroll trigger."""
    logger.debug(
        "scroll_advance_emitted",
        extra={"target": repr(target), "attach_count": attach_count},
    )
