"""Shared utility functions for Billing Sync."""

import logging
from datetime import datetime, UTC


def now_utc() -> datetime:
    """Get current UTC time (timezone-aware)."""
    return datetime.now(UTC)


def from_unix(timestamp: int | float | None) -> datetime | None:
    """Convert a provider unix timestamp (seconds) to an aware UTC datetime."""
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=UTC)


def to_iso(value: datetime) -> str:
    """
    Format an aware datetime as ISO-8601 UTC with a trailing ``Z``.

    Args:
        value: Timezone-aware datetime.

    Returns:
        String such as ``2023-11-14T22:13:20Z``.
    """
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def setup_logging(level: str = "INFO", verbose: bool = False) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level name used when not verbose.
        verbose: If True, set DEBUG level regardless of ``level``.
    """
    resolved = logging.DEBUG if verbose else logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
