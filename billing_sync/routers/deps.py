"""Shared FastAPI dependencies."""

from collections.abc import AsyncGenerator, Callable

from billing_sync.config import get_settings
from billing_sync.errors import ConfigurationError
from billing_sync.services.profile_store import ProfileStore, open_profile_store


def require_configured(operation: str) -> Callable[[], None]:
    """Dependency factory rejecting requests for an operation that lacks settings."""

    def _check() -> None:
        missing = get_settings().missing_for(operation)
        if missing:
            raise ConfigurationError(
                f"{operation} unavailable: missing {', '.join(missing)}"
            )

    return _check


async def get_profile_store() -> AsyncGenerator[ProfileStore, None]:
    """FastAPI dependency that yields the configured profile store."""
    async with open_profile_store() as store:
        yield store
