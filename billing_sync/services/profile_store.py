"""Profile store adapters — update-by-customer-id over SQL or a REST gateway.

Adapters carry no business logic. Their job is to issue exactly one update
scoped to one Stripe customer id and to translate backend failures into
``StoreError`` / ``ProfileNotFoundError``.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Protocol

import httpx
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from billing_sync.config import Settings, get_settings
from billing_sync.constants import PROFILES_TABLE, REST_PATH_PREFIX
from billing_sync.errors import ProfileNotFoundError, StoreError
from billing_sync.http_client import get_http_client
from billing_sync.models.profile import Profile
from billing_sync.schemas.snapshot import SnapshotUpdate
from billing_sync.utils import to_iso

logger = logging.getLogger(__name__)


class ProfileStore(Protocol):
    """Narrow write interface onto the persisted profiles."""

    async def update_by_customer_id(self, customer_id: str, snapshot: SnapshotUpdate) -> None:
        """Set the snapshot fields on the profile with ``stripe_customer_id == customer_id``."""
        ...


class SqlProfileStore:
    """Profile store backed by the ``profiles`` table through SQLAlchemy."""

    def __init__(self, db: AsyncSession, timeout: float = 10.0):
        self._db = db
        self._timeout = timeout

    async def update_by_customer_id(self, customer_id: str, snapshot: SnapshotUpdate) -> None:
        stmt = (
            update(Profile)
            .where(Profile.stripe_customer_id == customer_id)
            .values(**snapshot.to_columns())
            .execution_options(synchronize_session=False)
        )
        try:
            result = await asyncio.wait_for(self._db.execute(stmt), timeout=self._timeout)
            updated = result.rowcount
            if updated:
                await asyncio.wait_for(self._db.commit(), timeout=self._timeout)
        except TimeoutError as e:
            await self._rollback()
            raise StoreError(f"Profile update timed out after {self._timeout}s") from e
        except SQLAlchemyError as e:
            await self._rollback()
            raise StoreError(f"Profile update failed: {e}") from e

        if not updated:
            await self._rollback()
            raise ProfileNotFoundError(customer_id)

    async def _rollback(self) -> None:
        """Best-effort rollback; the caller is already reporting a failure."""
        try:
            await asyncio.wait_for(self._db.rollback(), timeout=self._timeout)
        except (TimeoutError, SQLAlchemyError) as e:
            logger.warning(f"Profile store rollback failed: {e!r}")


def _rest_error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or response.text
    return response.text


class RestProfileStore:
    """Profile store reached through a PostgREST-compatible HTTP gateway."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        service_key: str,
        timeout: float = 10.0,
    ):
        self._client = client
        self._url = f"{base_url.rstrip('/')}{REST_PATH_PREFIX}/{PROFILES_TABLE}"
        self._headers = {
            "apikey": service_key,
            "Authorization": f"Bearer {service_key}",
            "Prefer": "return=representation",
        }
        self._timeout = timeout

    async def update_by_customer_id(self, customer_id: str, snapshot: SnapshotUpdate) -> None:
        payload: dict[str, Any] = {
            key: to_iso(value) if isinstance(value, datetime) else value
            for key, value in snapshot.to_columns().items()
        }
        try:
            response = await self._client.patch(
                self._url,
                params={"stripe_customer_id": f"eq.{customer_id}"},
                json=payload,
                headers=self._headers,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            raise StoreError(f"Profile store timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise StoreError(f"Profile store unreachable: {e}") from e

        if response.is_error:
            raise StoreError(
                f"Profile store rejected update ({response.status_code}): {_rest_error_message(response)}"
            )

        try:
            rows = response.json()
        except ValueError as e:
            raise StoreError("Profile store returned an unreadable response") from e
        if not rows:
            raise ProfileNotFoundError(customer_id)


@asynccontextmanager
async def open_profile_store(settings: Settings | None = None) -> AsyncIterator[ProfileStore]:
    """Yield the configured profile store for the duration of one request."""
    settings = settings or get_settings()

    if settings.profile_store_backend == "rest":
        yield RestProfileStore(
            get_http_client(),
            settings.profile_store_url,
            settings.profile_store_service_key,
            timeout=settings.profile_store_timeout,
        )
        return

    # Imported lazily so REST deployments never build a database engine
    from billing_sync.db.session import async_session_factory

    async with async_session_factory() as session:
        yield SqlProfileStore(session, timeout=settings.profile_store_timeout)
