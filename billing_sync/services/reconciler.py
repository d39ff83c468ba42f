"""Subscription state reconciliation — domain events to profile snapshot writes.

Every write is an unconditional set keyed by Stripe customer id, so a
redelivered event simply overwrites identical values. Ordering is
last-write-wins by arrival; events are not compared against stored state.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from billing_sync.schemas.events import (
    DomainEvent,
    PaymentFailed,
    SubscriptionActivated,
    SubscriptionCancelled,
    SubscriptionStatusChanged,
    UnhandledEvent,
)
from billing_sync.schemas.snapshot import SnapshotUpdate, SubscriptionStatus
from billing_sync.services.profile_store import ProfileStore
from billing_sync.utils import now_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileOutcome:
    """What reconciliation did with one event."""

    event_id: str
    event_kind: str
    customer_id: str | None
    status: SubscriptionStatus | None
    applied: bool
    occurred_at: datetime | None = None
    detail: str = ""


OutcomeSink = Callable[[ReconcileOutcome], None]


def log_outcome(outcome: ReconcileOutcome) -> None:
    """Default sink: one log line per outcome."""
    if outcome.applied:
        logger.info(
            f"{outcome.event_kind} {outcome.event_id}: customer {outcome.customer_id} "
            f"-> {outcome.status} (event time {outcome.occurred_at})"
        )
    elif outcome.event_kind == PaymentFailed.__name__:
        logger.warning(f"Payment failed for customer {outcome.customer_id} ({outcome.event_id})")
    else:
        logger.info(f"Acknowledged {outcome.event_id} without changes: {outcome.detail}")


def _snapshot_for(event: DomainEvent, updated_at: datetime) -> SnapshotUpdate | None:
    match event:
        case SubscriptionActivated():
            return SnapshotUpdate(
                status=SubscriptionStatus.ACTIVE,
                expires_at=event.expires_at,
                price_id=event.price_id,
                updated_at=updated_at,
            )
        case SubscriptionStatusChanged():
            return SnapshotUpdate(
                status=event.status,
                expires_at=event.expires_at,
                price_id=event.price_id,
                updated_at=updated_at,
            )
        case SubscriptionCancelled():
            return SnapshotUpdate(
                status=SubscriptionStatus.CANCELLED,
                expires_at=event.expires_at,
                updated_at=updated_at,
            )
        case PaymentFailed() | UnhandledEvent():
            return None
        case _:
            raise TypeError(f"Unknown domain event: {type(event).__name__}")


class Reconciler:
    """Applies domain events to the profile store and reports outcomes."""

    def __init__(
        self,
        store: ProfileStore,
        sink: OutcomeSink = log_outcome,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._store = store
        self._sink = sink
        self._clock = clock

    async def reconcile(self, event: DomainEvent) -> ReconcileOutcome:
        """Apply ``event`` and return its outcome.

        Raises:
            StoreError: the profile update failed.
            ProfileNotFoundError: no profile carries the event's customer id.
        """
        update = _snapshot_for(event, self._clock())

        if update is None:
            if isinstance(event, UnhandledEvent):
                outcome = ReconcileOutcome(
                    event_id=event.event_id,
                    event_kind=type(event).__name__,
                    customer_id=None,
                    status=None,
                    applied=False,
                    detail=f"{event.event_type}: {event.reason}",
                )
            else:
                outcome = ReconcileOutcome(
                    event_id=event.event_id,
                    event_kind=type(event).__name__,
                    customer_id=event.customer_id,
                    status=None,
                    applied=False,
                    occurred_at=event.occurred_at,
                    detail="payment failure recorded; status follows the subscription update event",
                )
            self._sink(outcome)
            return outcome

        await self._store.update_by_customer_id(event.customer_id, update)

        outcome = ReconcileOutcome(
            event_id=event.event_id,
            event_kind=type(event).__name__,
            customer_id=event.customer_id,
            status=update.status,
            applied=True,
            occurred_at=event.occurred_at,
        )
        self._sink(outcome)
        return outcome
