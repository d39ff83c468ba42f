"""Domain events — the closed set of billing occurrences the reconciler understands."""

from dataclasses import dataclass
from datetime import datetime

from billing_sync.schemas.snapshot import SubscriptionStatus


@dataclass(frozen=True)
class SubscriptionActivated:
    event_id: str
    customer_id: str
    expires_at: datetime
    price_id: str
    occurred_at: datetime | None = None


@dataclass(frozen=True)
class SubscriptionStatusChanged:
    event_id: str
    customer_id: str
    status: SubscriptionStatus  # ACTIVE or INACTIVE
    expires_at: datetime
    price_id: str | None = None
    occurred_at: datetime | None = None


@dataclass(frozen=True)
class SubscriptionCancelled:
    event_id: str
    customer_id: str
    expires_at: datetime  # cancellation cutoff
    occurred_at: datetime | None = None


@dataclass(frozen=True)
class PaymentFailed:
    event_id: str
    customer_id: str
    occurred_at: datetime | None = None


@dataclass(frozen=True)
class UnhandledEvent:
    """Acknowledged but not acted upon."""

    event_id: str
    event_type: str
    reason: str = "unhandled event type"


DomainEvent = (
    SubscriptionActivated
    | SubscriptionStatusChanged
    | SubscriptionCancelled
    | PaymentFailed
    | UnhandledEvent
)
