"""Translate verified Stripe events into domain events."""

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

from billing_sync.constants import (
    EVENT_CHECKOUT_COMPLETED,
    EVENT_INVOICE_PAYMENT_FAILED,
    EVENT_SUBSCRIPTION_DELETED,
    EVENT_SUBSCRIPTION_UPDATED,
    PROVIDER_STATUS_ACTIVE,
)
from billing_sync.errors import EventPayloadError
from billing_sync.schemas.events import (
    DomainEvent,
    PaymentFailed,
    SubscriptionActivated,
    SubscriptionCancelled,
    SubscriptionStatusChanged,
    UnhandledEvent,
)
from billing_sync.schemas.snapshot import SubscriptionStatus
from billing_sync.utils import from_unix

logger = logging.getLogger(__name__)

SubscriptionLookup = Callable[[str], Awaitable[Any]]


def _field(obj: Any, key: str) -> Any:
    """Read ``key`` from a dict or StripeObject, returning None when absent."""
    if obj is None:
        return None
    try:
        return obj[key]
    except (KeyError, TypeError, IndexError):
        return None


def _object_id(value: Any) -> str | None:
    """Stripe references are either a bare id or an expanded object."""
    if isinstance(value, str):
        return value or None
    return _field(value, "id")


def _customer_id(data: Any) -> str:
    customer_id = _object_id(_field(data, "customer"))
    if not customer_id:
        raise EventPayloadError(f"{_field(data, 'object') or 'object'} has no customer id")
    return customer_id


def _first_item(stripe_sub: Any) -> Any:
    return _field(_field(_field(stripe_sub, "items"), "data"), 0)


def _period_end(stripe_sub: Any) -> datetime:
    """Extract current_period_end, handling Stripe API version differences.

    Newer API versions (2024-06-20+) moved this field to items.data[0].
    """
    period_end = _field(stripe_sub, "current_period_end")
    if period_end is None:
        period_end = _field(_first_item(stripe_sub), "current_period_end")
    if period_end is None:
        raise EventPayloadError(f"Subscription {_field(stripe_sub, 'id')} has no current_period_end")
    return from_unix(period_end)


def _price_id(stripe_sub: Any) -> str | None:
    return _field(_field(_first_item(stripe_sub), "price"), "id")


async def _checkout_completed(
    event_id: str, occurred_at: datetime | None, session: Any, lookup: SubscriptionLookup
) -> DomainEvent:
    # One-off payments may come from guest checkouts with no customer at all
    subscription_id = _object_id(_field(session, "subscription"))
    if not subscription_id:
        return UnhandledEvent(
            event_id=event_id,
            event_type=EVENT_CHECKOUT_COMPLETED,
            reason="checkout session has no subscription",
        )
    customer_id = _customer_id(session)

    stripe_sub = await lookup(subscription_id)
    price_id = _price_id(stripe_sub)
    if not price_id:
        raise EventPayloadError(f"Subscription {subscription_id} has no price")

    return SubscriptionActivated(
        event_id=event_id,
        customer_id=customer_id,
        expires_at=_period_end(stripe_sub),
        price_id=price_id,
        occurred_at=occurred_at,
    )


async def _subscription_updated(
    event_id: str, occurred_at: datetime | None, stripe_sub: Any, lookup: SubscriptionLookup
) -> DomainEvent:
    if _field(stripe_sub, "status") == PROVIDER_STATUS_ACTIVE:
        status = SubscriptionStatus.ACTIVE
    else:
        status = SubscriptionStatus.INACTIVE

    return SubscriptionStatusChanged(
        event_id=event_id,
        customer_id=_customer_id(stripe_sub),
        status=status,
        expires_at=_period_end(stripe_sub),
        price_id=_price_id(stripe_sub),
        occurred_at=occurred_at,
    )


async def _subscription_deleted(
    event_id: str, occurred_at: datetime | None, stripe_sub: Any, lookup: SubscriptionLookup
) -> DomainEvent:
    return SubscriptionCancelled(
        event_id=event_id,
        customer_id=_customer_id(stripe_sub),
        expires_at=_period_end(stripe_sub),
        occurred_at=occurred_at,
    )


async def _invoice_payment_failed(
    event_id: str, occurred_at: datetime | None, invoice: Any, lookup: SubscriptionLookup
) -> DomainEvent:
    return PaymentFailed(
        event_id=event_id,
        customer_id=_customer_id(invoice),
        occurred_at=occurred_at,
    )


_HANDLERS = {
    EVENT_CHECKOUT_COMPLETED: _checkout_completed,
    EVENT_SUBSCRIPTION_UPDATED: _subscription_updated,
    EVENT_SUBSCRIPTION_DELETED: _subscription_deleted,
    EVENT_INVOICE_PAYMENT_FAILED: _invoice_payment_failed,
}


async def interpret(event: Any, lookup: SubscriptionLookup) -> DomainEvent:
    """Map a verified Stripe event onto a domain event.

    Event types without a handler become ``UnhandledEvent`` so they can be
    acknowledged. ``lookup`` is only awaited for completed checkouts, whose
    payload does not carry the subscription's period end or price.

    Raises:
        EventPayloadError: a handled event lacks a required field.
        SubscriptionLookupError: propagated from ``lookup``.
    """
    event_type = _field(event, "type") or ""
    event_id = _field(event, "id") or ""

    handler = _HANDLERS.get(event_type)
    if handler is None:
        return UnhandledEvent(event_id=event_id, event_type=event_type)

    data = _field(_field(event, "data"), "object")
    if data is None:
        raise EventPayloadError(f"Event {event_id} has no data.object")

    logger.debug(f"Interpreting {event_type} event {event_id}")
    return await handler(event_id, from_unix(_field(event, "created")), data, lookup)
