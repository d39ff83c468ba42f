"""Builders and fakes shared across tests."""

from __future__ import annotations

import hashlib
import hmac
import json
import time
from typing import Any

from billing_sync.errors import ProfileNotFoundError
from billing_sync.schemas.snapshot import SnapshotUpdate, SubscriptionStatus

WEBHOOK_SECRET = "whsec_test_secret"


def sign_payload(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """Build a Stripe-Signature header value for ``payload``."""
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.".encode() + payload
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def make_event(event_type: str, obj: dict[str, Any], event_id: str = "evt_1", created: int = 1699990000) -> dict:
    return {
        "id": event_id,
        "object": "event",
        "type": event_type,
        "created": created,
        "data": {"object": obj},
    }


def encode_event(event: dict) -> bytes:
    return json.dumps(event).encode()


def stripe_subscription(
    sub_id: str = "sub_1",
    customer: str = "cus_1",
    status: str = "active",
    period_end: int | None = 1700000000,
    price_id: str = "price_A",
    period_on_item: bool = False,
) -> dict[str, Any]:
    item: dict[str, Any] = {"id": "si_1", "price": {"id": price_id}}
    sub: dict[str, Any] = {
        "id": sub_id,
        "object": "subscription",
        "customer": customer,
        "status": status,
        "items": {"object": "list", "data": [item]},
    }
    if period_on_item:
        item["current_period_end"] = period_end
    else:
        sub["current_period_end"] = period_end
    return sub


def checkout_session(customer: str = "cus_1", subscription: str | None = "sub_1") -> dict[str, Any]:
    return {
        "id": "cs_test_1",
        "object": "checkout.session",
        "customer": customer,
        "mode": "subscription" if subscription else "payment",
        "subscription": subscription,
    }


class InMemoryProfileStore:
    """Profile store over a dict of customer id -> column values."""

    def __init__(self) -> None:
        self.profiles: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, SnapshotUpdate]] = []

    def add(self, customer_id: str, **columns: Any) -> dict[str, Any]:
        row = {
            "subscription_status": SubscriptionStatus.NONE.value,
            "subscription_expires_at": None,
            "subscription_price_id": None,
            "updated_at": None,
        }
        row.update(columns)
        self.profiles[customer_id] = row
        return row

    async def update_by_customer_id(self, customer_id: str, snapshot: SnapshotUpdate) -> None:
        self.calls.append((customer_id, snapshot))
        if customer_id not in self.profiles:
            raise ProfileNotFoundError(customer_id)
        self.profiles[customer_id].update(snapshot.to_columns())
