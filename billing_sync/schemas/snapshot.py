"""Subscription snapshot — the fields reconciliation writes onto a profile."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any


class SubscriptionStatus(StrEnum):
    NONE = "none"
    ACTIVE = "active"
    INACTIVE = "inactive"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class SnapshotUpdate:
    """Partial snapshot applied with an unconditional set.

    ``price_id`` of None means "leave the stored price untouched", so a
    cancellation keeps the plan the customer last paid for.
    """

    status: SubscriptionStatus
    expires_at: datetime
    updated_at: datetime
    price_id: str | None = None

    def to_columns(self) -> dict[str, Any]:
        """Map onto the profile store's column names."""
        columns: dict[str, Any] = {
            "subscription_status": self.status.value,
            "subscription_expires_at": self.expires_at,
            "updated_at": self.updated_at,
        }
        if self.price_id is not None:
            columns["subscription_price_id"] = self.price_id
        return columns
