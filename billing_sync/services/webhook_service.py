"""Webhook pipeline — verified event to reconciled profile."""

from typing import Any

from billing_sync.services import billing_service
from billing_sync.services.event_interpreter import SubscriptionLookup, interpret
from billing_sync.services.profile_store import ProfileStore
from billing_sync.services.reconciler import OutcomeSink, ReconcileOutcome, Reconciler, log_outcome


async def process_event(
    event: Any,
    store: ProfileStore,
    lookup: SubscriptionLookup | None = None,
    sink: OutcomeSink = log_outcome,
) -> ReconcileOutcome:
    """Interpret a verified Stripe event and reconcile it against ``store``.

    ``lookup`` defaults to fetching the subscription from Stripe.

    Raises:
        ProcessingError: any failure after verification; the caller answers
            with an unsuccessful status so Stripe redelivers.
    """
    domain_event = await interpret(event, lookup or billing_service.retrieve_subscription)
    return await Reconciler(store, sink).reconcile(domain_event)
