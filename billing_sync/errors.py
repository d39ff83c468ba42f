"""Error taxonomy shared by the webhook pipeline and the outbound billing routes."""


class BillingSyncError(Exception):
    """Root of all application errors."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ConfigurationError(BillingSyncError):
    """A setting required by the requested operation is missing."""


class InvalidRequest(BillingSyncError):
    """Missing or malformed client input."""


class ProviderError(BillingSyncError):
    """An outbound call to Stripe failed; ``message`` is Stripe's own text."""


class VerificationError(BillingSyncError):
    """Webhook signature mismatch, stale timestamp or missing header."""


class ProcessingError(BillingSyncError):
    """A verified event could not be applied; Stripe should redeliver it."""


class EventPayloadError(ProcessingError):
    """A verified event lacks a field needed for reconciliation."""


class SubscriptionLookupError(ProcessingError):
    """Fetching the subscription behind a checkout session failed."""


class ReconcileError(ProcessingError):
    """Applying a subscription snapshot to the profile store failed."""


class StoreError(ReconcileError):
    """The profile store rejected the update or could not be reached."""


class ProfileNotFoundError(StoreError):
    """No profile row carries the given Stripe customer id."""

    def __init__(self, customer_id: str):
        super().__init__(f"No profile found for customer {customer_id}")
        self.customer_id = customer_id
