"""Centralized application constants — single source of truth for hardcoded values."""

# --- Stripe webhook ---
STRIPE_SIGNATURE_HEADER = "Stripe-Signature"
DEFAULT_WEBHOOK_TOLERANCE = 300  # seconds
MISSING_SIGNATURE_MESSAGE = "No stripe-signature header value was provided."

# --- Stripe event types ---
EVENT_CHECKOUT_COMPLETED = "checkout.session.completed"
EVENT_SUBSCRIPTION_UPDATED = "customer.subscription.updated"
EVENT_SUBSCRIPTION_DELETED = "customer.subscription.deleted"
EVENT_INVOICE_PAYMENT_FAILED = "invoice.payment_failed"

# --- Stripe subscription status ---
PROVIDER_STATUS_ACTIVE = "active"

# --- HTTP Client ---
HTTP_TOTAL_TIMEOUT = 10  # seconds
HTTP_CONNECT_TIMEOUT = 5  # seconds

# --- Profile store ---
PROFILES_TABLE = "profiles"
REST_PATH_PREFIX = "/rest/v1"

# --- CORS ---
CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]

# --- Operations (for configuration checks) ---
OPERATION_CUSTOMERS = "customers"
OPERATION_WEBHOOKS = "webhooks"
OPERATION_REPLAY = "replay"
