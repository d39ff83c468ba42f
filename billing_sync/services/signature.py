"""Webhook signature verification over the raw request body."""

import stripe

from billing_sync.constants import DEFAULT_WEBHOOK_TOLERANCE, MISSING_SIGNATURE_MESSAGE
from billing_sync.errors import VerificationError


def verify(
    raw_body: bytes,
    signature_header: str | None,
    secret: str,
    tolerance: int = DEFAULT_WEBHOOK_TOLERANCE,
) -> stripe.Event:
    """Authenticate a webhook delivery and return the parsed Stripe event.

    The HMAC is recomputed over ``raw_body`` exactly as received; the body is
    only decoded as JSON once the signature and timestamp have been accepted.

    Raises:
        VerificationError: header missing, digest mismatch, timestamp outside
            ``tolerance`` seconds, or an undecodable body.
    """
    if not signature_header:
        raise VerificationError(MISSING_SIGNATURE_MESSAGE)

    try:
        return stripe.Webhook.construct_event(raw_body, signature_header, secret, tolerance=tolerance)
    except stripe.SignatureVerificationError as e:
        raise VerificationError(e.user_message or str(e)) from e
    except ValueError as e:
        raise VerificationError(f"Invalid payload: {e}") from e
