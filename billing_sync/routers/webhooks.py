"""Webhook routes — Stripe."""

import logging

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import PlainTextResponse

from billing_sync.config import get_settings
from billing_sync.constants import OPERATION_WEBHOOKS
from billing_sync.errors import ProcessingError, ProfileNotFoundError, VerificationError
from billing_sync.routers.deps import get_profile_store, require_configured
from billing_sync.schemas.billing import WebhookAck
from billing_sync.services.profile_store import ProfileStore
from billing_sync.services.signature import verify
from billing_sync.services.webhook_service import process_event

logger = logging.getLogger(__name__)
router = APIRouter(tags=["webhooks"])


@router.post(
    "/stripe-webhook",
    response_model=WebhookAck,
    dependencies=[Depends(require_configured(OPERATION_WEBHOOKS))],
)
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None, alias="stripe-signature"),
    store: ProfileStore = Depends(get_profile_store),
):
    settings = get_settings()
    payload = await request.body()

    try:
        event = verify(
            payload,
            stripe_signature,
            settings.stripe_webhook_secret,
            tolerance=settings.stripe_webhook_tolerance,
        )
    except VerificationError as e:
        logger.warning(f"Webhook signature verification failed: {e.message}")
        return PlainTextResponse(e.message, status_code=400)

    event_id = getattr(event, "id", None)
    logger.info(f"Stripe webhook: {getattr(event, 'type', None)} ({event_id})")

    try:
        await process_event(event, store)
    except ProfileNotFoundError as e:
        logger.error(f"provisioning_gap: {e.message} (event {event_id})")
        return PlainTextResponse(f"Webhook error: {e.message}", status_code=400)
    except ProcessingError as e:
        logger.error(f"Error processing webhook {event_id}: {e.message}")
        return PlainTextResponse(f"Webhook error: {e.message}", status_code=400)

    return WebhookAck()
