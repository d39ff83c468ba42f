"""Stripe calls — client setup, customer/checkout/portal creation, subscription lookup."""

import asyncio
import logging
from typing import Any

import stripe

from billing_sync.config import get_settings
from billing_sync.errors import InvalidRequest, ProviderError, SubscriptionLookupError
from billing_sync.schemas.billing import (
    CheckoutSessionResponse,
    CreateCustomerResponse,
    PortalSessionResponse,
)

logger = logging.getLogger(__name__)


def init_stripe() -> None:
    """Configure the process-wide Stripe client from settings. Call once at startup.

    Retries are disabled: a failed call surfaces to the caller, and for
    webhooks Stripe's own redelivery is the retry mechanism.
    """
    settings = get_settings()
    stripe.api_key = settings.stripe_secret_key
    stripe.max_network_retries = 0
    stripe.default_http_client = stripe.RequestsClient(timeout=settings.stripe_timeout)


def _provider_message(error: stripe.StripeError) -> str:
    return error.user_message or str(error)


async def retrieve_subscription(subscription_id: str) -> Any:
    """Fetch a subscription for its authoritative period end and price."""
    try:
        return await asyncio.to_thread(stripe.Subscription.retrieve, subscription_id)
    except stripe.StripeError as e:
        raise SubscriptionLookupError(
            f"Could not retrieve subscription {subscription_id}: {_provider_message(e)}"
        ) from e


async def retrieve_event(event_id: str) -> Any:
    """Fetch an event from Stripe's event log by id."""
    try:
        return await asyncio.to_thread(stripe.Event.retrieve, event_id)
    except stripe.StripeError as e:
        raise ProviderError(_provider_message(e)) from e


async def create_customer(email: str | None) -> CreateCustomerResponse:
    """Create a Stripe customer tagged with this application as its source."""
    if not email:
        raise InvalidRequest("Email is required")

    settings = get_settings()
    try:
        customer = await asyncio.to_thread(
            stripe.Customer.create,
            email=email,
            metadata={"source": settings.stripe_customer_source},
        )
    except stripe.StripeError as e:
        logger.error(f"Error creating customer: {e}")
        raise ProviderError(_provider_message(e)) from e

    return CreateCustomerResponse(customer_id=customer.id, email=customer.email)


async def create_checkout_session(price_id: str | None, customer_id: str | None) -> CheckoutSessionResponse:
    """Create a subscription-mode Checkout session for an existing customer."""
    if not price_id or not customer_id:
        raise InvalidRequest("Price ID and Customer ID are required")

    settings = get_settings()
    try:
        session = await asyncio.to_thread(
            stripe.checkout.Session.create,
            customer=customer_id,
            payment_method_types=["card"],
            line_items=[{"price": price_id, "quantity": 1}],
            mode="subscription",
            success_url=settings.checkout_success_url,
            cancel_url=settings.checkout_cancel_url,
            metadata={"customer_id": customer_id, "price_id": price_id},
            subscription_data={"metadata": {"customer_id": customer_id}},
        )
    except stripe.StripeError as e:
        logger.error(f"Error creating checkout session: {e}")
        raise ProviderError(_provider_message(e)) from e

    return CheckoutSessionResponse(session_id=session.id, url=session.url)


async def create_portal_session(customer_id: str | None) -> PortalSessionResponse:
    """Create a Stripe Customer Portal session and return its URL."""
    if not customer_id:
        raise InvalidRequest("Customer ID is required")

    settings = get_settings()
    try:
        session = await asyncio.to_thread(
            stripe.billing_portal.Session.create,
            customer=customer_id,
            return_url=settings.portal_return_url,
        )
    except stripe.StripeError as e:
        logger.error(f"Error creating portal session: {e}")
        raise ProviderError(_provider_message(e)) from e

    return PortalSessionResponse(url=session.url)
