"""Billing Sync — keeps application profiles in step with Stripe subscriptions."""

__version__ = "0.1.0"
