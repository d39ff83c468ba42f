"""Settings loading and per-operation requirements."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from billing_sync.config import Settings


def test_postgres_scheme_is_rewritten_for_asyncpg():
    settings = Settings(database_url="postgresql://u:p@db:5432/app")

    assert settings.database_url == "postgresql+asyncpg://u:p@db:5432/app"


def test_publishable_key_is_refused():
    with pytest.raises(ValidationError):
        Settings(stripe_secret_key="pk_test_123")


def test_non_webhook_secret_is_refused():
    with pytest.raises(ValidationError):
        Settings(stripe_webhook_secret="sk_test_oops")


def test_debug_skips_key_checks():
    settings = Settings(debug=True, stripe_secret_key="pk_test_123")

    assert settings.stripe_secret_key == "pk_test_123"


def test_legacy_env_names_are_accepted(monkeypatch):
    monkeypatch.delenv("STRIPE_WEBHOOK_SECRET", raising=False)
    monkeypatch.setenv("STRIPE_WEBHOOK_SIGNING_SECRET", "whsec_legacy")
    monkeypatch.setenv("SUPABASE_URL", "https://project.example.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-role")

    settings = Settings()

    assert settings.stripe_webhook_secret == "whsec_legacy"
    assert settings.profile_store_url == "https://project.example.co"
    assert settings.profile_store_service_key == "service-role"


def test_redirect_urls_are_built_from_app_url():
    settings = Settings(app_url="https://shop.example.com/")

    assert settings.checkout_success_url == "https://shop.example.com/success?session_id={CHECKOUT_SESSION_ID}"
    assert settings.checkout_cancel_url == "https://shop.example.com/cancel"
    assert settings.portal_return_url == "https://shop.example.com/account"


class TestMissingFor:
    def test_fully_configured(self):
        settings = Settings(stripe_secret_key="sk_test_1", stripe_webhook_secret="whsec_1")

        assert settings.missing_for("customers") == []
        assert settings.missing_for("webhooks") == []
        assert settings.missing_for("replay") == []

    def test_webhooks_need_signing_secret(self):
        settings = Settings(stripe_secret_key="sk_test_1", stripe_webhook_secret="")

        assert settings.missing_for("webhooks") == ["STRIPE_WEBHOOK_SECRET"]
        assert settings.missing_for("customers") == []

    def test_rest_backend_needs_endpoint_and_key(self):
        settings = Settings(
            stripe_secret_key="sk_test_1",
            stripe_webhook_secret="whsec_1",
            profile_store_backend="rest",
            profile_store_url="",
            profile_store_service_key="",
        )

        assert settings.missing_for("webhooks") == ["PROFILE_STORE_URL", "PROFILE_STORE_SERVICE_KEY"]
        assert settings.missing_for("replay") == ["PROFILE_STORE_URL", "PROFILE_STORE_SERVICE_KEY"]

    def test_unknown_operation(self):
        with pytest.raises(ValueError):
            Settings().missing_for("refunds")
