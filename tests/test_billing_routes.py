"""Outbound billing routes — customer, checkout and portal creation."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
import stripe
from starlette.testclient import TestClient

from billing_sync.app import create_app
from billing_sync.config import Settings
from billing_sync.routers import deps


class StripeRecorder:
    """Stand-in for a Stripe ``create`` classmethod."""

    def __init__(self, result=None, error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls: list[dict] = []

    def __call__(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return self.result


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())


# ------------------------------------------------------------------
# create-customer
# ------------------------------------------------------------------


class TestCreateCustomer:
    def test_creates_customer(self, client, monkeypatch):
        recorder = StripeRecorder(SimpleNamespace(id="cus_new", email="ada@example.com"))
        monkeypatch.setattr(stripe.Customer, "create", recorder)

        resp = client.post("/create-customer", json={"email": "ada@example.com"})

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/json")
        assert resp.json() == {"customer_id": "cus_new", "email": "ada@example.com"}
        assert recorder.calls == [{"email": "ada@example.com", "metadata": {"source": "billing-sync"}}]

    def test_missing_email_is_400(self, client, monkeypatch):
        recorder = StripeRecorder()
        monkeypatch.setattr(stripe.Customer, "create", recorder)

        resp = client.post("/create-customer", json={})

        assert resp.status_code == 400
        assert resp.json() == {"error": "Email is required"}
        assert recorder.calls == []

    def test_provider_error_message_is_returned(self, client, monkeypatch):
        error = stripe.InvalidRequestError("Invalid email address: nope", param="email")
        monkeypatch.setattr(stripe.Customer, "create", StripeRecorder(error=error))

        resp = client.post("/create-customer", json={"email": "nope"})

        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid email address: nope"}

    def test_malformed_json_is_400(self, client):
        resp = client.post(
            "/create-customer",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )

        assert resp.status_code == 400
        assert "error" in resp.json()

    def test_non_string_email_is_400(self, client):
        resp = client.post("/create-customer", json={"email": ["a", "b"]})

        assert resp.status_code == 400


# ------------------------------------------------------------------
# create-checkout-session
# ------------------------------------------------------------------


class TestCreateCheckoutSession:
    def test_creates_subscription_checkout(self, client, monkeypatch):
        recorder = StripeRecorder(SimpleNamespace(id="cs_test_1", url="https://checkout.stripe.com/c/cs_test_1"))
        monkeypatch.setattr(stripe.checkout.Session, "create", recorder)

        resp = client.post("/create-checkout-session", json={"priceId": "price_A", "customerId": "cus_1"})

        assert resp.status_code == 200
        assert resp.json() == {"sessionId": "cs_test_1", "url": "https://checkout.stripe.com/c/cs_test_1"}

        call = recorder.calls[0]
        assert call["mode"] == "subscription"
        assert call["customer"] == "cus_1"
        assert call["line_items"] == [{"price": "price_A", "quantity": 1}]
        assert call["metadata"] == {"customer_id": "cus_1", "price_id": "price_A"}
        assert call["subscription_data"] == {"metadata": {"customer_id": "cus_1"}}
        assert call["success_url"] == "https://app.example.com/success?session_id={CHECKOUT_SESSION_ID}"
        assert call["cancel_url"] == "https://app.example.com/cancel"

    def test_missing_customer_id_makes_no_outbound_call(self, client, monkeypatch):
        recorder = StripeRecorder()
        monkeypatch.setattr(stripe.checkout.Session, "create", recorder)

        resp = client.post("/create-checkout-session", json={"priceId": "price_A"})

        assert resp.status_code == 400
        assert resp.json() == {"error": "Price ID and Customer ID are required"}
        assert recorder.calls == []

    def test_provider_error_is_400(self, client, monkeypatch):
        error = stripe.InvalidRequestError("No such price: 'price_X'", param="line_items[0][price]")
        monkeypatch.setattr(stripe.checkout.Session, "create", StripeRecorder(error=error))

        resp = client.post("/create-checkout-session", json={"priceId": "price_X", "customerId": "cus_1"})

        assert resp.status_code == 400
        assert resp.json() == {"error": "No such price: 'price_X'"}


# ------------------------------------------------------------------
# create-portal-session
# ------------------------------------------------------------------


class TestCreatePortalSession:
    def test_returns_portal_url(self, client, monkeypatch):
        recorder = StripeRecorder(SimpleNamespace(url="https://billing.stripe.com/p/session/abc"))
        monkeypatch.setattr(stripe.billing_portal.Session, "create", recorder)

        resp = client.post("/create-portal-session", json={"customerId": "cus_1"})

        assert resp.status_code == 200
        assert resp.json() == {"url": "https://billing.stripe.com/p/session/abc"}
        assert recorder.calls == [{"customer": "cus_1", "return_url": "https://app.example.com/account"}]

    def test_missing_customer_id_is_400(self, client):
        resp = client.post("/create-portal-session", json={})

        assert resp.status_code == 400
        assert resp.json() == {"error": "Customer ID is required"}


# ------------------------------------------------------------------
# Cross-cutting
# ------------------------------------------------------------------


def test_cors_preflight_is_permissive(client):
    resp = client.options(
        "/create-checkout-session",
        headers={
            "Origin": "https://www.example.org",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type, authorization",
        },
    )

    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"


def test_unconfigured_stripe_key_is_503(client, monkeypatch):
    monkeypatch.setattr(deps, "get_settings", lambda: Settings(stripe_secret_key=""))

    resp = client.post("/create-customer", json={"email": "ada@example.com"})

    assert resp.status_code == 503
    assert "STRIPE_SECRET_KEY" in resp.json()["error"]


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_lifespan_starts_and_stops_cleanly():
    with TestClient(create_app()) as client:
        resp = client.get("/health")

    assert resp.status_code == 200
    assert stripe.api_key == "sk_test_dummy"
    assert stripe.max_network_retries == 0
