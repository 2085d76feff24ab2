"""
Tests for the premium checkout with the simulated and Stripe providers.
"""
import hashlib
import hmac
import json
import time
from unittest.mock import Mock, patch

from slidesync_api.app.core.config import settings
from tests.conftest import make_premium

STRIPE_POST = "slidesync_api.app.services.payment_service.httpx.post"


def _stripe_response(status_code=200, body=None):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = body or {}
    return response


def _signature(payload: bytes, secret: str, timestamp=None) -> str:
    timestamp = timestamp or int(time.time())
    digest = hmac.new(secret.encode(), f"{timestamp}.".encode() + payload, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


class TestMockCheckout:
    """Checkout without a Stripe key."""

    def test_mock_flow_upgrades_user(self, client, headers):
        response = client.post("/api/v1/payments/checkout", headers=headers)

        assert response.status_code == 201
        session = response.json()
        assert session["provider"] == "mock"
        assert session["url"].endswith(f"/api/v1/payments/{session['payment_id']}/mock-complete")

        payments = client.get("/api/v1/payments/", headers=headers).json()
        assert payments[0]["status"] == "pending"
        assert payments[0]["amount"] == settings.premium_price_cents / 100

        completed = client.get(f"/api/v1/payments/{session['payment_id']}/mock-complete")
        assert completed.status_code == 200
        assert completed.json()["status"] == "success"
        assert client.get("/api/v1/auth/me", headers=headers).json()["subscription_tier"] == "premium"

        # completing twice changes nothing
        again = client.get(f"/api/v1/payments/{session['payment_id']}/mock-complete")
        assert again.json()["confirmed_at"] == completed.json()["confirmed_at"]

    def test_premium_user_cannot_checkout(self, client, headers):
        make_premium()

        assert client.post("/api/v1/payments/checkout", headers=headers).status_code == 400

    def test_unknown_payment(self, client):
        assert client.get("/api/v1/payments/999/mock-complete").status_code == 404

    def test_filter_by_status(self, client, headers):
        client.post("/api/v1/payments/checkout", headers=headers)

        assert client.get("/api/v1/payments/", params={"status_param": "success"}, headers=headers).json() == []
        assert len(client.get("/api/v1/payments/", params={"status_param": "pending"}, headers=headers).json()) == 1


class TestStripeCheckout:
    """Checkout against a mocked Stripe API."""

    def test_creates_stripe_session(self, client, headers, monkeypatch):
        monkeypatch.setattr(settings, "stripe_secret_key", "sk_test_123")
        stripe_session = {"id": "cs_test_1", "url": "https://checkout.stripe.com/c/pay/cs_test_1"}

        with patch(STRIPE_POST, return_value=_stripe_response(body=stripe_session)) as post:
            response = client.post("/api/v1/payments/checkout", headers=headers)

        assert response.status_code == 201
        assert response.json()["url"] == stripe_session["url"]
        assert response.json()["provider"] == "stripe"
        kwargs = post.call_args.kwargs
        assert kwargs["headers"]["Authorization"] == "Bearer sk_test_123"
        assert kwargs["data"]["mode"] == "payment"
        assert kwargs["data"]["line_items[0][price_data][unit_amount]"] == str(settings.premium_price_cents)
        assert kwargs["data"]["customer_email"] == "user@example.com"
        assert post.call_args.args[0].endswith("/checkout/sessions")

    def test_stripe_error_marks_payment_failed(self, client, headers, monkeypatch):
        monkeypatch.setattr(settings, "stripe_secret_key", "sk_test_123")
        error = _stripe_response(400, {"error": {"message": "Invalid API Key provided"}})

        with patch(STRIPE_POST, return_value=error):
            response = client.post("/api/v1/payments/checkout", headers=headers)

        assert response.status_code == 502
        assert response.json()["detail"] == "Invalid API Key provided"
        assert client.get("/api/v1/payments/", headers=headers).json()[0]["status"] == "failed"

    def test_stripe_payment_cannot_be_mock_completed(self, client, headers, monkeypatch):
        monkeypatch.setattr(settings, "stripe_secret_key", "sk_test_123")
        with patch(STRIPE_POST, return_value=_stripe_response(body={"id": "cs_1", "url": "https://x"})):
            payment_id = client.post("/api/v1/payments/checkout", headers=headers).json()["payment_id"]

        assert client.get(f"/api/v1/payments/{payment_id}/mock-complete").status_code == 400


class TestStripeWebhook:
    """Webhook events confirm or expire payments."""

    def _start_checkout(self, client, headers, monkeypatch):
        monkeypatch.setattr(settings, "stripe_secret_key", "sk_test_123")
        with patch(STRIPE_POST, return_value=_stripe_response(body={"id": "cs_hook", "url": "https://x"})):
            return client.post("/api/v1/payments/checkout", headers=headers).json()["payment_id"]

    def test_completed_event_upgrades_user(self, client, headers, monkeypatch):
        payment_id = self._start_checkout(client, headers, monkeypatch)
        event = {"type": "checkout.session.completed", "data": {"object": {"id": "cs_hook"}}}

        response = client.post("/api/v1/payments/stripe/webhook", content=json.dumps(event))

        assert response.json() == {"received": True, "handled": True, "payment_id": payment_id}
        assert client.get("/api/v1/auth/me", headers=headers).json()["subscription_tier"] == "premium"

    def test_expired_event_by_reference(self, client, headers, monkeypatch):
        payment_id = self._start_checkout(client, headers, monkeypatch)
        event = {
            "type": "checkout.session.expired",
            "data": {"object": {"id": "cs_other", "client_reference_id": str(payment_id)}},
        }

        client.post("/api/v1/payments/stripe/webhook", content=json.dumps(event))

        assert client.get("/api/v1/payments/", headers=headers).json()[0]["status"] == "failed"
        assert client.get("/api/v1/auth/me", headers=headers).json()["subscription_tier"] == "free"

    def test_unknown_session_ignored(self, client):
        event = {"type": "checkout.session.completed", "data": {"object": {"id": "cs_nope"}}}

        response = client.post("/api/v1/payments/stripe/webhook", content=json.dumps(event))

        assert response.json() == {"received": True, "handled": False}

    def test_signature_checked_when_secret_set(self, client, headers, monkeypatch):
        self._start_checkout(client, headers, monkeypatch)
        monkeypatch.setattr(settings, "stripe_webhook_secret", "whsec_test")
        payload = json.dumps({"type": "checkout.session.completed", "data": {"object": {"id": "cs_hook"}}}).encode()
        url = "/api/v1/payments/stripe/webhook"

        assert client.post(url, content=payload).status_code == 400
        assert client.post(url, content=payload, headers={"Stripe-Signature": _signature(payload, "wrong")}).status_code == 400
        stale = _signature(payload, "whsec_test", int(time.time()) - 3600)
        assert client.post(url, content=payload, headers={"Stripe-Signature": stale}).status_code == 400

        good = client.post(url, content=payload, headers={"Stripe-Signature": _signature(payload, "whsec_test")})
        assert good.status_code == 200
        assert good.json()["handled"] is True

    def test_invalid_payload(self, client):
        assert client.post("/api/v1/payments/stripe/webhook", content=b"{not json").status_code == 400
