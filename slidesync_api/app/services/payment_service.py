"""
Business logic for premium payments.

A payment row is created with status ``pending`` when the user starts
checkout.  With ``STRIPE_SECRET_KEY`` configured a Stripe Checkout
Session is created over HTTPS and the user is sent to its URL; without
a key a simulated session points at the API's own mock-complete
endpoint.  Confirming a payment upgrades its owner to the premium tier.
"""

import hashlib
import hmac
import json
import logging
import sqlite3
import time
from typing import Any, Dict, List, Optional

import httpx

from slidesync_api.app.core.config import settings
from slidesync_api.app.core.db import get_connection
from slidesync_api.app.schemas.payment import CheckoutSession, PaymentRead
from slidesync_api.app.services.activity_service import ActivityService
from slidesync_api.app.services.user_service import UserService

logger = logging.getLogger(__name__)

PAYMENT_COLUMNS = (
    "id, user_id, amount, currency, description, provider, status, external_id, "
    "checkout_url, created_at, confirmed_at"
)
# Stripe rejects webhook signatures older than this by default.
WEBHOOK_TOLERANCE_SECONDS = 300


class PaymentProviderError(Exception):
    """Raised when the payment provider rejects or fails a request."""


def _row_to_payment(row: sqlite3.Row) -> PaymentRead:
    return PaymentRead(
        id=row["id"],
        amount=row["amount"],
        currency=row["currency"],
        description=row["description"],
        provider=row["provider"],
        status=row["status"],
        external_id=row["external_id"],
        checkout_url=row["checkout_url"],
        created_at=row["created_at"],
        confirmed_at=row["confirmed_at"],
    )


class PaymentService:
    """Premium checkout, confirmation and provider callbacks."""

    @classmethod
    async def create_checkout_session(cls, user_id: int, email: Optional[str] = None) -> CheckoutSession:
        """Start a premium checkout for a user.

        Raises ``ValueError`` if the user already has premium and
        ``PaymentProviderError`` if Stripe refuses the session.
        """
        user = await UserService.get_user_by_id(user_id)
        if user is None:
            raise LookupError(f"User {user_id} not found")
        if user.subscription_tier == "premium":
            raise ValueError("Account is already premium")

        provider = "stripe" if settings.stripe_secret_key else "mock"
        amount = settings.premium_price_cents / 100
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO payments (user_id, amount, currency, provider, status, description)
                VALUES (?, ?, ?, ?, 'pending', ?)
                """,
                (user_id, amount, settings.premium_currency, provider, settings.premium_product_name),
            )
            payment_id = cursor.lastrowid
            conn.commit()
        finally:
            conn.close()

        if provider == "stripe":
            try:
                session = cls._create_stripe_session(payment_id, user_id, email or user.email)
            except PaymentProviderError:
                cls._set_status(payment_id, "failed")
                raise
            external_id = session.get("id")
            url = session.get("url")
        else:
            external_id = f"mock_{payment_id}_{int(time.time() * 1000)}"
            url = f"{settings.public_base_url}/api/v1/payments/{payment_id}/mock-complete"

        conn = get_connection()
        try:
            conn.execute(
                "UPDATE payments SET external_id = ?, checkout_url = ? WHERE id = ?",
                (external_id, url, payment_id),
            )
            conn.commit()
        finally:
            conn.close()
        logger.info("Created %s checkout %s for user %s", provider, external_id, user_id)
        await ActivityService.record(
            user_id, "checkout", "payment", payment_id, {"provider": provider, "amount": amount}
        )
        return CheckoutSession(payment_id=payment_id, provider=provider, url=url)

    @classmethod
    def _create_stripe_session(cls, payment_id: int, user_id: int, email: Optional[str]) -> Dict[str, Any]:
        """Create a Stripe Checkout Session (form-encoded, as Stripe's API expects)."""
        success_url = settings.checkout_success_url
        separator = "&" if "?" in success_url else "?"
        data = {
            "mode": "payment",
            "payment_method_types[0]": "card",
            "line_items[0][price_data][currency]": settings.premium_currency,
            "line_items[0][price_data][product_data][name]": settings.premium_product_name,
            "line_items[0][price_data][unit_amount]": str(settings.premium_price_cents),
            "line_items[0][quantity]": "1",
            "success_url": f"{success_url}{separator}session_id={{CHECKOUT_SESSION_ID}}",
            "cancel_url": settings.checkout_cancel_url,
            "client_reference_id": str(payment_id),
            "metadata[payment_id]": str(payment_id),
            "metadata[user_id]": str(user_id),
        }
        if email and "@" in email:
            data["customer_email"] = email
        headers = {"Authorization": f"Bearer {settings.stripe_secret_key}"}
        url = f"{settings.stripe_api_base}/checkout/sessions"
        try:
            response = httpx.post(url, data=data, headers=headers, timeout=30)
        except httpx.HTTPError as exc:
            logger.error("Failed to reach Stripe: %s", exc)
            raise PaymentProviderError("Payment provider is unavailable") from exc
        if response.status_code >= 400:
            try:
                message = response.json().get("error", {}).get("message")
            except ValueError:
                message = None
            logger.error("Stripe rejected checkout session: HTTP %s %s", response.status_code, message)
            raise PaymentProviderError(message or f"Payment provider error (HTTP {response.status_code})")
        return response.json()

    @classmethod
    def _set_status(cls, payment_id: int, status: str) -> None:
        conn = get_connection()
        try:
            conn.execute("UPDATE payments SET status = ? WHERE id = ?", (status, payment_id))
            conn.commit()
        finally:
            conn.close()

    @classmethod
    async def get_payment(cls, payment_id: int) -> PaymentRead:
        conn = get_connection()
        try:
            row = conn.execute(f"SELECT {PAYMENT_COLUMNS} FROM payments WHERE id = ?", (payment_id,)).fetchone()
        finally:
            conn.close()
        if not row:
            raise LookupError(f"Payment {payment_id} not found")
        return _row_to_payment(row)

    @classmethod
    async def list_payments(cls, user_id: int, status: Optional[str] = None) -> List[PaymentRead]:
        """List a user's payments, newest first."""
        conn = get_connection()
        try:
            query = f"SELECT {PAYMENT_COLUMNS} FROM payments WHERE user_id = ?"
            params: List[Any] = [user_id]
            if status:
                query += " AND status = ?"
                params.append(status)
            query += " ORDER BY created_at DESC, id DESC"
            rows = conn.execute(query, tuple(params)).fetchall()
            return [_row_to_payment(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def confirm_payment(cls, payment_id: int) -> PaymentRead:
        """Mark a payment as successful and upgrade its owner to premium.

        Confirming an already successful payment changes nothing.
        """
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cursor.execute("SELECT id, user_id, status FROM payments WHERE id = ?", (payment_id,)).fetchone()
            if not row:
                raise LookupError(f"Payment {payment_id} not found")
            user_id = row["user_id"]
            already_confirmed = row["status"] == "success"
            if not already_confirmed:
                cursor.execute(
                    "UPDATE payments SET status = 'success', confirmed_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (payment_id,),
                )
                conn.commit()
        finally:
            conn.close()
        if not already_confirmed:
            await UserService.set_subscription_tier(user_id, "premium")
            logger.info("Payment %s confirmed; user %s upgraded to premium", payment_id, user_id)
            await ActivityService.record(user_id, "confirm", "payment", payment_id, {"status": "success"})
        return await cls.get_payment(payment_id)

    @classmethod
    async def complete_mock_payment(cls, payment_id: int) -> PaymentRead:
        """Finish a simulated checkout; only valid for ``mock`` payments."""
        payment = await cls.get_payment(payment_id)
        if payment.provider != "mock":
            raise ValueError("Only simulated payments can be completed here")
        return await cls.confirm_payment(payment_id)

    @classmethod
    def verify_webhook_signature(cls, payload: bytes, signature_header: Optional[str]) -> None:
        """Check a ``Stripe-Signature`` header (``t=...,v1=...``).

        Does nothing when no webhook secret is configured.  Raises
        ``PermissionError`` for missing, stale or wrong signatures.
        """
        secret = settings.stripe_webhook_secret
        if not secret:
            return
        if not signature_header:
            raise PermissionError("Missing webhook signature")
        timestamp = None
        signatures = []
        for item in signature_header.split(","):
            key, _, value = item.strip().partition("=")
            if key == "t":
                timestamp = value
            elif key == "v1":
                signatures.append(value)
        if not timestamp or not signatures:
            raise PermissionError("Malformed webhook signature")
        try:
            age = abs(time.time() - int(timestamp))
        except ValueError as exc:
            raise PermissionError("Malformed webhook signature") from exc
        if age > WEBHOOK_TOLERANCE_SECONDS:
            raise PermissionError("Webhook signature expired")
        signed_payload = f"{timestamp}.".encode("utf-8") + payload
        expected = hmac.new(secret.encode("utf-8"), signed_payload, hashlib.sha256).hexdigest()
        if not any(hmac.compare_digest(expected, sig) for sig in signatures):
            raise PermissionError("Invalid webhook signature")

    @classmethod
    async def handle_stripe_event(cls, payload: bytes, signature_header: Optional[str] = None) -> Dict[str, Any]:
        """Process a Stripe webhook event.

        ``checkout.session.completed`` confirms the matching payment and
        ``checkout.session.expired`` marks it failed.  Other event types
        and unknown sessions are acknowledged and ignored.
        """
        cls.verify_webhook_signature(payload, signature_header)
        try:
            event = json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ValueError("Invalid webhook payload") from exc
        event_type = event.get("type")
        session = (event.get("data") or {}).get("object") or {}
        payment_id = cls._find_payment_id(session.get("id"), session.get("client_reference_id"))
        if payment_id is None:
            logger.info("Ignoring Stripe event %s for unknown session %s", event_type, session.get("id"))
            return {"received": True, "handled": False}
        if event_type == "checkout.session.completed":
            await cls.confirm_payment(payment_id)
        elif event_type == "checkout.session.expired":
            cls._set_status(payment_id, "failed")
            logger.info("Checkout for payment %s expired", payment_id)
        else:
            return {"received": True, "handled": False}
        return {"received": True, "handled": True, "payment_id": payment_id}

    @classmethod
    def _find_payment_id(cls, external_id: Optional[str], reference: Optional[str]) -> Optional[int]:
        conn = get_connection()
        try:
            row = None
            if external_id:
                row = conn.execute("SELECT id FROM payments WHERE external_id = ?", (external_id,)).fetchone()
            if row is None and reference and str(reference).isdigit():
                row = conn.execute("SELECT id FROM payments WHERE id = ?", (int(reference),)).fetchone()
            return row["id"] if row else None
        finally:
            conn.close()
