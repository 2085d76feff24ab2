"""
Payment endpoints for API v1.

Premium upgrade via checkout.  With Stripe configured the returned URL
is a Stripe Checkout page and the Stripe webhook confirms the payment;
otherwise the URL points to ``/payments/{id}/mock-complete``, which
confirms a simulated payment directly.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Path, Request, status

from slidesync_api.app.core.security import get_current_user
from slidesync_api.app.schemas.payment import CheckoutSession, PaymentRead
from slidesync_api.app.services.payment_service import PaymentProviderError, PaymentService

router = APIRouter()


@router.post("/checkout", response_model=CheckoutSession, status_code=status.HTTP_201_CREATED)
async def create_checkout_session(current_user: dict = Depends(get_current_user)) -> CheckoutSession:
    """Start the premium checkout and return the URL to send the user to.

    Returns 400 if the account is already premium and 502 with the
    provider's message if the payment provider fails.
    """
    try:
        return await PaymentService.create_checkout_session(current_user["user_id"], current_user.get("sub"))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except PaymentProviderError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.get("/", response_model=List[PaymentRead])
async def list_payments(
    status_param: Optional[str] = None,
    current_user: dict = Depends(get_current_user),
) -> List[PaymentRead]:
    """List the current user's payments, optionally filtered by status."""
    return await PaymentService.list_payments(current_user["user_id"], status=status_param)


@router.get("/{payment_id}/mock-complete", response_model=PaymentRead)
async def mock_complete(payment_id: int = Path(..., description="Payment ID")) -> PaymentRead:
    """Complete a simulated checkout.

    This is where the simulated checkout URL sends the browser, so it
    needs no token; it only accepts payments created by the mock provider.
    """
    try:
        return await PaymentService.complete_mock_payment(payment_id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/stripe/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="Stripe-Signature"),
) -> dict:
    """Receive Stripe checkout events.

    ``checkout.session.completed`` upgrades the payer to premium and
    ``checkout.session.expired`` marks the payment failed.
    """
    payload = await request.body()
    try:
        return await PaymentService.handle_stripe_event(payload, stripe_signature)
    except (PermissionError, ValueError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
