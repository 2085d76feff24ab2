"""
Pydantic models for payment data.

A payment is created when a user starts the premium checkout and is
confirmed either by the Stripe webhook or, with the simulated
provider, by the mock-complete endpoint.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PaymentRead(BaseModel):
    """Schema for reading a payment."""

    id: int
    amount: float = Field(..., examples=[5.0])
    currency: str = Field("usd", examples=["usd"])
    description: Optional[str] = None
    provider: str = Field(..., examples=["stripe"], description="stripe or mock")
    status: str = Field("pending", examples=["pending"])
    external_id: Optional[str] = Field(None, examples=["cs_test_a1b2c3"])
    checkout_url: Optional[str] = None
    created_at: datetime
    confirmed_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
    }


class CheckoutSession(BaseModel):
    payment_id: int
    provider: str
    url: str
