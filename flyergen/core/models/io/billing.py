"""
Billing I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from flyergen.billing import SubscriptionPlan


class CheckoutRequest(BaseModel):
    price_id: str = Field(min_length=1, description="Stripe price id of the selected plan")


class CheckoutResponse(BaseModel):
    url: str = Field(description="Stripe Checkout or Billing Portal URL")


class SubscriptionRead(BaseModel):
    """The current user's subscription."""

    plan: SubscriptionPlan
    is_paid: bool
    interval: Optional[str] = None
    is_canceled: bool = False
    stripe_current_period_end: Optional[datetime] = None
    credits: int
