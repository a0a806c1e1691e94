"""Error types for billing."""

from __future__ import annotations


class BillingError(Exception):
    """Base error for billing failures."""


class InvalidPriceError(BillingError):
    """Raised when a price id matches no subscription plan."""

    def __init__(self, price_id: str) -> None:
        super().__init__(f"Invalid price ID: {price_id}")
        self.price_id = price_id


class WebhookSignatureError(BillingError):
    """Raised when a Stripe webhook payload fails signature verification."""
