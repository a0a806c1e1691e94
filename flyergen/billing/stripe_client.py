"""Thin wrapper around the Stripe SDK.

The SDK is synchronous; every call is run in the threadpool so request
handlers stay non-blocking. Routes depend on ``StripeGateway`` rather than on
the ``stripe`` module, which lets tests substitute a fake.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import stripe
from fastapi.concurrency import run_in_threadpool

from .errors import WebhookSignatureError

logger = logging.getLogger(__name__)


class StripeGateway:
    """Stripe operations used by the billing flows.

    Args:
        api_key: Stripe secret key.
        webhook_secret: Signing secret of the webhook endpoint.
    """

    def __init__(self, api_key: Optional[str], webhook_secret: Optional[str]) -> None:
        self.api_key = api_key
        self.webhook_secret = webhook_secret

    def construct_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """Verify the ``Stripe-Signature`` header and parse the event.

        Raises:
            WebhookSignatureError: If the payload or signature is invalid.
        """
        if not signature or not self.webhook_secret:
            raise WebhookSignatureError("Missing Stripe signature or webhook secret")
        try:
            return stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as e:
            raise WebhookSignatureError(str(e)) from e

    async def retrieve_subscription(self, subscription_id: str) -> Any:
        return await run_in_threadpool(stripe.Subscription.retrieve, subscription_id, api_key=self.api_key)

    async def create_checkout_session(self, **params: Any) -> Any:
        return await run_in_threadpool(stripe.checkout.Session.create, api_key=self.api_key, **params)

    async def create_billing_portal_session(self, customer: str, return_url: str) -> Any:
        return await run_in_threadpool(
            stripe.billing_portal.Session.create, customer=customer, return_url=return_url, api_key=self.api_key
        )

    async def is_subscription_canceled(self, subscription_id: str) -> bool:
        """Whether the subscription is set to cancel at period end; False if Stripe cannot find it."""
        try:
            subscription = await self.retrieve_subscription(subscription_id)
        except stripe.StripeError as e:
            logger.warning(f"Stripe subscription {subscription_id} not found: {e}")
            return False
        return bool(subscription.get("cancel_at_period_end"))
