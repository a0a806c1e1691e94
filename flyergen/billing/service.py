"""Billing flows: plan changes through Stripe Checkout / Billing Portal and
subscription updates driven by Stripe webhooks.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from flyergen.core.database.entities.users import User
from flyergen.core.database.repositories.users import UserRepository

from .errors import BillingError, InvalidPriceError
from .plans import SubscriptionPlan, find_plan_by_price_id, is_downgrade, is_same_plan, is_upgrade
from .stripe_client import StripeGateway
from .subscription import get_user_subscription_plan

logger = logging.getLogger(__name__)


class BillingService:
    """Coordinates plans, the user repository and Stripe.

    Args:
        gateway: Stripe access.
        plans: Plan catalogue.
        billing_url: Page Stripe redirects back to.
    """

    def __init__(self, gateway: StripeGateway, plans: List[SubscriptionPlan], billing_url: str) -> None:
        self.gateway = gateway
        self.plans = plans
        self.billing_url = billing_url

    async def create_stripe_session(self, user: User, price_id: str) -> str:
        """Return the Stripe URL the user should be sent to for ``price_id``.

        Paid customers changing interval, downgrading or re-selecting their
        plan go to the Billing Portal. Upgrades and free users go to Checkout.

        Raises:
            InvalidPriceError: If ``price_id`` belongs to no plan.
        """
        target = find_plan_by_price_id(self.plans, price_id)
        if target is None:
            raise InvalidPriceError(price_id)

        current = get_user_subscription_plan(user, self.plans)
        line_items = [{"price": price_id, "quantity": 1}]
        common: Dict[str, Any] = {
            "success_url": self.billing_url,
            "cancel_url": self.billing_url,
            "payment_method_types": ["card"],
            "mode": "subscription",
            "billing_address_collection": "auto",
            "line_items": line_items,
        }

        if current.is_paid and current.stripe_customer_id:
            same_plan_other_interval = (
                is_same_plan(current.title, target.title) and current.stripe_price_id != price_id
            )
            if is_upgrade(current.title, target.title) and not same_plan_other_interval:
                logger.info(f"User {user.id} upgrading {current.title} -> {target.title}")
                session = await self.gateway.create_checkout_session(
                    customer=current.stripe_customer_id,
                    metadata={
                        "userId": user.id,
                        "action": "upgrade",
                        "fromPlan": current.title,
                        "toPlan": target.title,
                    },
                    **common,
                )
            else:
                if is_downgrade(current.title, target.title):
                    logger.info(f"User {user.id} downgrading {current.title} -> {target.title} via portal")
                session = await self.gateway.create_billing_portal_session(
                    customer=current.stripe_customer_id, return_url=self.billing_url
                )
        else:
            session = await self.gateway.create_checkout_session(
                customer_email=user.email,
                metadata={"userId": user.id, "action": "new_subscription", "toPlan": target.title},
                **common,
            )

        url = session.get("url") if hasattr(session, "get") else getattr(session, "url", None)
        if not url:
            raise BillingError("Stripe did not return a session URL")
        return url

    async def handle_webhook_event(self, event: Dict[str, Any], users: UserRepository) -> Optional[User]:
        """Apply a verified Stripe event; returns the updated user, if any."""
        event_type = event["type"]
        obj = event["data"]["object"]

        if event_type == "checkout.session.completed":
            subscription = await self.gateway.retrieve_subscription(obj["subscription"])
            user_id = (obj.get("metadata") or {}).get("userId")
            user = await users.get_by_id(user_id) if user_id else None
            if user is None:
                logger.error(f"Checkout completed for unknown user {user_id}")
                return None
            user.stripe_subscription_id = subscription["id"]
            user.stripe_customer_id = subscription["customer"]
            return await self._apply_subscription(user, subscription, users)

        if event_type == "invoice.payment_succeeded":
            # Initial invoices are handled by checkout.session.completed
            if obj.get("billing_reason") == "subscription_create":
                return None
            subscription = await self.gateway.retrieve_subscription(obj["subscription"])
            user = await users.get_by_subscription_id(subscription["id"])
            if user is None:
                logger.error(f"Invoice paid for unknown subscription {subscription['id']}")
                return None
            return await self._apply_subscription(user, subscription, users)

        logger.debug(f"Ignoring Stripe event {event_type}")
        return None

    async def _apply_subscription(self, user: User, subscription: Any, users: UserRepository) -> User:
        item = subscription["items"]["data"][0]
        price_id = item["price"]["id"]
        period_end = subscription.get("current_period_end") or item.get("current_period_end")
        plan = find_plan_by_price_id(self.plans, price_id)

        user.stripe_price_id = price_id
        if period_end:
            user.stripe_current_period_end = datetime.fromtimestamp(period_end, tz=timezone.utc).replace(tzinfo=None)
        user.credits = plan.credits_for(price_id) if plan else 0
        logger.info(
            f"Subscription {subscription['id']} for user {user.id}: price={price_id}, credits={user.credits}"
        )
        return await users.update(user)
