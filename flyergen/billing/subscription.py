"""User subscription state derived from the Stripe fields on the user row."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from pydantic import BaseModel

from .plans import NO_PLAN, Interval, SubscriptionPlan, find_plan_by_price_id

# Grace period after the end of a billing period
PERIOD_GRACE = timedelta(days=1)


class UserSubscriptionPlan(BaseModel):
    """The plan a user is on, merged with the user's Stripe state."""

    plan: SubscriptionPlan
    stripe_customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None
    stripe_price_id: Optional[str] = None
    stripe_current_period_end: Optional[datetime] = None
    user_credits: int = 0
    is_paid: bool = False
    interval: Optional[Interval] = None
    is_canceled: bool = False

    @property
    def title(self) -> str:
        return self.plan.title


def is_paid_subscription(
    price_id: Optional[str],
    subscription_id: Optional[str],
    period_end: Optional[datetime],
    now: Optional[datetime] = None,
) -> bool:
    """A user is paid with a price id and either a live period or an active subscription id."""
    if not price_id:
        return False
    now = now or datetime.now(timezone.utc).replace(tzinfo=None)
    has_valid_period = period_end is not None and _naive(period_end) + PERIOD_GRACE > now
    return has_valid_period or bool(subscription_id)


def get_user_subscription_plan(
    user, plans: List[SubscriptionPlan], now: Optional[datetime] = None
) -> UserSubscriptionPlan:
    """Compute the subscription plan of ``user`` (a ``User`` entity)."""
    is_paid = is_paid_subscription(
        user.stripe_price_id, user.stripe_subscription_id, user.stripe_current_period_end, now
    )
    user_plan = find_plan_by_price_id(plans, user.stripe_price_id)
    plan = user_plan if is_paid and user_plan else NO_PLAN
    interval = user_plan.interval_for(user.stripe_price_id) if is_paid and user_plan else None

    return UserSubscriptionPlan(
        plan=plan,
        stripe_customer_id=user.stripe_customer_id,
        stripe_subscription_id=user.stripe_subscription_id,
        stripe_price_id=user.stripe_price_id,
        stripe_current_period_end=user.stripe_current_period_end,
        user_credits=user.credits or 0,
        is_paid=is_paid,
        interval=interval,
    )


def _naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
