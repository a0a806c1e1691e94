"""Subscription plan catalogue.

Plans are ordered Starter < Pro < Business. Each plan has a monthly and a
yearly Stripe price id (configured through settings) and the credits granted
per billing cycle.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

Interval = Literal["month", "year"]

PLAN_HIERARCHY: Dict[str, int] = {
    "Starter": 1,
    "Pro": 2,
    "Business": 3,
}


class PlanPrices(BaseModel):
    monthly: float = 0
    yearly: float = 0


class PlanStripeIds(BaseModel):
    monthly: Optional[str] = None
    yearly: Optional[str] = None


class PlanCredits(BaseModel):
    monthly: int = 0
    yearly: int = 0


class SubscriptionPlan(BaseModel):
    """A purchasable plan."""

    title: str
    description: str
    benefits: List[str] = Field(default_factory=list)
    limitations: List[str] = Field(default_factory=list)
    prices: PlanPrices = Field(default_factory=PlanPrices)
    stripe_ids: PlanStripeIds = Field(default_factory=PlanStripeIds)
    credits: PlanCredits = Field(default_factory=PlanCredits)

    def interval_for(self, price_id: Optional[str]) -> Optional[Interval]:
        if price_id and price_id == self.stripe_ids.monthly:
            return "month"
        if price_id and price_id == self.stripe_ids.yearly:
            return "year"
        return None

    def credits_for(self, price_id: Optional[str]) -> int:
        """Credits granted per cycle for the given price id (0 if it is not this plan's)."""
        interval = self.interval_for(price_id)
        if interval == "year":
            return self.credits.yearly
        if interval == "month":
            return self.credits.monthly
        return 0


NO_PLAN = SubscriptionPlan(title="No Plan", description="No active subscription")


def build_pricing_data(stripe_config: Any) -> List[SubscriptionPlan]:
    """Build the plan catalogue from ``settings.stripe``."""
    return [
        SubscriptionPlan(
            title="Starter",
            description="For occasional event flyers",
            benefits=["50 image credits per month", "All event templates", "Standard quality"],
            limitations=["No upscaling priority"],
            prices=PlanPrices(monthly=9, yearly=90),
            stripe_ids=PlanStripeIds(
                monthly=stripe_config.starter_monthly_plan_id, yearly=stripe_config.starter_yearly_plan_id
            ),
            credits=PlanCredits(monthly=50, yearly=600),
        ),
        SubscriptionPlan(
            title="Pro",
            description="For regular event organizers",
            benefits=["150 image credits per month", "All event templates", "High quality", "Upscaling"],
            prices=PlanPrices(monthly=19, yearly=190),
            stripe_ids=PlanStripeIds(monthly=stripe_config.pro_monthly_plan_id, yearly=stripe_config.pro_yearly_plan_id),
            credits=PlanCredits(monthly=150, yearly=1800),
        ),
        SubscriptionPlan(
            title="Business",
            description="For agencies and venues",
            benefits=["500 image credits per month", "All event templates", "Ultra quality", "Upscaling"],
            prices=PlanPrices(monthly=49, yearly=490),
            stripe_ids=PlanStripeIds(
                monthly=stripe_config.business_monthly_plan_id, yearly=stripe_config.business_yearly_plan_id
            ),
            credits=PlanCredits(monthly=500, yearly=6000),
        ),
    ]


def find_plan_by_price_id(plans: List[SubscriptionPlan], price_id: Optional[str]) -> Optional[SubscriptionPlan]:
    """Find the plan owning ``price_id`` as its monthly or yearly price."""
    if not price_id:
        return None
    for plan in plans:
        if plan.interval_for(price_id) is not None:
            return plan
    return None


def plan_level(title: str) -> int:
    """Position in the plan hierarchy; unknown plans (``No Plan``) rank 0."""
    return PLAN_HIERARCHY.get(title, 0)


def is_upgrade(current: str, target: str) -> bool:
    return plan_level(target) > plan_level(current)


def is_downgrade(current: str, target: str) -> bool:
    return plan_level(target) < plan_level(current)


def is_same_plan(current: str, target: str) -> bool:
    return plan_level(target) == plan_level(current)
