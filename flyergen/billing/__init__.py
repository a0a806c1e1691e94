"""Subscription plans, user subscription state and Stripe integration."""

from .errors import BillingError, InvalidPriceError, WebhookSignatureError
from .plans import SubscriptionPlan, build_pricing_data, find_plan_by_price_id
from .service import BillingService
from .stripe_client import StripeGateway
from .subscription import UserSubscriptionPlan, get_user_subscription_plan

__all__ = [
    "BillingError",
    "BillingService",
    "InvalidPriceError",
    "StripeGateway",
    "SubscriptionPlan",
    "UserSubscriptionPlan",
    "WebhookSignatureError",
    "build_pricing_data",
    "find_plan_by_price_id",
    "get_user_subscription_plan",
]
