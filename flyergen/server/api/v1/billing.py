"""
Billing Endpoints.

Subscription state of the signed-in user and the Stripe session used to
subscribe, upgrade or manage the subscription.
"""

from fastapi import APIRouter, HTTPException, status

from flyergen.billing import InvalidPriceError, get_user_subscription_plan
from flyergen.core.logging_config import get_logger
from flyergen.core.models.io import CheckoutRequest, CheckoutResponse, SubscriptionRead
from flyergen.server.services.deps import BillingServiceDep, CurrentUserDep

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/subscription",
    response_model=SubscriptionRead,
    summary="Get Subscription",
    description="The current user's plan, billing interval and cancellation state.",
)
async def get_subscription(user: CurrentUserDep, billing: BillingServiceDep) -> SubscriptionRead:
    plan = get_user_subscription_plan(user, billing.plans)
    is_canceled = False
    if plan.is_paid and plan.stripe_subscription_id:
        is_canceled = await billing.gateway.is_subscription_canceled(plan.stripe_subscription_id)
    return SubscriptionRead(
        plan=plan.plan,
        is_paid=plan.is_paid,
        interval=plan.interval,
        is_canceled=is_canceled,
        stripe_current_period_end=plan.stripe_current_period_end,
        credits=plan.user_credits,
    )


@router.post(
    "/checkout",
    response_model=CheckoutResponse,
    summary="Create Stripe Session",
    description="Return the Stripe Checkout or Billing Portal URL for the selected price.",
    responses={400: {"description": "Unknown price id"}},
)
async def create_checkout(payload: CheckoutRequest, user: CurrentUserDep, billing: BillingServiceDep) -> CheckoutResponse:
    try:
        url = await billing.create_stripe_session(user, payload.price_id)
    except InvalidPriceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return CheckoutResponse(url=url)
