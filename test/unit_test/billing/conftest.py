from types import SimpleNamespace
from typing import List
from unittest.mock import AsyncMock, Mock

import pytest

from flyergen.billing import BillingService, StripeGateway, SubscriptionPlan, build_pricing_data

STRIPE_IDS = SimpleNamespace(
    starter_monthly_plan_id="price_starter_m",
    starter_yearly_plan_id="price_starter_y",
    pro_monthly_plan_id="price_pro_m",
    pro_yearly_plan_id="price_pro_y",
    business_monthly_plan_id="price_business_m",
    business_yearly_plan_id="price_business_y",
)

BILLING_URL = "https://mock.app/dashboard/billing"


@pytest.fixture
def plans() -> List[SubscriptionPlan]:
    return build_pricing_data(STRIPE_IDS)


@pytest.fixture
def gateway() -> Mock:
    gateway = Mock(spec=StripeGateway)
    gateway.retrieve_subscription = AsyncMock()
    gateway.create_checkout_session = AsyncMock(return_value={"url": "https://checkout.stripe.test/s"})
    gateway.create_billing_portal_session = AsyncMock(return_value={"url": "https://billing.stripe.test/p"})
    gateway.is_subscription_canceled = AsyncMock(return_value=False)
    return gateway


@pytest.fixture
def billing(gateway: Mock, plans: List[SubscriptionPlan]) -> BillingService:
    return BillingService(gateway, plans, billing_url=BILLING_URL)
