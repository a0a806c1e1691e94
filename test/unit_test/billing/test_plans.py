"""Unit tests for the plan catalogue and user subscription state."""

from datetime import datetime, timedelta, timezone

import pytest

from flyergen.billing import find_plan_by_price_id, get_user_subscription_plan
from flyergen.billing.plans import is_downgrade, is_same_plan, is_upgrade, plan_level
from flyergen.billing.subscription import is_paid_subscription
from flyergen.core.database.entities.users import User

NOW = datetime(2026, 3, 1, 12, 0, 0)


def _user(**fields) -> User:
    return User(username="u", email="u@example.com", credits=5, **fields)


class TestCatalogue:
    def test_plans_in_order(self, plans):
        assert [plan.title for plan in plans] == ["Starter", "Pro", "Business"]

    @pytest.mark.parametrize(
        "price_id,title,interval,credits",
        [
            ("price_starter_m", "Starter", "month", 50),
            ("price_pro_y", "Pro", "year", 1800),
            ("price_business_m", "Business", "month", 500),
        ],
    )
    def test_find_plan(self, plans, price_id, title, interval, credits):
        plan = find_plan_by_price_id(plans, price_id)
        assert plan.title == title
        assert plan.interval_for(price_id) == interval
        assert plan.credits_for(price_id) == credits

    def test_unknown_price(self, plans):
        assert find_plan_by_price_id(plans, "price_x") is None
        assert find_plan_by_price_id(plans, None) is None
        assert plans[0].credits_for("price_pro_m") == 0

    def test_hierarchy(self):
        assert plan_level("No Plan") == 0
        assert is_upgrade("Starter", "Business") is True
        assert is_downgrade("Business", "Pro") is True
        assert is_same_plan("Pro", "Pro") is True
        assert is_upgrade("No Plan", "Starter") is True


class TestIsPaid:
    def test_requires_price(self):
        assert is_paid_subscription(None, "sub_1", NOW + timedelta(days=3), NOW) is False

    def test_live_period(self):
        assert is_paid_subscription("price_pro_m", None, NOW + timedelta(days=3), NOW) is True

    def test_grace_day_after_period_end(self):
        assert is_paid_subscription("price_pro_m", None, NOW - timedelta(hours=12), NOW) is True
        assert is_paid_subscription("price_pro_m", None, NOW - timedelta(days=2), NOW) is False

    def test_subscription_id_keeps_user_paid(self):
        assert is_paid_subscription("price_pro_m", "sub_1", NOW - timedelta(days=30), NOW) is True

    def test_aware_period_end(self):
        aware = (NOW + timedelta(days=1)).replace(tzinfo=timezone.utc)
        assert is_paid_subscription("price_pro_m", None, aware, NOW) is True


class TestUserSubscriptionPlan:
    def test_free_user(self, plans):
        state = get_user_subscription_plan(_user(), plans, NOW)
        assert state.title == "No Plan"
        assert state.is_paid is False
        assert state.interval is None
        assert state.user_credits == 5

    def test_paid_user(self, plans):
        user = _user(
            stripe_customer_id="cus_1",
            stripe_subscription_id="sub_1",
            stripe_price_id="price_business_y",
            stripe_current_period_end=NOW + timedelta(days=200),
        )
        state = get_user_subscription_plan(user, plans, NOW)
        assert state.title == "Business"
        assert state.is_paid is True
        assert state.interval == "year"
        assert state.stripe_customer_id == "cus_1"

    def test_expired_user_falls_back_to_no_plan(self, plans):
        user = _user(stripe_price_id="price_pro_m", stripe_current_period_end=NOW - timedelta(days=10))
        assert get_user_subscription_plan(user, plans, NOW).title == "No Plan"
