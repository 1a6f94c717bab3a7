"""Tests for subscription price, billing period and summary calculations."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from marketplace_billing.features.pricing.domain import BillingInterval, DiscountType
from marketplace_billing.features.pricing.subscription_pricing import (
    calculate_period_end,
    calculate_subscription_price,
)
from marketplace_billing.features.pricing.summary import summarize_subscriptions
from marketplace_billing.models.coupon import DiscountCoupon
from marketplace_billing.models.plan import SubscriptionPlan
from marketplace_billing.models.subscription import SubscriptionWithPlan

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def percentage_coupon(value: str) -> DiscountCoupon:
    return DiscountCoupon(
        id="c-1",
        code="PCT",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal(value),
        max_uses=1,
        valid_from=NOW,
        valid_until=NOW + timedelta(days=1),
    )


def plan(plan_id: str, price: str) -> SubscriptionPlan:
    return SubscriptionPlan(
        id=plan_id,
        name=f"Plan {plan_id}",
        price=Decimal(price),
        description="test plan",
        user_type="Investor",
    )


def subscription(sub_id: str, p: SubscriptionPlan, startup_count: int, days: int) -> SubscriptionWithPlan:
    return SubscriptionWithPlan(
        id=sub_id,
        user_id="user-1",
        plan_id=p.id,
        current_period_start=NOW,
        current_period_end=NOW + timedelta(days=days),
        startup_count=startup_count,
        plan=p,
    )


# ============================================================================
# Price calculation
# ============================================================================


class TestCalculateSubscriptionPrice:
    def test_unit_price_times_quantity(self):
        assert calculate_subscription_price(Decimal("15"), 3) == Decimal("45")

    def test_quantity_zero_is_free(self):
        assert calculate_subscription_price(Decimal("15"), 0) == Decimal("0")

    def test_quantity_zero_ignores_coupon(self):
        assert calculate_subscription_price(Decimal("15"), 0, percentage_coupon("20")) == Decimal("0")

    def test_with_percentage_coupon(self):
        assert calculate_subscription_price(Decimal("15"), 3, percentage_coupon("20")) == Decimal("36")

    def test_decimal_prices_stay_exact(self):
        assert calculate_subscription_price(Decimal("9.99"), 3) == Decimal("29.97")

    @pytest.mark.parametrize("quantity", [-1, 1.5, "3", True, None])
    def test_rejects_invalid_quantity(self, quantity):
        with pytest.raises(ValueError):
            calculate_subscription_price(Decimal("15"), quantity)


class TestCalculatePeriodEnd:
    def test_monthly_is_thirty_days(self):
        assert calculate_period_end(NOW, BillingInterval.MONTHLY) == NOW + timedelta(days=30)

    def test_yearly_is_365_days(self):
        assert calculate_period_end(NOW, "yearly") == NOW + timedelta(days=365)


# ============================================================================
# Summary aggregation
# ============================================================================


class TestSummarizeSubscriptions:
    def test_totals(self):
        subs = [
            subscription("s-1", plan("p-1", "15"), 3, days=10),
            subscription("s-2", plan("p-2", "40"), 3, days=5),
        ]
        summary = summarize_subscriptions(subs)

        assert summary.total_due == Decimal("165")
        assert summary.total_subscriptions == 2
        assert [s.id for s in summary.active_subscriptions] == ["s-1", "s-2"]

    def test_upcoming_payments_keep_input_order(self):
        p1, p2 = plan("p-1", "15"), plan("p-2", "40")
        summary = summarize_subscriptions([
            subscription("s-1", p1, 3, days=10),
            subscription("s-2", p2, 3, days=5),
        ])

        assert [u.plan.id for u in summary.upcoming_payments] == ["p-1", "p-2"]
        assert [u.amount for u in summary.upcoming_payments] == [Decimal("45"), Decimal("120")]
        assert summary.upcoming_payments[0].due_date == NOW + timedelta(days=10)

    def test_empty(self):
        summary = summarize_subscriptions([])
        assert summary.total_due == Decimal("0")
        assert summary.total_subscriptions == 0
        assert summary.upcoming_payments == []
