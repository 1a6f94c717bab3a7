"""Subscription price calculation"""
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from marketplace_billing.features.pricing.coupons import apply_discount
from marketplace_billing.features.pricing.domain import BillingInterval
from marketplace_billing.models.coupon import DiscountCoupon

# Period length used when a subscription is created
INTERVAL_DAYS = {
    BillingInterval.MONTHLY: 30,
    BillingInterval.YEARLY: 365,
}


def calculate_subscription_price(
    unit_price: Decimal,
    quantity: int,
    coupon: Optional[DiscountCoupon] = None,
) -> Decimal:
    """
    Calculate the total for a plan billed per startup

    Args:
        unit_price: Plan price per startup
        quantity: Startup count (non-negative integer)
        coupon: Validated coupon to fold in, if any

    Returns:
        ``unit_price * quantity`` net of the coupon discount, never negative

    Raises:
        ValueError: If quantity is not a non-negative integer
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        raise ValueError(f"quantity must be a non-negative integer, got {quantity!r}")

    if quantity == 0:
        return Decimal("0")

    total = Decimal(unit_price) * quantity
    return apply_discount(total, coupon)


def calculate_period_end(start: datetime, interval: BillingInterval | str) -> datetime:
    """End of the first billing period starting at ``start``"""
    return start + timedelta(days=INTERVAL_DAYS[BillingInterval(interval)])
