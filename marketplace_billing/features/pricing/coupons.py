"""Coupon validation and discount arithmetic"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from marketplace_billing.features.pricing.domain import CouponScope, DiscountType
from marketplace_billing.models.coupon import DiscountCoupon
from marketplace_billing.utils.datetime_helper import ensure_utc, utc_now

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def is_coupon_usable(
    coupon: Optional[DiscountCoupon],
    now: Optional[datetime] = None,
    scope: Optional[CouponScope] = None,
    country: Optional[str] = None,
) -> bool:
    """
    Check whether a coupon can be redeemed right now

    A coupon is usable only while it is active, ``now`` lies inside
    ``[valid_from, valid_until]`` and ``used_count < max_uses``. Scope and
    country are checked only when given.

    Args:
        coupon: Coupon record (None is never usable)
        now: Evaluation time, defaults to the current UTC time
        scope: Service the coupon is being redeemed against
        country: Country of the purchase

    Returns:
        True if the coupon may be redeemed
    """
    if coupon is None or not coupon.is_active:
        return False

    now = ensure_utc(now) if now is not None else utc_now()
    if now < ensure_utc(coupon.valid_from) or now > ensure_utc(coupon.valid_until):
        return False

    if coupon.used_count >= coupon.max_uses:
        return False

    if scope is not None and coupon.applicable_to not in (CouponScope.ALL, scope):
        return False

    if country and coupon.countries and country not in coupon.countries:
        return False

    return True


def apply_discount(base_amount: Decimal, coupon: Optional[DiscountCoupon]) -> Decimal:
    """
    Apply a validated coupon to a base amount

    percentage: ``base * (1 - value / 100)``
    fixed: ``base - value``

    The result is clamped to zero for both types, so neither a fixed value
    larger than the base nor a percentage above 100 can produce a negative total.
    """
    base_amount = Decimal(base_amount)
    if coupon is None:
        return base_amount

    if coupon.discount_type == DiscountType.PERCENTAGE:
        result = base_amount * (1 - Decimal(coupon.discount_value) / HUNDRED)
    else:
        result = base_amount - Decimal(coupon.discount_value)

    return max(ZERO, result)


def discount_amount(base_amount: Decimal, coupon: Optional[DiscountCoupon]) -> Decimal:
    """Amount taken off ``base_amount`` by ``coupon``"""
    base_amount = Decimal(base_amount)
    return base_amount - apply_discount(base_amount, coupon)


def describe_discount(coupon: DiscountCoupon, currency_symbol: str = "€") -> str:
    """Human readable discount, e.g. ``20%`` or ``€50``"""
    value = Decimal(coupon.discount_value).normalize()
    if coupon.discount_type == DiscountType.PERCENTAGE:
        return f"{value:f}%"
    return f"{currency_symbol}{value:f}"
