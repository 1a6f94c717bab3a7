"""Tests for coupon validation and discount arithmetic."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from marketplace_billing.features.pricing.coupons import (
    apply_discount,
    describe_discount,
    discount_amount,
    is_coupon_usable,
)
from marketplace_billing.features.pricing.domain import CouponScope, DiscountType
from marketplace_billing.models.coupon import DiscountCoupon

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def coupon(**overrides) -> DiscountCoupon:
    fields = dict(
        id="c-1",
        code="save20",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal("20"),
        max_uses=5,
        used_count=0,
        valid_from=NOW - timedelta(days=10),
        valid_until=NOW + timedelta(days=10),
        is_active=True,
    )
    fields.update(overrides)
    return DiscountCoupon(**fields)


# ============================================================================
# Coupon model
# ============================================================================


class TestCouponModel:
    def test_code_is_upper_cased(self):
        assert coupon(code="  save20 ").code == "SAVE20"

    def test_naive_window_is_treated_as_utc(self):
        c = coupon(valid_from=datetime(2025, 1, 1), valid_until=datetime(2025, 12, 31))
        assert c.valid_from.tzinfo is not None
        assert c.valid_from == datetime(2025, 1, 1, tzinfo=timezone.utc)


# ============================================================================
# Usability
# ============================================================================


class TestIsCouponUsable:
    def test_active_coupon_inside_window(self):
        assert is_coupon_usable(coupon(), now=NOW)

    def test_missing_coupon(self):
        assert not is_coupon_usable(None, now=NOW)

    def test_inactive_coupon(self):
        assert not is_coupon_usable(coupon(is_active=False), now=NOW)

    def test_not_yet_valid(self):
        assert not is_coupon_usable(coupon(valid_from=NOW + timedelta(seconds=1)), now=NOW)

    def test_expired(self):
        assert not is_coupon_usable(coupon(valid_until=NOW - timedelta(seconds=1)), now=NOW)

    def test_window_bounds_are_inclusive(self):
        assert is_coupon_usable(coupon(valid_from=NOW), now=NOW)
        assert is_coupon_usable(coupon(valid_until=NOW), now=NOW)

    def test_exhausted(self):
        assert not is_coupon_usable(coupon(max_uses=3, used_count=3), now=NOW)

    def test_last_use_still_available(self):
        assert is_coupon_usable(coupon(max_uses=3, used_count=2), now=NOW)

    def test_naive_now_is_treated_as_utc(self):
        assert is_coupon_usable(coupon(), now=NOW.replace(tzinfo=None))

    def test_scope_mismatch(self):
        c = coupon(applicable_to=CouponScope.DUE_DILIGENCE)
        assert not is_coupon_usable(c, now=NOW, scope=CouponScope.SUBSCRIPTION)
        assert is_coupon_usable(c, now=NOW, scope=CouponScope.DUE_DILIGENCE)

    def test_scope_all_matches_every_service(self):
        c = coupon(applicable_to=CouponScope.ALL)
        for scope in CouponScope:
            assert is_coupon_usable(c, now=NOW, scope=scope)

    def test_country_restriction(self):
        c = coupon(countries=["India", "Germany"])
        assert is_coupon_usable(c, now=NOW, country="India")
        assert not is_coupon_usable(c, now=NOW, country="France")
        assert is_coupon_usable(c, now=NOW)

    def test_no_country_restriction(self):
        assert is_coupon_usable(coupon(countries=[]), now=NOW, country="France")

    def test_check_does_not_touch_used_count(self):
        c = coupon(max_uses=1, used_count=1)
        for _ in range(3):
            assert not is_coupon_usable(c, now=NOW)
        assert c.used_count == 1


# ============================================================================
# Discount arithmetic
# ============================================================================


class TestApplyDiscount:
    def test_percentage(self):
        assert apply_discount(Decimal("45"), coupon(discount_value=Decimal("20"))) == Decimal("36")

    def test_fixed(self):
        c = coupon(discount_type=DiscountType.FIXED, discount_value=Decimal("10"))
        assert apply_discount(Decimal("45"), c) == Decimal("35")

    def test_fixed_larger_than_base_clamps_to_zero(self):
        c = coupon(discount_type=DiscountType.FIXED, discount_value=Decimal("100"))
        assert apply_discount(Decimal("45"), c) == Decimal("0")

    def test_percentage_above_hundred_clamps_to_zero(self):
        assert apply_discount(Decimal("45"), coupon(discount_value=Decimal("150"))) == Decimal("0")

    def test_full_percentage(self):
        assert apply_discount(Decimal("45"), coupon(discount_value=Decimal("100"))) == Decimal("0")

    def test_no_coupon(self):
        assert apply_discount(Decimal("45"), None) == Decimal("45")

    def test_result_is_never_above_base(self):
        for value in ("0.01", "5", "50", "99.99"):
            assert apply_discount(Decimal("45"), coupon(discount_value=Decimal(value))) <= Decimal("45")

    def test_discount_amount(self):
        assert discount_amount(Decimal("45"), coupon(discount_value=Decimal("20"))) == Decimal("9")
        assert discount_amount(Decimal("45"), None) == Decimal("0")


class TestDescribeDiscount:
    def test_percentage(self):
        assert describe_discount(coupon(discount_value=Decimal("20.00"))) == "20%"

    def test_fixed(self):
        c = coupon(discount_type=DiscountType.FIXED, discount_value=Decimal("50"))
        assert describe_discount(c) == "€50"
        assert describe_discount(c, currency_symbol="$") == "$50"
