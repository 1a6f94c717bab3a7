"""Discount coupon domain model"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from marketplace_billing.features.pricing.domain import CouponScope, DiscountType
from marketplace_billing.utils.datetime_helper import ensure_utc


class DiscountCouponBase(BaseModel):
    """Base discount coupon fields"""
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    max_uses: int
    used_count: int = 0
    valid_from: datetime
    valid_until: datetime
    is_active: bool = True
    applicable_to: CouponScope = CouponScope.ALL
    countries: List[str] = Field(default_factory=list)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, code: str) -> str:
        """Codes are case-insensitive and stored upper-cased"""
        return code.strip().upper()

    @field_validator("valid_from", "valid_until")
    @classmethod
    def normalize_window(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class DiscountCouponCreate(DiscountCouponBase):
    """Discount coupon creation model"""
    created_by: Optional[str] = None


class DiscountCouponUpdate(BaseModel):
    """Discount coupon update model - all fields optional"""
    is_active: Optional[bool] = None
    max_uses: Optional[int] = None
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    countries: Optional[List[str]] = None


class DiscountCoupon(DiscountCouponBase):
    """Complete discount coupon model from database"""
    id: str
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
