"""User subscription domain model"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

from marketplace_billing.features.pricing.domain import BillingInterval, SubscriptionStatus
from marketplace_billing.models.plan import SubscriptionPlan


class UserSubscriptionBase(BaseModel):
    """Base user subscription fields"""
    user_id: str
    plan_id: str
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    current_period_start: datetime
    current_period_end: datetime
    startup_count: int = Field(0, ge=0)
    amount: Decimal = Field(Decimal("0"), ge=0)
    interval: BillingInterval = BillingInterval.MONTHLY
    payment_intent_id: Optional[str] = None
    coupon_code: Optional[str] = None


class UserSubscriptionCreate(UserSubscriptionBase):
    """User subscription creation model"""
    pass


class UserSubscriptionUpdate(BaseModel):
    """User subscription update model - all fields optional"""
    status: Optional[SubscriptionStatus] = None
    startup_count: Optional[int] = Field(None, ge=0)
    amount: Optional[Decimal] = Field(None, ge=0)
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserSubscription(UserSubscriptionBase):
    """Complete user subscription model from database"""
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SubscriptionWithPlan(UserSubscription):
    """User subscription joined with its plan (``subscription_plans(*)`` embed)"""
    plan: SubscriptionPlan
