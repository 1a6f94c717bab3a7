"""Subscription plan domain model"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

from marketplace_billing.features.pricing.domain import BillingInterval


class SubscriptionPlanBase(BaseModel):
    """Base subscription plan fields"""
    name: str
    price: Decimal = Field(..., ge=0)
    currency: str = "EUR"
    interval: BillingInterval = BillingInterval.MONTHLY
    description: str
    user_type: str
    country: str = "Global"
    is_active: bool = True


class SubscriptionPlanCreate(SubscriptionPlanBase):
    """Subscription plan creation model"""
    pass


class SubscriptionPlanUpdate(BaseModel):
    """Subscription plan update model - all fields optional"""
    name: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = None
    interval: Optional[BillingInterval] = None
    description: Optional[str] = None
    user_type: Optional[str] = None
    country: Optional[str] = None
    is_active: Optional[bool] = None


class SubscriptionPlan(SubscriptionPlanBase):
    """Complete subscription plan model from database"""
    id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
