"""Due diligence domain models"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

from marketplace_billing.features.pricing.domain import DueDiligenceStatus


class DueDiligenceRequestBase(BaseModel):
    """Base due diligence request fields"""
    user_id: str
    startup_id: str
    amount: Decimal = Field(..., ge=0)
    currency: str = "EUR"
    country: Optional[str] = None
    status: DueDiligenceStatus = DueDiligenceStatus.PENDING
    payment_intent_id: Optional[str] = None


class DueDiligenceRequestCreate(DueDiligenceRequestBase):
    """Due diligence request creation model"""
    pass


class DueDiligenceRequestUpdate(BaseModel):
    """Due diligence request update model - all fields optional"""
    status: Optional[DueDiligenceStatus] = None
    payment_intent_id: Optional[str] = None
    completed_at: Optional[datetime] = None


class DueDiligenceRequest(DueDiligenceRequestBase):
    """Complete due diligence request model from database"""
    id: str
    created_at: datetime
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DueDiligenceFeeBase(BaseModel):
    """Country-specific due diligence base price"""
    country: str
    base_price: Decimal = Field(..., ge=0)
    currency: str = "EUR"
    is_active: bool = True


class DueDiligenceFeeCreate(DueDiligenceFeeBase):
    pass


class DueDiligenceFeeUpdate(BaseModel):
    base_price: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = None
    is_active: Optional[bool] = None


class DueDiligenceFee(DueDiligenceFeeBase):
    id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
