"""Scouting fee domain models"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

from marketplace_billing.features.pricing.domain import FeeType, ScoutingFeePayer


class ScoutingFeeConfigBase(BaseModel):
    """
    Scouting fee configuration for one country, payer and amount band

    ``amount_max`` of 0 means the band has no upper limit.
    """
    country: str
    user_type: ScoutingFeePayer
    amount_min: Decimal = Field(Decimal("0"), ge=0)
    amount_max: Decimal = Field(Decimal("0"), ge=0)
    fee_type: FeeType = FeeType.PERCENTAGE
    fee_value: Decimal = Field(..., ge=0)
    is_active: bool = True


class ScoutingFeeConfigCreate(ScoutingFeeConfigBase):
    """Scouting fee configuration creation model"""
    pass


class ScoutingFeeConfigUpdate(BaseModel):
    """Scouting fee configuration update model - all fields optional"""
    fee_type: Optional[FeeType] = None
    fee_value: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None


class ScoutingFeeConfig(ScoutingFeeConfigBase):
    """Complete scouting fee configuration model from database"""
    id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ScoutingFeeRecordBase(BaseModel):
    """Scouting fee charged on an advisor-brokered deal"""
    advisor_id: str
    investor_id: str
    startup_id: str
    advisory_fee: Decimal = Field(..., ge=0)
    amount: Decimal = Field(..., ge=0)


class ScoutingFeeRecordCreate(ScoutingFeeRecordBase):
    pass


class ScoutingFeeRecordUpdate(BaseModel):
    amount: Optional[Decimal] = Field(None, ge=0)


class ScoutingFeeRecord(ScoutingFeeRecordBase):
    id: str
    created_at: datetime

    class Config:
        from_attributes = True
