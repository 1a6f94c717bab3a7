"""Request and response schemas for the Admin feature"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict

from marketplace_billing.features.pricing.domain import BillingInterval, CouponScope, DiscountType, FeeType
from marketplace_billing.models.coupon import DiscountCoupon
from marketplace_billing.models.due_diligence import DueDiligenceFee
from marketplace_billing.models.plan import SubscriptionPlan
from marketplace_billing.models.scouting_fee import ScoutingFeeConfig


class CreatePlanRequest(BaseModel):
    """Request model for creating a pricing plan"""
    model_config = ConfigDict(populate_by_name=True)
    
    name: str
    price: Decimal
    currency: str = "EUR"
    interval: BillingInterval = BillingInterval.MONTHLY
    description: str
    user_type: str = Field("Investor", alias="userType")
    country: str = "Global"
    is_active: bool = Field(True, alias="isActive")


class UpdatePlanRequest(BaseModel):
    """Request model for updating a pricing plan - all fields optional"""
    model_config = ConfigDict(populate_by_name=True)
    
    name: Optional[str] = None
    price: Optional[Decimal] = None
    currency: Optional[str] = None
    interval: Optional[BillingInterval] = None
    description: Optional[str] = None
    user_type: Optional[str] = Field(None, alias="userType")
    country: Optional[str] = None
    is_active: Optional[bool] = Field(None, alias="isActive")


class PlanResponse(BaseModel):
    success: bool
    message: str
    plan: SubscriptionPlan


class CreateCouponRequest(BaseModel):
    """Request model for creating a discount coupon"""
    model_config = ConfigDict(populate_by_name=True)
    
    code: str
    discount_type: DiscountType = Field(DiscountType.PERCENTAGE, alias="discountType")
    discount_value: Decimal = Field(..., alias="discountValue")
    max_uses: int = Field(..., alias="maxUses")
    valid_from: Optional[datetime] = Field(None, alias="validFrom")
    valid_until: datetime = Field(..., alias="validUntil")
    is_active: bool = Field(True, alias="isActive")
    applicable_to: CouponScope = Field(CouponScope.ALL, alias="applicableTo")
    countries: List[str] = Field(default_factory=list)


class CouponResponse(BaseModel):
    success: bool
    message: str
    coupon: DiscountCoupon


class UpsertDueDiligenceFeeRequest(BaseModel):
    """Request model for setting a country's due diligence price"""
    model_config = ConfigDict(populate_by_name=True)
    
    country: str
    base_price: Decimal = Field(..., alias="basePrice")
    currency: Optional[str] = None
    is_active: bool = Field(True, alias="isActive")


class DueDiligenceFeeResponse(BaseModel):
    success: bool
    message: str
    fee: DueDiligenceFee


class AddScoutingFeeConfigRequest(BaseModel):
    """Request model for one amount band, configured for investors and startups together"""
    model_config = ConfigDict(populate_by_name=True)
    
    country: str
    amount_min: Decimal = Field(Decimal("0"), alias="amountMin")
    amount_max: Decimal = Field(Decimal("0"), alias="amountMax")
    investor_fee_type: FeeType = Field(FeeType.PERCENTAGE, alias="investorFeeType")
    investor_fee_value: Decimal = Field(..., alias="investorFeeValue")
    startup_fee_type: FeeType = Field(FeeType.PERCENTAGE, alias="startupFeeType")
    startup_fee_value: Decimal = Field(..., alias="startupFeeValue")


class ScoutingFeeConfigPairResponse(BaseModel):
    success: bool
    message: str
    investor_config: ScoutingFeeConfig
    startup_config: ScoutingFeeConfig


class ScoutingFeeConfigResponse(BaseModel):
    success: bool
    message: str
    config: ScoutingFeeConfig
