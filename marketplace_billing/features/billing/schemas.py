"""Request and response schemas for Billing feature"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict

from marketplace_billing.features.pricing.domain import CouponScope, FeeType, ScoutingFeePayer
from marketplace_billing.models.coupon import DiscountCoupon
from marketplace_billing.models.due_diligence import DueDiligenceRequest
from marketplace_billing.models.plan import SubscriptionPlan
from marketplace_billing.models.subscription import SubscriptionWithPlan, UserSubscription


class ActionResponse(BaseModel):
    """Generic success response"""
    success: bool = True
    message: str


class ValidateCouponRequest(BaseModel):
    """Request model for coupon validation and redemption"""
    model_config = ConfigDict(populate_by_name=True)
    
    code: str = Field(..., min_length=1)
    scope: Optional[CouponScope] = None
    country: Optional[str] = None


class ValidateCouponResponse(BaseModel):
    """Response model for coupon validation"""
    valid: bool
    message: str
    coupon: Optional[DiscountCoupon] = None


class SubscriptionQuoteRequest(BaseModel):
    """Request model for a subscription price preview or payment"""
    model_config = ConfigDict(populate_by_name=True)
    
    plan_id: str = Field(..., alias="planId")
    startup_count: int = Field(..., alias="startupCount", ge=0)
    coupon_code: Optional[str] = Field(None, alias="couponCode")


class SubscriptionQuote(BaseModel):
    """Subscription price breakdown"""
    plan_id: str
    currency: str
    unit_price: Decimal
    startup_count: int
    subtotal: Decimal
    discount: Decimal
    total: Decimal
    coupon_code: Optional[str] = None


class PaymentIntentResponse(BaseModel):
    """Response model for payment intent creation"""
    payment_intent_id: str
    client_secret: Optional[str] = None
    amount: Decimal
    amount_minor: int
    currency: str
    status: str


class SubscriptionPaymentResponse(PaymentIntentResponse):
    """Payment intent plus the price it was created for"""
    quote: SubscriptionQuote


class ConfirmPaymentRequest(BaseModel):
    """Request model for payment confirmation"""
    model_config = ConfigDict(populate_by_name=True)
    
    payment_intent_id: str = Field(..., alias="paymentIntentId")
    plan_id: str = Field(..., alias="planId")
    startup_count: int = Field(..., alias="startupCount", ge=0)


class SubscriptionResponse(BaseModel):
    """Response model for subscription changes"""
    success: bool
    message: str
    subscription: UserSubscription


class UpdateStartupCountRequest(BaseModel):
    """Request model for a startup count change"""
    model_config = ConfigDict(populate_by_name=True)
    
    startup_count: int = Field(..., alias="startupCount", ge=0)


class UpcomingPaymentOut(BaseModel):
    plan: SubscriptionPlan
    amount: Decimal
    due_date: datetime


class SubscriptionSummaryResponse(BaseModel):
    """Totals over the user's active subscriptions"""
    total_due: Decimal
    total_subscriptions: int
    active_subscriptions: List[SubscriptionWithPlan]
    upcoming_payments: List[UpcomingPaymentOut]


class CreateDueDiligenceRequest(BaseModel):
    """Request model for a due diligence request"""
    model_config = ConfigDict(populate_by_name=True)
    
    startup_id: str = Field(..., alias="startupId")
    country: Optional[str] = None


class DueDiligencePaymentRequest(BaseModel):
    """Request model for paying a due diligence request"""
    model_config = ConfigDict(populate_by_name=True)
    
    coupon_code: Optional[str] = Field(None, alias="couponCode")


class ProcessDueDiligencePaymentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    
    payment_intent_id: str = Field(..., alias="paymentIntentId")


class DueDiligenceResponse(BaseModel):
    success: bool
    message: str
    request: DueDiligenceRequest


class ScoutingFeeQuoteRequest(BaseModel):
    """Request model for the banded scouting fee"""
    amount: Decimal = Field(..., ge=0)
    payer: ScoutingFeePayer
    country: str


class ScoutingFeeQuoteResponse(BaseModel):
    amount: Decimal
    payer: ScoutingFeePayer
    country: str
    fee_type: FeeType
    fee_value: Decimal
    fee: Decimal
    source: str
    config_id: Optional[str] = None


class NetworkScoutingFeeRequest(BaseModel):
    """Request model for the network-membership scouting fee"""
    model_config = ConfigDict(populate_by_name=True)
    
    advisory_fee: Decimal = Field(..., alias="advisoryFee", ge=0)
    investor_in_network: bool = Field(..., alias="investorInNetwork")
    startup_in_network: bool = Field(..., alias="startupInNetwork")


class NetworkScoutingFeeResponse(BaseModel):
    advisory_fee: Decimal
    fee: Decimal


class RecordScoutingFeeRequest(NetworkScoutingFeeRequest):
    """Request model for recording an advisor scouting fee"""
    investor_id: str = Field(..., alias="investorId")
    startup_id: str = Field(..., alias="startupId")
