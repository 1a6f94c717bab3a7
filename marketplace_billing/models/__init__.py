"""Domain models for the application"""
from .plan import SubscriptionPlan, SubscriptionPlanCreate, SubscriptionPlanUpdate
from .subscription import (
    UserSubscription,
    UserSubscriptionCreate,
    UserSubscriptionUpdate,
    SubscriptionWithPlan,
)
from .coupon import DiscountCoupon, DiscountCouponCreate, DiscountCouponUpdate
from .due_diligence import (
    DueDiligenceRequest,
    DueDiligenceRequestCreate,
    DueDiligenceRequestUpdate,
    DueDiligenceFee,
    DueDiligenceFeeCreate,
    DueDiligenceFeeUpdate,
)
from .scouting_fee import (
    ScoutingFeeConfig,
    ScoutingFeeConfigCreate,
    ScoutingFeeConfigUpdate,
    ScoutingFeeRecord,
    ScoutingFeeRecordCreate,
    ScoutingFeeRecordUpdate,
)

__all__ = [
    'SubscriptionPlan', 'SubscriptionPlanCreate', 'SubscriptionPlanUpdate',
    'UserSubscription', 'UserSubscriptionCreate', 'UserSubscriptionUpdate', 'SubscriptionWithPlan',
    'DiscountCoupon', 'DiscountCouponCreate', 'DiscountCouponUpdate',
    'DueDiligenceRequest', 'DueDiligenceRequestCreate', 'DueDiligenceRequestUpdate',
    'DueDiligenceFee', 'DueDiligenceFeeCreate', 'DueDiligenceFeeUpdate',
    'ScoutingFeeConfig', 'ScoutingFeeConfigCreate', 'ScoutingFeeConfigUpdate',
    'ScoutingFeeRecord', 'ScoutingFeeRecordCreate', 'ScoutingFeeRecordUpdate',
]
