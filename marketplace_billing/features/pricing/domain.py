"""Domain enums shared by the pricing engine and the billing features"""

from enum import Enum


class DiscountType(str, Enum):
    """Coupon discount type"""
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class FeeType(str, Enum):
    """Scouting fee type"""
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class UserType(str, Enum):
    """Marketplace user categories"""
    INVESTOR = "Investor"
    STARTUP = "Startup"
    FACILITATION_CENTER = "Startup Facilitation Center"
    INVESTMENT_ADVISOR = "Investment Advisor"
    CA = "CA"
    CS = "CS"
    ADMIN = "Admin"


class ScoutingFeePayer(str, Enum):
    """
    Side of a deal that pays a scouting fee

    INVESTOR pays the startup scouting fee, STARTUP pays the investor scouting fee.
    """
    INVESTOR = "Investor"
    STARTUP = "Startup"


class BillingInterval(str, Enum):
    """Subscription billing interval"""
    MONTHLY = "monthly"
    YEARLY = "yearly"


class SubscriptionStatus(str, Enum):
    """User subscription status"""
    ACTIVE = "active"
    INACTIVE = "inactive"
    CANCELLED = "cancelled"
    PAST_DUE = "past_due"


class DueDiligenceStatus(str, Enum):
    """Due diligence request status"""
    PENDING = "pending"
    PAID = "paid"
    COMPLETED = "completed"
    FAILED = "failed"


class CouponScope(str, Enum):
    """Which service a coupon can be redeemed against"""
    ALL = "all"
    SUBSCRIPTION = "subscription"
    DUE_DILIGENCE = "due_diligence"
    SCOUTING_FEE = "scouting_fee"
