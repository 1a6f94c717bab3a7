"""Repository factory and exports"""
from supabase import Client
from .coupons import DiscountCouponRepository
from .countries import CountryRepository
from .due_diligence import DueDiligenceFeeRepository, DueDiligenceRequestRepository
from .plans import SubscriptionPlanRepository
from .scouting_fees import ScoutingFeeConfigRepository, ScoutingFeeRecordRepository
from .subscriptions import UserSubscriptionRepository
from .users import UserRepository


class RepositoryFactory:
    """Factory for creating repository instances"""
    
    def __init__(self, client: Client):
        self._client = client
        self._plans: SubscriptionPlanRepository = None
        self._subscriptions: UserSubscriptionRepository = None
        self._coupons: DiscountCouponRepository = None
        self._due_diligence_requests: DueDiligenceRequestRepository = None
        self._due_diligence_fees: DueDiligenceFeeRepository = None
        self._scouting_fee_configs: ScoutingFeeConfigRepository = None
        self._scouting_fees: ScoutingFeeRecordRepository = None
        self._countries: CountryRepository = None
        self._users: UserRepository = None
    
    @property
    def plans(self) -> SubscriptionPlanRepository:
        """Get subscription plan repository"""
        if self._plans is None:
            self._plans = SubscriptionPlanRepository(self._client)
        return self._plans
    
    @property
    def subscriptions(self) -> UserSubscriptionRepository:
        """Get user subscription repository"""
        if self._subscriptions is None:
            self._subscriptions = UserSubscriptionRepository(self._client)
        return self._subscriptions
    
    @property
    def coupons(self) -> DiscountCouponRepository:
        """Get discount coupon repository"""
        if self._coupons is None:
            self._coupons = DiscountCouponRepository(self._client)
        return self._coupons
    
    @property
    def due_diligence_requests(self) -> DueDiligenceRequestRepository:
        """Get due diligence request repository"""
        if self._due_diligence_requests is None:
            self._due_diligence_requests = DueDiligenceRequestRepository(self._client)
        return self._due_diligence_requests
    
    @property
    def due_diligence_fees(self) -> DueDiligenceFeeRepository:
        """Get due diligence fee repository"""
        if self._due_diligence_fees is None:
            self._due_diligence_fees = DueDiligenceFeeRepository(self._client)
        return self._due_diligence_fees
    
    @property
    def scouting_fee_configs(self) -> ScoutingFeeConfigRepository:
        """Get scouting fee config repository"""
        if self._scouting_fee_configs is None:
            self._scouting_fee_configs = ScoutingFeeConfigRepository(self._client)
        return self._scouting_fee_configs
    
    @property
    def scouting_fees(self) -> ScoutingFeeRecordRepository:
        """Get scouting fee record repository"""
        if self._scouting_fees is None:
            self._scouting_fees = ScoutingFeeRecordRepository(self._client)
        return self._scouting_fees
    
    @property
    def countries(self) -> CountryRepository:
        """Get country repository"""
        if self._countries is None:
            self._countries = CountryRepository(self._client)
        return self._countries
    
    @property
    def users(self) -> UserRepository:
        """Get user profile repository"""
        if self._users is None:
            self._users = UserRepository(self._client)
        return self._users


__all__ = [
    'RepositoryFactory',
    'SubscriptionPlanRepository',
    'UserSubscriptionRepository',
    'DiscountCouponRepository',
    'DueDiligenceRequestRepository',
    'DueDiligenceFeeRepository',
    'ScoutingFeeConfigRepository',
    'ScoutingFeeRecordRepository',
    'CountryRepository',
    'UserRepository',
]
