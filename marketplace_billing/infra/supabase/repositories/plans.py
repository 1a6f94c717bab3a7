"""Subscription plan repository"""
from typing import List

from supabase import Client  # type: ignore

from marketplace_billing.models.plan import SubscriptionPlan, SubscriptionPlanCreate, SubscriptionPlanUpdate

from .base import BaseRepository


class SubscriptionPlanRepository(BaseRepository[SubscriptionPlan, SubscriptionPlanCreate, SubscriptionPlanUpdate]):
    """Repository for subscription plan operations"""
    
    def __init__(self, client: Client):
        super().__init__(client, "subscription_plans", SubscriptionPlan)
    
    async def find_available(self, user_type: str, country: str) -> List[SubscriptionPlan]:
        """Active plans for a user type and country, cheapest first"""
        return await self.find_by_filters(
            {"user_type": user_type, "country": country, "is_active": True},
            order_by="price",
        )
