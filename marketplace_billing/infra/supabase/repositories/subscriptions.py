"""User subscription repository"""
from typing import Any, Dict, List, Optional

from supabase import Client  # type: ignore

from marketplace_billing.features.pricing.domain import SubscriptionStatus
from marketplace_billing.models.subscription import (
    SubscriptionWithPlan,
    UserSubscription,
    UserSubscriptionCreate,
    UserSubscriptionUpdate,
)

from .base import BaseRepository


class UserSubscriptionRepository(BaseRepository[UserSubscription, UserSubscriptionCreate, UserSubscriptionUpdate]):
    """Repository for user subscription operations"""
    
    def __init__(self, client: Client):
        super().__init__(client, "user_subscriptions", UserSubscription)
    
    @staticmethod
    def _to_subscription_with_plan(row: Dict[str, Any]) -> SubscriptionWithPlan:
        """Convert a row with an embedded ``subscription_plans`` object"""
        data = dict(row)
        data["plan"] = data.pop("subscription_plans")
        return SubscriptionWithPlan(**data)
    
    async def find_active_with_plans(self, user_id: str) -> List[SubscriptionWithPlan]:
        """All active subscriptions of a user, each joined with its plan"""
        response = (
            self._table()
            .select("*, subscription_plans(*)")
            .eq("user_id", user_id)
            .eq("status", SubscriptionStatus.ACTIVE.value)
            .execute()
        )
        return [
            self._to_subscription_with_plan(row)
            for row in response.data
            if row.get("subscription_plans")
        ]
    
    async def find_active_for_user(self, user_id: str) -> Optional[SubscriptionWithPlan]:
        """The user's current active subscription joined with its plan"""
        subscriptions = await self.find_active_with_plans(user_id)
        return subscriptions[0] if subscriptions else None
    
    async def count_active_for_plan(self, plan_id: str) -> int:
        """Number of active subscriptions referencing a plan"""
        return await self.count({"plan_id": plan_id, "status": SubscriptionStatus.ACTIVE.value})
    
    async def find_by_payment_intent(self, payment_intent_id: str) -> Optional[UserSubscription]:
        """Subscription created from a payment intent (confirmation is idempotent)"""
        return await self.find_one({"payment_intent_id": payment_intent_id})
