"""Due diligence repositories"""
from typing import List, Optional

from supabase import Client  # type: ignore

from marketplace_billing.models.due_diligence import (
    DueDiligenceFee,
    DueDiligenceFeeCreate,
    DueDiligenceFeeUpdate,
    DueDiligenceRequest,
    DueDiligenceRequestCreate,
    DueDiligenceRequestUpdate,
)

from .base import BaseRepository


class DueDiligenceRequestRepository(
    BaseRepository[DueDiligenceRequest, DueDiligenceRequestCreate, DueDiligenceRequestUpdate]
):
    """Repository for due diligence request operations"""
    
    def __init__(self, client: Client):
        super().__init__(client, "due_diligence_requests", DueDiligenceRequest)
    
    async def find_by_user(self, user_id: str) -> List[DueDiligenceRequest]:
        """All requests of a user, newest first"""
        return await self.find_by_filters({"user_id": user_id}, order_by="created_at", desc=True)
    
    async def find_by_payment_intent(self, payment_intent_id: str) -> Optional[DueDiligenceRequest]:
        return await self.find_one({"payment_intent_id": payment_intent_id})


class DueDiligenceFeeRepository(BaseRepository[DueDiligenceFee, DueDiligenceFeeCreate, DueDiligenceFeeUpdate]):
    """Repository for country due diligence prices"""
    
    def __init__(self, client: Client):
        super().__init__(client, "due_diligence_fees", DueDiligenceFee)
    
    async def find_by_country(self, country: str) -> Optional[DueDiligenceFee]:
        return await self.find_one({"country": country})
    
    async def find_active_for_country(self, country: str) -> Optional[DueDiligenceFee]:
        return await self.find_one({"country": country, "is_active": True})
