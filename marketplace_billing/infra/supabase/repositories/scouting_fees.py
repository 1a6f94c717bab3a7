"""Scouting fee repositories"""
from typing import List, Optional

from supabase import Client  # type: ignore

from marketplace_billing.features.pricing.domain import ScoutingFeePayer
from marketplace_billing.models.scouting_fee import (
    ScoutingFeeConfig,
    ScoutingFeeConfigCreate,
    ScoutingFeeConfigUpdate,
    ScoutingFeeRecord,
    ScoutingFeeRecordCreate,
    ScoutingFeeRecordUpdate,
)

from .base import BaseRepository


class ScoutingFeeConfigRepository(BaseRepository[ScoutingFeeConfig, ScoutingFeeConfigCreate, ScoutingFeeConfigUpdate]):
    """Repository for scouting fee configuration"""
    
    def __init__(self, client: Client):
        super().__init__(client, "scouting_fee_configs", ScoutingFeeConfig)
    
    async def find_for_country(
        self,
        country: str,
        payer: Optional[ScoutingFeePayer] = None,
        active_only: bool = False
    ) -> List[ScoutingFeeConfig]:
        """Configs for a country, ordered by band start"""
        filters = {"country": country}
        if payer is not None:
            filters["user_type"] = payer.value
        if active_only:
            filters["is_active"] = True
        return await self.find_by_filters(filters, order_by="amount_min")


class ScoutingFeeRecordRepository(BaseRepository[ScoutingFeeRecord, ScoutingFeeRecordCreate, ScoutingFeeRecordUpdate]):
    """Repository for recorded scouting fee payments"""
    
    def __init__(self, client: Client):
        super().__init__(client, "scouting_fees", ScoutingFeeRecord)
    
    async def find_by_advisor(self, advisor_id: str) -> List[ScoutingFeeRecord]:
        return await self.find_by_filters({"advisor_id": advisor_id}, order_by="created_at", desc=True)
