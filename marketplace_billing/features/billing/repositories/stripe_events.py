"""Stripe events repository"""
from typing import Optional

from supabase import Client  # type: ignore

from marketplace_billing.features.billing.models.stripe_event import StripeEvent, StripeEventCreate, StripeEventUpdate
from marketplace_billing.infra.supabase.repositories.base import BaseRepository
from marketplace_billing.utils.datetime_helper import utc_now


class StripeEventRepository(BaseRepository[StripeEvent, StripeEventCreate, StripeEventUpdate]):
    """Repository for received Stripe webhook events"""

    def __init__(self, client: Client):
        super().__init__(client, "stripe_events", StripeEvent)

    async def find_by_stripe_event_id(self, stripe_event_id: str) -> Optional[StripeEvent]:
        return await self.find_one({"stripe_event_id": stripe_event_id})

    async def mark_as_processed(self, stripe_event_id: str) -> Optional[StripeEvent]:
        """Stamp ``processed_at`` on a stored event"""
        event = await self.find_by_stripe_event_id(stripe_event_id)
        if not event:
            return None

        return await self.update(event.id, StripeEventUpdate(processed_at=utc_now()))
