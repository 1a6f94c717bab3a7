"""Stored Stripe webhook event"""
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel


class StripeEventBase(BaseModel):
    stripe_event_id: str
    type: str
    payload: Dict[str, Any]


class StripeEventCreate(StripeEventBase):
    pass


class StripeEventUpdate(BaseModel):
    processed_at: Optional[datetime] = None


class StripeEvent(StripeEventBase):
    """Webhook event row; ``processed_at`` is set once the event has been handled"""
    id: str
    received_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None

    class Config:
        from_attributes = True
