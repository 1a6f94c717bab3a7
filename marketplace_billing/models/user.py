"""User profile domain model"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from marketplace_billing.features.pricing.domain import UserType


class UserProfileBase(BaseModel):
    """Base user profile fields"""
    name: Optional[str] = None
    email: Optional[str] = None
    role: UserType


class UserProfile(UserProfileBase):
    """User profile as stored in the ``users`` table"""
    id: str  # UUID as string
    created_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True
