"""User profile repository (read-only)"""
from typing import Optional

from pydantic import BaseModel
from supabase import Client  # type: ignore

from marketplace_billing.models.user import UserProfile

from .base import BaseRepository


class UserRepository(BaseRepository[UserProfile, BaseModel, BaseModel]):
    """Repository for user profiles; profiles are owned by the registration flow"""
    
    def __init__(self, client: Client):
        super().__init__(client, "users", UserProfile)
    
    async def get_role(self, user_id: str) -> Optional[str]:
        """Role of a user, or None if the profile does not exist"""
        response = self._table().select("role").eq("id", user_id).limit(1).execute()
        
        if not response.data:
            return None
        
        return response.data[0].get("role")
