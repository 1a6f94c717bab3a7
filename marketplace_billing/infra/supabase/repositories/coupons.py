"""Discount coupon repository"""
from typing import Optional

from supabase import Client  # type: ignore

from marketplace_billing.models.coupon import DiscountCoupon, DiscountCouponCreate, DiscountCouponUpdate

from .base import BaseRepository


class DiscountCouponRepository(BaseRepository[DiscountCoupon, DiscountCouponCreate, DiscountCouponUpdate]):
    """Repository for discount coupon operations"""
    
    def __init__(self, client: Client):
        super().__init__(client, "discount_coupons", DiscountCoupon)
    
    async def find_by_code(self, code: str) -> Optional[DiscountCoupon]:
        """Find a coupon by code (codes are stored upper-cased)"""
        return await self.find_one({"code": code.strip().upper()})
    
    async def increment_used_count(self, coupon: DiscountCoupon) -> Optional[DiscountCoupon]:
        """
        Redeem one use of a coupon with a compare-and-increment
        
        The update only matches while ``used_count`` still equals the value
        that was read, so concurrent redemptions cannot push it past
        ``max_uses``.
        
        Returns:
            The updated coupon, or None if another redemption won the race
        """
        if coupon.used_count >= coupon.max_uses:
            return None
        
        response = (
            self._table()
            .update({"used_count": coupon.used_count + 1})
            .eq("id", coupon.id)
            .eq("used_count", coupon.used_count)
            .lt("used_count", coupon.max_uses)
            .execute()
        )
        
        if not response.data:
            return None
        
        return self._to_model(response.data[0])
    
    async def decrement_used_count(self, coupon: DiscountCoupon, attempts: int = 3) -> Optional[DiscountCoupon]:
        """
        Give back one redeemed use with a compare-and-decrement
        
        Concurrent redemptions may move ``used_count`` between the read and
        the write, so the current value is re-read on each attempt.
        
        Returns:
            The updated coupon, or None if the coupon is gone, already at
            zero, or every attempt lost a race
        """
        for _ in range(attempts):
            current = await self.find_by_id(coupon.id)
            if current is None or current.used_count <= 0:
                return None
            
            response = (
                self._table()
                .update({"used_count": current.used_count - 1})
                .eq("id", current.id)
                .eq("used_count", current.used_count)
                .execute()
            )
            if response.data:
                return self._to_model(response.data[0])
        
        return None
