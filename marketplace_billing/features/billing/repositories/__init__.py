"""Billing feature repositories"""
from .stripe_events import StripeEventRepository

__all__ = [
    "StripeEventRepository",
]
