"""Stripe payment-intent gateway"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Optional

import stripe
from fastapi import HTTPException

from marketplace_billing.config import STRIPE_SECRET_KEY
from marketplace_billing.features.pricing.currency import to_minor_units

logger = logging.getLogger(__name__)

# Initialize Stripe
stripe.api_key = STRIPE_SECRET_KEY


@dataclass
class PaymentIntentResult:
    """Payment intent as seen by the billing service"""
    id: str
    amount: int  # minor units
    currency: str
    status: str  # pending | succeeded | failed
    client_secret: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)


def _normalize_status(stripe_status: Optional[str]) -> str:
    """Collapse Stripe's intent lifecycle into pending/succeeded/failed"""
    if stripe_status == "succeeded":
        return "succeeded"
    if stripe_status == "canceled":
        return "failed"
    return "pending"


def _to_result(intent) -> PaymentIntentResult:
    return PaymentIntentResult(
        id=intent["id"],
        amount=intent["amount"],
        currency=intent["currency"],
        status=_normalize_status(intent.get("status")),
        client_secret=intent.get("client_secret"),
        metadata=dict(intent.get("metadata") or {}),
    )


class StripePaymentGateway:
    """Creates and retrieves Stripe PaymentIntents"""
    
    def create_payment_intent(
        self,
        amount: Decimal,
        currency: str,
        user_id: str,
        metadata: Optional[Dict[str, str]] = None
    ) -> PaymentIntentResult:
        """
        Create a PaymentIntent for a decimal amount
        
        Args:
            amount: Amount in major units (converted to minor units here)
            currency: ISO currency code
            user_id: Paying user
            metadata: Extra metadata stored on the intent
            
        Raises:
            HTTPException(502): Stripe error
        """
        intent_metadata = {"user_id": user_id}
        intent_metadata.update(metadata or {})
        
        try:
            intent = stripe.PaymentIntent.create(
                amount=to_minor_units(amount, currency),
                currency=currency.lower(),
                automatic_payment_methods={"enabled": True},
                metadata=intent_metadata,
            )
            logger.info(f"Created payment intent {intent['id']} for user {user_id} ({amount} {currency})")
            return _to_result(intent)
        
        except stripe.error.StripeError as e:
            logger.error(f"Failed to create payment intent for user {user_id}: {e}")
            raise HTTPException(
                status_code=502,
                detail="Failed to create payment intent. Please try again."
            )
    
    def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntentResult:
        """
        Retrieve a PaymentIntent by ID
        
        Raises:
            HTTPException(502): Stripe error
        """
        try:
            intent = stripe.PaymentIntent.retrieve(payment_intent_id)
            return _to_result(intent)
        except stripe.error.StripeError as e:
            logger.error(f"Failed to retrieve payment intent {payment_intent_id}: {e}")
            raise HTTPException(
                status_code=502,
                detail="Failed to verify payment. Please try again."
            )
