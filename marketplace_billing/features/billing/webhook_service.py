"""Webhook service for Stripe payment intent events

Every event is stored in ``stripe_events`` before it is handled, and an event
whose ``processed_at`` is already set is skipped, so Stripe retries are safe.
"""
import logging

from marketplace_billing.features.billing.models.stripe_event import StripeEventCreate
from marketplace_billing.features.billing.repositories.stripe_events import StripeEventRepository
from marketplace_billing.features.billing.service import (
    DUE_DILIGENCE_PAYMENT,
    SUBSCRIPTION_PAYMENT,
    BillingService,
)

logger = logging.getLogger(__name__)


class BillingWebhookService:
    """Service for handling Stripe payment intent webhooks"""

    def __init__(self, billing_service: BillingService, stripe_event_repo: StripeEventRepository):
        self.billing_service = billing_service
        self.stripe_event_repo = stripe_event_repo

    async def _persist_raw_event(self, event_id: str, event_type: str, raw_event: dict) -> None:
        """
        Store the raw event unless a retry already stored it

        Raises:
            Exception: If persistence fails the webhook fails and Stripe retries.
        """
        existing_event = await self.stripe_event_repo.find_by_stripe_event_id(event_id)
        if existing_event:
            return

        try:
            await self.stripe_event_repo.create(
                StripeEventCreate(stripe_event_id=event_id, type=event_type, payload=raw_event)
            )
            logger.debug(f"BillingWebhookService: Persisted event {event_id} of type {event_type}")
        except Exception:
            logger.error("BillingWebhookService: Failed to persist Stripe event, aborting", exc_info=True)
            raise

    async def _check_idempotency(self, event_id: str) -> bool:
        """
        Returns:
            True if event was already processed, False otherwise
        """
        existing_event = await self.stripe_event_repo.find_by_stripe_event_id(event_id)
        if existing_event and existing_event.processed_at:
            logger.info(f"BillingWebhookService: Event {event_id} already processed at {existing_event.processed_at}, skipping")
            return True
        return False

    async def _mark_event_processed(self, event_id: str) -> None:
        try:
            await self.stripe_event_repo.mark_as_processed(event_id)
            logger.debug(f"BillingWebhookService: Marked event {event_id} as processed")
        except Exception:
            # The event was handled; a retry is skipped by the domain-level idempotency checks
            logger.error(f"BillingWebhookService: Failed to mark event {event_id} as processed", exc_info=True)

    async def handle_webhook_event(self, event_type: str, event_data: dict, event_id: str, raw_event: dict) -> None:
        """
        Route webhook events to appropriate handlers

        Args:
            event_type: Stripe event type (e.g., 'payment_intent.succeeded')
            event_data: Stripe event data object
            event_id: Stripe event ID for idempotency
            raw_event: Full Stripe event object for persistence
        """
        logger.debug(f"BillingWebhookService: Handling webhook event {event_type} (ID: {event_id})")

        await self._persist_raw_event(event_id, event_type, raw_event)

        if await self._check_idempotency(event_id):
            return

        try:
            if event_type == "payment_intent.succeeded":
                await self.handle_payment_intent_succeeded(event_data)

            elif event_type == "payment_intent.payment_failed":
                await self.handle_payment_intent_failed(event_data)

            else:
                logger.debug(f"BillingWebhookService: Unhandled event type {event_type} (stored but ignored)")

            await self._mark_event_processed(event_id)

        except Exception as e:
            logger.error(f"BillingWebhookService: Error handling event {event_type}: {e}", exc_info=True)
            raise

    async def handle_payment_intent_succeeded(self, intent: dict) -> None:
        """
        Handle payment_intent.succeeded

        - due diligence intents mark their request ``paid``
        - subscription intents create the subscription if the client never
          confirmed it
        """
        intent_id = intent.get("id")
        metadata = intent.get("metadata") or {}
        kind = metadata.get("kind")
        logger.info(f"BillingWebhookService: Processing payment_intent.succeeded for {intent_id} (kind={kind})")

        if kind == DUE_DILIGENCE_PAYMENT:
            request_id = metadata.get("request_id")
            if not request_id:
                logger.warning(f"BillingWebhookService: No request_id in metadata of {intent_id}")
                return
            await self.billing_service.process_due_diligence_payment(request_id, intent_id)

        elif kind == SUBSCRIPTION_PAYMENT:
            user_id = metadata.get("user_id")
            plan_id = metadata.get("plan_id")
            if not user_id or not plan_id:
                logger.warning(f"BillingWebhookService: Incomplete subscription metadata on {intent_id}")
                return
            await self.billing_service.confirm_payment(
                intent_id, user_id, plan_id, int(metadata.get("startup_count", "0"))
            )

        else:
            logger.debug(f"BillingWebhookService: Payment intent {intent_id} has no billing kind, ignoring")

    async def handle_payment_intent_failed(self, intent: dict) -> None:
        """Handle payment_intent.payment_failed"""
        intent_id = intent.get("id")
        metadata = intent.get("metadata") or {}
        logger.warning(f"BillingWebhookService: Processing payment_intent.payment_failed for {intent_id}")

        if metadata.get("kind") == DUE_DILIGENCE_PAYMENT and metadata.get("request_id"):
            await self.billing_service.fail_due_diligence_payment(metadata["request_id"])
