"""Tests for Stripe payment intent webhook handling."""

import pytest

from marketplace_billing.features.billing.webhook_service import BillingWebhookService
from marketplace_billing.features.pricing.domain import DueDiligenceStatus, SubscriptionStatus


@pytest.fixture
def webhook_service(billing_service, stripe_events):
    return BillingWebhookService(billing_service, stripe_events)


def event(event_id, event_type, intent):
    return {"id": event_id, "type": event_type, "data": {"object": intent}}


async def deliver(webhook_service, raw):
    await webhook_service.handle_webhook_event(raw["type"], raw["data"]["object"], raw["id"], raw)


class TestPaymentIntentEvents:
    async def test_succeeded_due_diligence_marks_paid(self, webhook_service, billing_service, gateway, repos):
        request = await billing_service.create_due_diligence_request("user-1", "startup-1")
        intent = await billing_service.create_due_diligence_payment(request.id, "user-1")
        gateway.succeed(intent.id)

        await deliver(webhook_service, event("evt_1", "payment_intent.succeeded",
                                             {"id": intent.id, "metadata": intent.metadata}))

        stored = repos.due_diligence_requests.items[request.id]
        assert stored.status == DueDiligenceStatus.PAID
        assert stored.payment_intent_id == intent.id

    async def test_failed_due_diligence_marks_failed(self, webhook_service, billing_service, repos):
        request = await billing_service.create_due_diligence_request("user-1", "startup-1")
        intent = await billing_service.create_due_diligence_payment(request.id, "user-1")

        await deliver(webhook_service, event("evt_2", "payment_intent.payment_failed",
                                             {"id": intent.id, "metadata": intent.metadata}))

        assert repos.due_diligence_requests.items[request.id].status == DueDiligenceStatus.FAILED

    async def test_succeeded_subscription_creates_subscription(
        self, webhook_service, billing_service, gateway, repos, plan
    ):
        intent, _ = await billing_service.create_subscription_payment("user-1", plan.id, 2)
        gateway.succeed(intent.id)

        await deliver(webhook_service, event("evt_3", "payment_intent.succeeded",
                                             {"id": intent.id, "metadata": intent.metadata}))

        (sub,) = repos.subscriptions.items.values()
        assert sub.status == SubscriptionStatus.ACTIVE
        assert sub.startup_count == 2
        assert sub.payment_intent_id == intent.id

    async def test_webhook_after_client_confirmation_does_not_duplicate(
        self, webhook_service, billing_service, gateway, repos, plan
    ):
        intent, _ = await billing_service.create_subscription_payment("user-1", plan.id, 2)
        gateway.succeed(intent.id)
        await billing_service.confirm_payment(intent.id, "user-1", plan.id, 2)

        await deliver(webhook_service, event("evt_4", "payment_intent.succeeded",
                                             {"id": intent.id, "metadata": intent.metadata}))

        assert len(repos.subscriptions.items) == 1


class TestEventBookkeeping:
    async def test_event_is_stored_and_marked_processed(self, webhook_service, stripe_events):
        await deliver(webhook_service, event("evt_10", "payment_intent.succeeded", {"id": "pi_x", "metadata": {}}))

        stored = await stripe_events.find_by_stripe_event_id("evt_10")
        assert stored.type == "payment_intent.succeeded"
        assert stored.processed_at is not None

    async def test_unknown_event_is_stored_and_ignored(self, webhook_service, stripe_events):
        await deliver(webhook_service, event("evt_11", "customer.created", {"id": "cus_1"}))

        stored = await stripe_events.find_by_stripe_event_id("evt_11")
        assert stored.processed_at is not None

    async def test_redelivery_is_skipped(self, webhook_service, billing_service, stripe_events, repos):
        request = await billing_service.create_due_diligence_request("user-1", "startup-1")
        raw = event("evt_12", "payment_intent.payment_failed",
                    {"id": "pi_1", "metadata": {"kind": "due_diligence", "request_id": request.id}})

        await deliver(webhook_service, raw)
        # Manual reset; a skipped redelivery must not mark it failed again
        repos.due_diligence_requests.items[request.id] = repos.due_diligence_requests.items[request.id].model_copy(
            update={"status": DueDiligenceStatus.PENDING}
        )
        await deliver(webhook_service, raw)

        assert repos.due_diligence_requests.items[request.id].status == DueDiligenceStatus.PENDING
        assert len(stripe_events.items) == 1

    async def test_handler_error_leaves_event_unprocessed(self, webhook_service, stripe_events):
        raw = event("evt_13", "payment_intent.succeeded",
                    {"id": "pi_1", "metadata": {"kind": "due_diligence", "request_id": "missing"}})

        with pytest.raises(Exception):
            await deliver(webhook_service, raw)

        stored = await stripe_events.find_by_stripe_event_id("evt_13")
        assert stored.processed_at is None
