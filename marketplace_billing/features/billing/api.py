"""Billing API endpoints for subscriptions, coupons, due diligence, scouting fees and Stripe webhooks"""
import logging
import json
from typing import List, Optional

from fastapi import APIRouter, Depends, Request, HTTPException, Header
from fastapi.responses import Response
import stripe

from marketplace_billing.config import STRIPE_SECRET_KEY, STRIPE_WEBHOOK_SECRET
from marketplace_billing.auth import get_current_user_id, require_admin
from marketplace_billing.api.dependencies import (
    get_payment_gateway,
    get_repositories,
    get_stripe_event_repository,
)
from marketplace_billing.features.billing.payments import PaymentIntentResult, StripePaymentGateway
from marketplace_billing.features.billing.repositories.stripe_events import StripeEventRepository
from marketplace_billing.features.billing.service import (
    INVALID_COUPON_MESSAGE,
    BillingService,
    coupon_applied_message,
    intent_amount,
)
from marketplace_billing.features.billing.webhook_service import BillingWebhookService
from marketplace_billing.features.billing.schemas import (
    ConfirmPaymentRequest,
    CreateDueDiligenceRequest,
    DueDiligencePaymentRequest,
    DueDiligenceResponse,
    NetworkScoutingFeeRequest,
    NetworkScoutingFeeResponse,
    PaymentIntentResponse,
    ProcessDueDiligencePaymentRequest,
    RecordScoutingFeeRequest,
    ScoutingFeeQuoteRequest,
    ScoutingFeeQuoteResponse,
    SubscriptionPaymentResponse,
    SubscriptionQuote,
    SubscriptionQuoteRequest,
    SubscriptionResponse,
    SubscriptionSummaryResponse,
    UpcomingPaymentOut,
    UpdateStartupCountRequest,
    ValidateCouponRequest,
    ValidateCouponResponse,
)
from marketplace_billing.infra.supabase.repositories import RepositoryFactory
from marketplace_billing.models.due_diligence import DueDiligenceRequest
from marketplace_billing.models.plan import SubscriptionPlan
from marketplace_billing.models.scouting_fee import ScoutingFeeRecord
from marketplace_billing.models.subscription import SubscriptionWithPlan

logger = logging.getLogger(__name__)

# Initialize Stripe
stripe.api_key = STRIPE_SECRET_KEY

# Create routers
billing_router = APIRouter(prefix="/api/billing", tags=["billing"])
stripe_router = APIRouter(prefix="/api/stripe", tags=["stripe"])


def get_billing_service(
    repos: RepositoryFactory = Depends(get_repositories),
    payments: StripePaymentGateway = Depends(get_payment_gateway)
) -> BillingService:
    return BillingService(repos, payments)


def _intent_response(intent: PaymentIntentResult) -> PaymentIntentResponse:
    return PaymentIntentResponse(
        payment_intent_id=intent.id,
        client_secret=intent.client_secret,
        amount=intent_amount(intent),
        amount_minor=intent.amount,
        currency=intent.currency.upper(),
        status=intent.status,
    )


# ============================================================================
# STRIPE WEBHOOK ENDPOINT
# ============================================================================

async def verify_webhook_signature(payload: bytes, signature: str) -> dict:
    """Verify Stripe webhook signature"""
    try:
        event = stripe.Webhook.construct_event(
            payload, signature, STRIPE_WEBHOOK_SECRET
        )
        logger.info(f"Stripe webhook signature verified for event {event.get('id')}")
        return event
    except ValueError as e:
        logger.error(f"Invalid payload: {e}")
        raise HTTPException(status_code=400, detail="Invalid payload")
    except stripe.error.SignatureVerificationError as e:
        logger.error(f"Invalid signature: {e}")
        raise HTTPException(status_code=400, detail="Invalid signature")


@stripe_router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(..., alias="stripe-signature"),
    billing_service: BillingService = Depends(get_billing_service),
    stripe_event_repo: StripeEventRepository = Depends(get_stripe_event_repository)
):
    """
    Stripe webhook endpoint for payment intent events

    Handles:
    - payment_intent.succeeded: subscription created / due diligence paid
    - payment_intent.payment_failed: due diligence request failed
    """
    payload = await request.body()
    logger.info(f"Received Stripe webhook request (payload size: {len(payload)} bytes)")

    event = await verify_webhook_signature(payload, stripe_signature)

    event_type = event["type"]
    event_data = event["data"]["object"]
    event_id = event.get("id", "unknown")

    logger.info(f"Processing Stripe webhook event: {event_type} (ID: {event_id})")
    logger.debug(f"Full event data: {json.dumps(event, indent=2, default=str)}")

    webhook_service = BillingWebhookService(billing_service, stripe_event_repo)

    try:
        await webhook_service.handle_webhook_event(event_type, event_data, event_id, event)
        logger.info(f"Successfully processed webhook event {event_type} (ID: {event_id})")
        return Response(status_code=200)

    except Exception as e:
        # Non-2xx makes Stripe retry the event
        logger.error(
            f"Error processing webhook {event_type} (ID: {event_id}): {e}",
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Failed to process webhook event")


# ============================================================================
# PLANS & SUBSCRIPTION
# ============================================================================

@billing_router.get("/plans", response_model=List[SubscriptionPlan])
async def get_subscription_plans(
    user_type: str,
    country: str,
    user_id: str = Depends(get_current_user_id),
    billing_service: BillingService = Depends(get_billing_service)
):
    """Active subscription plans for a user type and country, cheapest first"""
    try:
        return await billing_service.get_subscription_plans(user_type, country)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching subscription plans for {user_type}/{country}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch subscription plans")


@billing_router.get("/subscription", response_model=Optional[SubscriptionWithPlan])
async def get_user_subscription(
    user_id: str = Depends(get_current_user_id),
    billing_service: BillingService = Depends(get_billing_service)
):
    """The caller's active subscription, or null"""
    try:
        return await billing_service.get_user_subscription(user_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching subscription for user {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch subscription")


@billing_router.get("/summary", response_model=SubscriptionSummaryResponse)
async def get_subscription_summary(
    user_id: str = Depends(get_current_user_id),
    billing_service: BillingService = Depends(get_billing_service)
):
    """Total due and upcoming payments over the caller's active subscriptions"""
    try:
        summary = await billing_service.get_subscription_summary(user_id)
        return SubscriptionSummaryResponse(
            total_due=summary.total_due,
            total_subscriptions=summary.total_subscriptions,
            active_subscriptions=summary.active_subscriptions,
            upcoming_payments=[
                UpcomingPaymentOut(plan=p.plan, amount=p.amount, due_date=p.due_date)
                for p in summary.upcoming_payments
            ],
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error building subscription summary for user {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch subscription summary")


@billing_router.put("/subscription/startup-count", response_model=SubscriptionResponse)
async def update_startup_count(
    req: UpdateStartupCountRequest,
    user_id: str = Depends(get_current_user_id),
    billing_service: BillingService = Depends(get_billing_service)
):
    """Change the number of startups billed on the caller's subscription"""
    try:
        subscription = await billing_service.update_startup_count(user_id, req.startup_count)
        return SubscriptionResponse(
            success=True,
            message=f"Startup count updated to {req.startup_count}",
            subscription=subscription
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating startup count for user {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update startup count")


@billing_router.post("/subscription/cancel", response_model=SubscriptionResponse)
async def cancel_subscription(
    user_id: str = Depends(get_current_user_id),
    billing_service: BillingService = Depends(get_billing_service)
):
    try:
        subscription = await billing_service.cancel_subscription(user_id)
        return SubscriptionResponse(
            success=True,
            message="Subscription cancelled",
            subscription=subscription
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error cancelling subscription for user {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to cancel subscription")


# ============================================================================
# COUPONS & CHECKOUT
# ============================================================================

@billing_router.post("/coupons/validate", response_model=ValidateCouponResponse)
async def validate_coupon(
    req: ValidateCouponRequest,
    user_id: str = Depends(get_current_user_id),
    billing_service: BillingService = Depends(get_billing_service)
):
    """Check a coupon without redeeming it; a use is redeemed only when a payment intent is created"""
    try:
        coupon = await billing_service.validate_coupon(req.code, scope=req.scope, country=req.country)
        if coupon is None:
            return ValidateCouponResponse(valid=False, message=INVALID_COUPON_MESSAGE)

        return ValidateCouponResponse(valid=True, message=coupon_applied_message(coupon), coupon=coupon)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error validating coupon {req.code}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to validate coupon")


@billing_router.post("/quote", response_model=SubscriptionQuote)
async def quote_subscription(
    req: SubscriptionQuoteRequest,
    user_id: str = Depends(get_current_user_id),
    billing_service: BillingService = Depends(get_billing_service)
):
    """Price preview; the coupon is checked but not redeemed"""
    try:
        return await billing_service.quote_subscription(req.plan_id, req.startup_count, req.coupon_code)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error quoting plan {req.plan_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to calculate price")


@billing_router.post("/payment-intent", response_model=SubscriptionPaymentResponse)
async def create_subscription_payment(
    req: SubscriptionQuoteRequest,
    user_id: str = Depends(get_current_user_id),
    billing_service: BillingService = Depends(get_billing_service)
):
    """
    Create a Stripe PaymentIntent for a subscription

    The client completes the payment with the returned client secret and then
    calls ``/confirm-payment``.
    """
    logger.info(f"Creating subscription payment for user {user_id}, plan {req.plan_id}")

    try:
        intent, quote = await billing_service.create_subscription_payment(
            user_id, req.plan_id, req.startup_count, req.coupon_code
        )
        return SubscriptionPaymentResponse(**_intent_response(intent).model_dump(), quote=quote)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating subscription payment for user {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to process subscription. Please try again.")


@billing_router.post("/confirm-payment", response_model=SubscriptionResponse)
async def confirm_payment(
    req: ConfirmPaymentRequest,
    user_id: str = Depends(get_current_user_id),
    billing_service: BillingService = Depends(get_billing_service)
):
    """Create the subscription once Stripe reports the payment succeeded"""
    try:
        subscription = await billing_service.confirm_payment(
            req.payment_intent_id, user_id, req.plan_id, req.startup_count
        )
        return SubscriptionResponse(
            success=True,
            message="Subscription activated",
            subscription=subscription
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error confirming payment {req.payment_intent_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to process subscription. Please try again.")


# ============================================================================
# DUE DILIGENCE
# ============================================================================

@billing_router.post("/due-diligence", response_model=DueDiligenceResponse)
async def create_due_diligence_request(
    req: CreateDueDiligenceRequest,
    user_id: str = Depends(get_current_user_id),
    billing_service: BillingService = Depends(get_billing_service)
):
    try:
        request = await billing_service.create_due_diligence_request(user_id, req.startup_id, req.country)
        return DueDiligenceResponse(
            success=True,
            message="Due diligence request created",
            request=request
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating due diligence request for user {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create due diligence request")


@billing_router.get("/due-diligence", response_model=List[DueDiligenceRequest])
async def get_user_due_diligence_requests(
    user_id: str = Depends(get_current_user_id),
    billing_service: BillingService = Depends(get_billing_service)
):
    try:
        return await billing_service.get_user_due_diligence_requests(user_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching due diligence requests for user {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch due diligence requests")


@billing_router.post("/due-diligence/{request_id}/payment-intent", response_model=PaymentIntentResponse)
async def create_due_diligence_payment(
    request_id: str,
    req: DueDiligencePaymentRequest,
    user_id: str = Depends(get_current_user_id),
    billing_service: BillingService = Depends(get_billing_service)
):
    try:
        intent = await billing_service.create_due_diligence_payment(request_id, user_id, req.coupon_code)
        return _intent_response(intent)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating due diligence payment for request {request_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create payment. Please try again.")


@billing_router.post("/due-diligence/{request_id}/process-payment", response_model=DueDiligenceResponse)
async def process_due_diligence_payment(
    request_id: str,
    req: ProcessDueDiligencePaymentRequest,
    user_id: str = Depends(get_current_user_id),
    billing_service: BillingService = Depends(get_billing_service)
):
    """Mark a due diligence request paid after the client completed the payment"""
    try:
        request = await billing_service.confirm_due_diligence_payment(request_id, user_id, req.payment_intent_id)
        return DueDiligenceResponse(
            success=True,
            message="Due diligence payment processed",
            request=request
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error processing due diligence payment for request {request_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to process payment. Please try again.")


@billing_router.post("/due-diligence/{request_id}/complete", response_model=DueDiligenceResponse)
async def complete_due_diligence_request(
    request_id: str,
    admin_id: str = Depends(require_admin),
    billing_service: BillingService = Depends(get_billing_service)
):
    """Mark a paid due diligence request as completed (Admin only)"""
    try:
        request = await billing_service.complete_due_diligence_request(request_id)
        return DueDiligenceResponse(
            success=True,
            message="Due diligence request completed",
            request=request
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error completing due diligence request {request_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to complete due diligence request")


# ============================================================================
# SCOUTING FEES
# ============================================================================

@billing_router.post("/scouting-fees/quote", response_model=ScoutingFeeQuoteResponse)
async def quote_scouting_fee(
    req: ScoutingFeeQuoteRequest,
    user_id: str = Depends(get_current_user_id),
    billing_service: BillingService = Depends(get_billing_service)
):
    try:
        quote = await billing_service.quote_scouting_fee(req.amount, req.payer, req.country)
        return ScoutingFeeQuoteResponse(
            amount=quote.amount,
            payer=quote.payer,
            country=quote.country,
            fee_type=quote.fee_type,
            fee_value=quote.fee_value,
            fee=quote.fee,
            source=quote.source,
            config_id=quote.config_id,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error quoting scouting fee for {req.country}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to calculate scouting fee")


@billing_router.post("/scouting-fees/network", response_model=NetworkScoutingFeeResponse)
async def calculate_network_scouting_fee(
    req: NetworkScoutingFeeRequest,
    user_id: str = Depends(get_current_user_id),
    billing_service: BillingService = Depends(get_billing_service)
):
    try:
        fee = billing_service.calculate_network_scouting_fee(
            req.advisory_fee, req.investor_in_network, req.startup_in_network
        )
        return NetworkScoutingFeeResponse(advisory_fee=req.advisory_fee, fee=fee)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error calculating network scouting fee for user {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to calculate scouting fee")


@billing_router.post("/scouting-fees/record", response_model=ScoutingFeeRecord)
async def record_scouting_fee(
    req: RecordScoutingFeeRequest,
    user_id: str = Depends(get_current_user_id),
    billing_service: BillingService = Depends(get_billing_service)
):
    """Record the scouting fee of a deal brokered by the calling advisor"""
    try:
        return await billing_service.record_scouting_fee(
            advisor_id=user_id,
            investor_id=req.investor_id,
            startup_id=req.startup_id,
            advisory_fee=req.advisory_fee,
            investor_in_network=req.investor_in_network,
            startup_in_network=req.startup_in_network,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error recording scouting fee for advisor {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to record scouting fee")


# Combined router that includes both billing and stripe routes
router = APIRouter()
router.include_router(billing_router)
router.include_router(stripe_router)
