"""Billing service for plans, coupons, subscriptions, due diligence and scouting fees"""
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Tuple

from fastapi import HTTPException

from marketplace_billing import config
from marketplace_billing.features.billing.payments import PaymentIntentResult, StripePaymentGateway
from marketplace_billing.features.billing.schemas import SubscriptionQuote
from marketplace_billing.features.pricing.coupons import apply_discount, describe_discount, is_coupon_usable
from marketplace_billing.features.pricing.currency import from_minor_units
from marketplace_billing.features.pricing.domain import (
    CouponScope,
    DueDiligenceStatus,
    ScoutingFeePayer,
    SubscriptionStatus,
)
from marketplace_billing.features.pricing.scouting_fees import (
    ScoutingFeeQuote,
    calculate_network_scouting_fee,
    resolve_scouting_fee,
)
from marketplace_billing.features.pricing.subscription_pricing import (
    calculate_period_end,
    calculate_subscription_price,
)
from marketplace_billing.features.pricing.summary import SubscriptionSummary, summarize_subscriptions
from marketplace_billing.infra.supabase.repositories import RepositoryFactory
from marketplace_billing.models.coupon import DiscountCoupon
from marketplace_billing.models.due_diligence import (
    DueDiligenceRequest,
    DueDiligenceRequestCreate,
    DueDiligenceRequestUpdate,
)
from marketplace_billing.models.plan import SubscriptionPlan
from marketplace_billing.models.scouting_fee import ScoutingFeeRecord, ScoutingFeeRecordCreate
from marketplace_billing.models.subscription import (
    SubscriptionWithPlan,
    UserSubscription,
    UserSubscriptionCreate,
    UserSubscriptionUpdate,
)
from marketplace_billing.utils.datetime_helper import utc_now

logger = logging.getLogger(__name__)

INVALID_COUPON_MESSAGE = "Invalid or expired coupon"

# Payment intent metadata kinds
SUBSCRIPTION_PAYMENT = "subscription"
DUE_DILIGENCE_PAYMENT = "due_diligence"


class BillingService:
    """Service for end-user billing operations"""

    def __init__(self, repos: RepositoryFactory, payments: Optional[StripePaymentGateway] = None):
        self.repos = repos
        self.payments = payments or StripePaymentGateway()

    # ============================================================================
    # PLANS & SUBSCRIPTIONS
    # ============================================================================

    async def get_subscription_plans(self, user_type: str, country: str) -> List[SubscriptionPlan]:
        """Active plans for a user type and country, cheapest first"""
        return await self.repos.plans.find_available(user_type, country)

    async def get_plan_or_404(self, plan_id: str) -> SubscriptionPlan:
        """
        Get plan by ID or raise 404

        Raises:
            HTTPException(404): Plan not found
        """
        plan = await self.repos.plans.find_by_id(plan_id)
        if not plan:
            logger.error(f"Subscription plan not found: {plan_id}")
            raise HTTPException(status_code=404, detail="Subscription plan not found")
        return plan

    async def get_user_subscription(self, user_id: str) -> Optional[SubscriptionWithPlan]:
        """
        The user's active subscription, or None

        ``amount`` is reported as ``plan.price * startup_count`` and ``interval``
        is taken from the plan.
        """
        subscription = await self.repos.subscriptions.find_active_for_user(user_id)
        if subscription is None:
            return None

        return subscription.model_copy(update={
            "amount": calculate_subscription_price(subscription.plan.price, subscription.startup_count),
            "interval": subscription.plan.interval,
        })

    async def get_active_subscription_or_404(self, user_id: str) -> SubscriptionWithPlan:
        subscription = await self.repos.subscriptions.find_active_for_user(user_id)
        if not subscription:
            logger.warning(f"No active subscription for user {user_id}")
            raise HTTPException(status_code=404, detail="No active subscription found")
        return subscription

    # ============================================================================
    # COUPONS
    # ============================================================================

    async def validate_coupon(
        self,
        code: str,
        now: Optional[datetime] = None,
        scope: Optional[CouponScope] = None,
        country: Optional[str] = None
    ) -> Optional[DiscountCoupon]:
        """
        Look up a coupon by code and check it is usable

        Returns:
            The coupon, or None when it does not exist or cannot be redeemed.
            Rejection is read-only: ``used_count`` is never touched here.
        """
        if not code or not code.strip():
            return None

        coupon = await self.repos.coupons.find_by_code(code)
        if not is_coupon_usable(coupon, now=now, scope=scope, country=country):
            logger.info(f"Coupon {code.strip().upper()} rejected")
            return None

        return coupon

    async def apply_coupon(
        self,
        code: str,
        user_id: str,
        scope: Optional[CouponScope] = None,
        country: Optional[str] = None
    ) -> Tuple[DiscountCoupon, Decimal]:
        """
        Validate and redeem one use of a coupon

        Returns:
            (coupon, discount value)

        Raises:
            HTTPException(404): Coupon missing, inactive, outside its window,
                exhausted, or lost a concurrent redemption race
        """
        coupon = await self.validate_coupon(code, scope=scope, country=country)
        if coupon is None:
            raise HTTPException(status_code=404, detail=INVALID_COUPON_MESSAGE)

        redeemed = await self.repos.coupons.increment_used_count(coupon)
        if redeemed is None:
            logger.warning(f"Coupon {coupon.code} could not be redeemed for user {user_id} (uses exhausted)")
            raise HTTPException(status_code=404, detail=INVALID_COUPON_MESSAGE)

        logger.info(
            f"Coupon {coupon.code} redeemed by user {user_id} "
            f"({redeemed.used_count}/{redeemed.max_uses} uses)"
        )
        return redeemed, redeemed.discount_value

    async def release_coupon(self, coupon: DiscountCoupon, user_id: str) -> None:
        """Give back a use redeemed for a payment that was never created"""
        try:
            released = await self.repos.coupons.decrement_used_count(coupon)
        except Exception:
            logger.error(f"Failed to release coupon {coupon.code} for user {user_id}", exc_info=True)
            return

        if released is None:
            logger.error(f"Could not release coupon {coupon.code} for user {user_id}")
            return
        logger.info(f"Released coupon {coupon.code} for user {user_id} ({released.used_count}/{released.max_uses} uses)")

    async def _create_intent(
        self,
        amount: Decimal,
        currency: str,
        user_id: str,
        metadata: dict,
        coupon: Optional[DiscountCoupon]
    ) -> PaymentIntentResult:
        try:
            return self.payments.create_payment_intent(amount, currency, user_id, metadata)
        except Exception:
            if coupon:
                await self.release_coupon(coupon, user_id)
            raise

    def build_quote(
        self,
        plan: SubscriptionPlan,
        startup_count: int,
        coupon: Optional[DiscountCoupon] = None
    ) -> SubscriptionQuote:
        """Price breakdown for a plan, startup count and optional coupon"""
        try:
            subtotal = calculate_subscription_price(plan.price, startup_count)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        total = apply_discount(subtotal, coupon) if subtotal else subtotal
        return SubscriptionQuote(
            plan_id=plan.id,
            currency=plan.currency,
            unit_price=plan.price,
            startup_count=startup_count,
            subtotal=subtotal,
            discount=subtotal - total,
            total=total,
            coupon_code=coupon.code if coupon else None,
        )

    async def quote_subscription(
        self,
        plan_id: str,
        startup_count: int,
        coupon_code: Optional[str] = None
    ) -> SubscriptionQuote:
        """
        Price preview without side effects

        Raises:
            HTTPException(404): Plan not found, or coupon given but not usable
        """
        plan = await self.get_plan_or_404(plan_id)

        coupon = None
        if coupon_code:
            coupon = await self.validate_coupon(coupon_code, scope=CouponScope.SUBSCRIPTION, country=plan.country)
            if coupon is None:
                raise HTTPException(status_code=404, detail=INVALID_COUPON_MESSAGE)

        return self.build_quote(plan, startup_count, coupon)

    # ============================================================================
    # SUBSCRIPTION PAYMENT
    # ============================================================================

    async def create_subscription_payment(
        self,
        user_id: str,
        plan_id: str,
        startup_count: int,
        coupon_code: Optional[str] = None
    ) -> Tuple[PaymentIntentResult, SubscriptionQuote]:
        """
        Create a payment intent for a subscription

        The coupon (if any) is redeemed before the intent is created and
        given back if the payment provider fails, so a failed call consumes
        no use. The discounted amount travels in the intent metadata so
        that confirmation stores the price the user actually paid.

        Raises:
            HTTPException(400): Plan inactive or invalid startup count
            HTTPException(404): Plan not found or coupon not usable
            HTTPException(502): Payment provider failure
        """
        plan = await self.get_plan_or_404(plan_id)
        if not plan.is_active:
            raise HTTPException(status_code=400, detail="This subscription plan is not available")

        # Validate quantity before any coupon use is consumed
        self.build_quote(plan, startup_count)

        coupon = None
        if coupon_code:
            coupon, _ = await self.apply_coupon(
                coupon_code, user_id, scope=CouponScope.SUBSCRIPTION, country=plan.country
            )

        quote = self.build_quote(plan, startup_count, coupon)

        metadata = {
            "kind": SUBSCRIPTION_PAYMENT,
            "plan_id": plan.id,
            "startup_count": str(startup_count),
            "amount": str(quote.total),
        }
        if coupon:
            metadata["coupon_code"] = coupon.code

        intent = await self._create_intent(quote.total, plan.currency, user_id, metadata, coupon)
        return intent, quote

    async def confirm_payment(
        self,
        payment_intent_id: str,
        user_id: str,
        plan_id: str,
        startup_count: int
    ) -> UserSubscription:
        """
        Confirm a succeeded payment intent and create the subscription

        Confirming the same intent twice returns the subscription created
        the first time.

        Raises:
            HTTPException(400): Intent not succeeded or issued for another user/plan
            HTTPException(404): Plan not found
            HTTPException(502): Payment provider failure
        """
        existing = await self.repos.subscriptions.find_by_payment_intent(payment_intent_id)
        if existing:
            logger.info(f"Payment intent {payment_intent_id} already confirmed as subscription {existing.id}")
            return existing

        intent = self.payments.retrieve_payment_intent(payment_intent_id)
        if intent.status != "succeeded":
            logger.warning(f"Payment intent {payment_intent_id} not succeeded (status={intent.status})")
            raise HTTPException(status_code=400, detail="Payment has not been completed")

        metadata = intent.metadata
        if metadata.get("user_id") not in (None, user_id) or metadata.get("plan_id") not in (None, plan_id):
            logger.error(f"Payment intent {payment_intent_id} does not match user {user_id} / plan {plan_id}")
            raise HTTPException(status_code=400, detail="Payment does not match this subscription")

        plan = await self.get_plan_or_404(plan_id)

        amount = self._amount_from_metadata(metadata)
        if amount is None:
            amount = calculate_subscription_price(plan.price, startup_count)

        start = utc_now()
        try:
            subscription = await self.repos.subscriptions.create(
                UserSubscriptionCreate(
                    user_id=user_id,
                    plan_id=plan_id,
                    status=SubscriptionStatus.ACTIVE,
                    startup_count=startup_count,
                    amount=amount,
                    interval=plan.interval,
                    current_period_start=start,
                    current_period_end=calculate_period_end(start, plan.interval),
                    payment_intent_id=payment_intent_id,
                    coupon_code=metadata.get("coupon_code"),
                )
            )
        except Exception:
            # payment_intent_id is unique: a concurrent confirmation may have inserted first
            existing = await self.repos.subscriptions.find_by_payment_intent(payment_intent_id)
            if existing:
                logger.info(f"Payment intent {payment_intent_id} confirmed concurrently as subscription {existing.id}")
                return existing
            raise

        logger.info(f"Created subscription {subscription.id} for user {user_id} on plan {plan_id}")
        return subscription

    @staticmethod
    def _amount_from_metadata(metadata: dict) -> Optional[Decimal]:
        raw = metadata.get("amount")
        if raw is None:
            return None
        try:
            return Decimal(raw)
        except InvalidOperation:
            logger.warning(f"Ignoring malformed amount in payment intent metadata: {raw!r}")
            return None

    async def update_startup_count(self, user_id: str, new_count: int) -> UserSubscription:
        """
        Change the billed startup count of the user's active subscription

        The stored amount is recomputed from the plan price.

        Raises:
            HTTPException(400): Negative count
            HTTPException(404): No active subscription
        """
        if new_count < 0:
            raise HTTPException(status_code=400, detail="Startup count must not be negative")

        subscription = await self.get_active_subscription_or_404(user_id)

        updated = await self.repos.subscriptions.update(
            subscription.id,
            UserSubscriptionUpdate(
                startup_count=new_count,
                amount=calculate_subscription_price(subscription.plan.price, new_count),
                updated_at=utc_now(),
            )
        )
        if updated is None:
            raise HTTPException(status_code=404, detail="No active subscription found")

        logger.info(f"Updated startup count for user {user_id}: {subscription.startup_count} → {new_count}")
        return updated

    async def cancel_subscription(self, user_id: str) -> UserSubscription:
        """
        Transition the user's active subscription to cancelled

        Raises:
            HTTPException(404): No active subscription
        """
        subscription = await self.get_active_subscription_or_404(user_id)

        updated = await self.repos.subscriptions.update(
            subscription.id,
            UserSubscriptionUpdate(status=SubscriptionStatus.CANCELLED, updated_at=utc_now())
        )
        if updated is None:
            raise HTTPException(status_code=404, detail="No active subscription found")

        logger.info(f"Cancelled subscription {subscription.id} for user {user_id}")
        return updated

    async def get_subscription_summary(self, user_id: str) -> SubscriptionSummary:
        """Totals and upcoming payments over the user's active subscriptions"""
        subscriptions = await self.repos.subscriptions.find_active_with_plans(user_id)
        return summarize_subscriptions(subscriptions)

    # ============================================================================
    # DUE DILIGENCE
    # ============================================================================

    async def create_due_diligence_request(
        self,
        user_id: str,
        startup_id: str,
        country: Optional[str] = None
    ) -> DueDiligenceRequest:
        """
        Create a pending due diligence request

        The price comes from the active fee for ``country``; without one the
        configured default (150 EUR) applies.
        """
        amount = config.DUE_DILIGENCE_DEFAULT_AMOUNT
        currency = config.DUE_DILIGENCE_DEFAULT_CURRENCY

        if country:
            fee = await self.repos.due_diligence_fees.find_active_for_country(country)
            if fee:
                amount, currency = fee.base_price, fee.currency

        request = await self.repos.due_diligence_requests.create(
            DueDiligenceRequestCreate(
                user_id=user_id,
                startup_id=startup_id,
                amount=amount,
                currency=currency,
                country=country,
                status=DueDiligenceStatus.PENDING,
            )
        )
        logger.info(f"Created due diligence request {request.id} for user {user_id} / startup {startup_id}")
        return request

    async def get_due_diligence_request_or_404(self, request_id: str) -> DueDiligenceRequest:
        request = await self.repos.due_diligence_requests.find_by_id(request_id)
        if not request:
            logger.error(f"Due diligence request not found: {request_id}")
            raise HTTPException(status_code=404, detail="Due diligence request not found")
        return request

    async def create_due_diligence_payment(
        self,
        request_id: str,
        user_id: str,
        coupon_code: Optional[str] = None
    ) -> PaymentIntentResult:
        """
        Create a payment intent for a pending due diligence request

        A coupon is checked against the country the request was made for.

        Raises:
            HTTPException(400): Request is not pending
            HTTPException(403): Request belongs to another user
            HTTPException(404): Request not found or coupon not usable
            HTTPException(502): Payment provider failure
        """
        request = await self.get_due_diligence_request_or_404(request_id)
        if request.user_id != user_id:
            logger.warning(f"User {user_id} tried to pay due diligence request {request_id} of another user")
            raise HTTPException(status_code=403, detail="You cannot pay for this request")
        if request.status != DueDiligenceStatus.PENDING:
            raise HTTPException(status_code=400, detail=f"Request is already {request.status.value}")

        coupon = None
        if coupon_code:
            coupon, _ = await self.apply_coupon(
                coupon_code, user_id, scope=CouponScope.DUE_DILIGENCE, country=request.country
            )
        amount = apply_discount(request.amount, coupon)

        metadata = {"kind": DUE_DILIGENCE_PAYMENT, "request_id": request.id, "amount": str(amount)}
        if coupon:
            metadata["coupon_code"] = coupon.code

        intent = await self._create_intent(amount, request.currency, user_id, metadata, coupon)
        await self.repos.due_diligence_requests.update(
            request.id, DueDiligenceRequestUpdate(payment_intent_id=intent.id)
        )
        return intent

    async def process_due_diligence_payment(self, request_id: str, payment_intent_id: str) -> DueDiligenceRequest:
        """
        Mark a due diligence request as paid

        Raises:
            HTTPException(404): Request not found
        """
        request = await self.get_due_diligence_request_or_404(request_id)
        if request.status in (DueDiligenceStatus.PAID, DueDiligenceStatus.COMPLETED):
            logger.info(f"Due diligence request {request_id} already {request.status.value}")
            return request

        updated = await self.repos.due_diligence_requests.update(
            request_id,
            DueDiligenceRequestUpdate(
                status=DueDiligenceStatus.PAID,
                payment_intent_id=payment_intent_id,
                completed_at=utc_now(),
            )
        )
        logger.info(f"Due diligence request {request_id} paid with intent {payment_intent_id}")
        return updated or request

    async def confirm_due_diligence_payment(
        self,
        request_id: str,
        user_id: str,
        payment_intent_id: str
    ) -> DueDiligenceRequest:
        """
        Verify a client-reported payment with Stripe, then mark the request paid

        Raises:
            HTTPException(400): Intent not succeeded or issued for another request
            HTTPException(403): Request belongs to another user
            HTTPException(404): Request not found
            HTTPException(502): Payment provider failure
        """
        request = await self.get_due_diligence_request_or_404(request_id)
        if request.user_id != user_id:
            raise HTTPException(status_code=403, detail="You cannot pay for this request")

        intent = self.payments.retrieve_payment_intent(payment_intent_id)
        if intent.status != "succeeded":
            logger.warning(f"Payment intent {payment_intent_id} not succeeded (status={intent.status})")
            raise HTTPException(status_code=400, detail="Payment has not been completed")
        if intent.metadata.get("request_id") not in (None, request_id):
            logger.error(f"Payment intent {payment_intent_id} was not issued for request {request_id}")
            raise HTTPException(status_code=400, detail="Payment does not match this request")

        return await self.process_due_diligence_payment(request_id, payment_intent_id)

    async def fail_due_diligence_payment(self, request_id: str) -> Optional[DueDiligenceRequest]:
        """Mark a pending due diligence request as failed"""
        request = await self.repos.due_diligence_requests.find_by_id(request_id)
        if request is None or request.status != DueDiligenceStatus.PENDING:
            return request

        logger.info(f"Due diligence request {request_id} payment failed")
        return await self.repos.due_diligence_requests.update(
            request_id, DueDiligenceRequestUpdate(status=DueDiligenceStatus.FAILED)
        )

    async def complete_due_diligence_request(self, request_id: str) -> DueDiligenceRequest:
        """
        Mark a paid due diligence request as completed

        Raises:
            HTTPException(400): Request is not paid
            HTTPException(404): Request not found
        """
        request = await self.get_due_diligence_request_or_404(request_id)
        if request.status != DueDiligenceStatus.PAID:
            raise HTTPException(
                status_code=400,
                detail=f"Only paid requests can be completed (current status: {request.status.value})"
            )

        updated = await self.repos.due_diligence_requests.update(
            request_id, DueDiligenceRequestUpdate(status=DueDiligenceStatus.COMPLETED)
        )
        return updated or request

    async def get_user_due_diligence_requests(self, user_id: str) -> List[DueDiligenceRequest]:
        """All due diligence requests of a user, newest first"""
        return await self.repos.due_diligence_requests.find_by_user(user_id)

    # ============================================================================
    # SCOUTING FEES
    # ============================================================================

    async def quote_scouting_fee(
        self,
        amount: Decimal,
        payer: ScoutingFeePayer,
        country: str
    ) -> ScoutingFeeQuote:
        """
        Banded scouting fee for a raised amount

        Raises:
            HTTPException(400): Negative amount
        """
        configs = await self.repos.scouting_fee_configs.find_for_country(country, payer, active_only=True)
        try:
            return resolve_scouting_fee(amount, payer, country, configs)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    def calculate_network_scouting_fee(
        self,
        advisory_fee: Decimal,
        investor_in_network: bool,
        startup_in_network: bool
    ) -> Decimal:
        """
        Network scouting fee for an advisor deal

        Raises:
            HTTPException(400): Negative advisory fee
        """
        if advisory_fee < 0:
            raise HTTPException(status_code=400, detail="Advisory fee must not be negative")
        return calculate_network_scouting_fee(advisory_fee, investor_in_network, startup_in_network)

    async def record_scouting_fee(
        self,
        advisor_id: str,
        investor_id: str,
        startup_id: str,
        advisory_fee: Decimal,
        investor_in_network: bool,
        startup_in_network: bool
    ) -> ScoutingFeeRecord:
        """Compute the network scouting fee for an advisor deal and record it"""
        amount = self.calculate_network_scouting_fee(advisory_fee, investor_in_network, startup_in_network)

        record = await self.repos.scouting_fees.create(
            ScoutingFeeRecordCreate(
                advisor_id=advisor_id,
                investor_id=investor_id,
                startup_id=startup_id,
                advisory_fee=advisory_fee,
                amount=amount,
            )
        )
        logger.info(f"Recorded scouting fee {record.id} of {amount} for advisor {advisor_id}")
        return record


def intent_amount(intent: PaymentIntentResult) -> Decimal:
    """Major-unit amount of a payment intent"""
    return from_minor_units(intent.amount, intent.currency)


def coupon_applied_message(coupon: DiscountCoupon) -> str:
    return f"Coupon applied! {describe_discount(coupon)} discount"
