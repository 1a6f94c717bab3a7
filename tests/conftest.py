"""Shared fixtures: in-memory repositories and a fake payment gateway.

The fakes mirror the Supabase repositories' method signatures so services
can be exercised without a database or Stripe.
"""

import itertools
from datetime import timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

import pytest
from fastapi import HTTPException

from marketplace_billing.features.admin.service import AdminService
from marketplace_billing.features.billing.models.stripe_event import StripeEvent
from marketplace_billing.features.billing.payments import PaymentIntentResult
from marketplace_billing.features.billing.service import BillingService
from marketplace_billing.features.pricing.currency import to_minor_units
from marketplace_billing.features.pricing.domain import (
    BillingInterval,
    DiscountType,
    SubscriptionStatus,
)
from marketplace_billing.models.coupon import DiscountCoupon
from marketplace_billing.models.due_diligence import DueDiligenceFee, DueDiligenceRequest
from marketplace_billing.models.plan import SubscriptionPlan
from marketplace_billing.models.scouting_fee import ScoutingFeeConfig, ScoutingFeeRecord
from marketplace_billing.models.subscription import SubscriptionWithPlan, UserSubscription
from marketplace_billing.utils.datetime_helper import utc_now


# ============================================================================
# In-memory repositories
# ============================================================================


class FakeRepository:
    """Dict-backed stand-in for BaseRepository"""

    def __init__(self, model_class, prefix: str):
        self._model_class = model_class
        self._prefix = prefix
        self._ids = itertools.count(1)
        self.items: Dict[str, Any] = {}

    def _next_id(self) -> str:
        return f"{self._prefix}-{next(self._ids)}"

    def add(self, **fields):
        """Seed a record directly"""
        fields.setdefault("id", self._next_id())
        model = self._model_class(**fields)
        self.items[model.id] = model
        return model

    @staticmethod
    def _matches(item, filters: Dict[str, Any]) -> bool:
        return all(getattr(item, key) == value for key, value in filters.items())

    @staticmethod
    def _ordered(items: List[Any], order_by: Optional[str], desc: bool) -> List[Any]:
        if not order_by:
            return items
        return sorted(items, key=lambda item: getattr(item, order_by), reverse=desc)

    async def find_by_id(self, id: str):
        return self.items.get(id)

    async def find_all(self, limit=None, offset=0, order_by=None, desc=False):
        items = self._ordered(list(self.items.values()), order_by, desc)[offset:]
        return items[:limit] if limit else items

    async def find_by_filters(self, filters, limit=None, order_by=None, desc=False):
        items = [item for item in self.items.values() if self._matches(item, filters)]
        items = self._ordered(items, order_by, desc)
        return items[:limit] if limit else items

    async def find_one(self, filters):
        results = await self.find_by_filters(filters, limit=1)
        return results[0] if results else None

    async def create(self, data):
        fields = data.model_dump()
        fields["id"] = self._next_id()
        # Distinct, increasing timestamps keep "newest first" ordering deterministic
        fields["created_at"] = utc_now() + timedelta(microseconds=len(self.items))
        model = self._model_class(**fields)
        self.items[model.id] = model
        return model

    async def update(self, id: str, data):
        item = self.items.get(id)
        if item is None:
            return None
        updated = item.model_copy(update=data.model_dump(exclude_unset=True))
        self.items[id] = updated
        return updated

    async def delete(self, id: str) -> bool:
        return self.items.pop(id, None) is not None

    async def count(self, filters=None) -> int:
        return len(await self.find_by_filters(filters or {}))


class FakePlanRepository(FakeRepository):
    def __init__(self):
        super().__init__(SubscriptionPlan, "plan")

    async def find_available(self, user_type: str, country: str):
        return await self.find_by_filters(
            {"user_type": user_type, "country": country, "is_active": True}, order_by="price"
        )


class FakeSubscriptionRepository(FakeRepository):
    def __init__(self, plans: FakePlanRepository):
        super().__init__(UserSubscription, "sub")
        self._plans = plans

    async def find_active_with_plans(self, user_id: str):
        return [
            SubscriptionWithPlan(**sub.model_dump(), plan=self._plans.items[sub.plan_id])
            for sub in self.items.values()
            if sub.user_id == user_id and sub.status == SubscriptionStatus.ACTIVE and sub.plan_id in self._plans.items
        ]

    async def find_active_for_user(self, user_id: str):
        subscriptions = await self.find_active_with_plans(user_id)
        return subscriptions[0] if subscriptions else None

    async def count_active_for_plan(self, plan_id: str) -> int:
        return await self.count({"plan_id": plan_id, "status": SubscriptionStatus.ACTIVE})

    async def find_by_payment_intent(self, payment_intent_id: str):
        return await self.find_one({"payment_intent_id": payment_intent_id})


class FakeCouponRepository(FakeRepository):
    def __init__(self):
        super().__init__(DiscountCoupon, "coupon")
        self.increment_calls = 0

    async def find_by_code(self, code: str):
        return await self.find_one({"code": code.strip().upper()})

    async def increment_used_count(self, coupon: DiscountCoupon):
        """Compare-and-increment against the stored row, like the conditional UPDATE"""
        self.increment_calls += 1
        stored = self.items.get(coupon.id)
        if stored is None or stored.used_count != coupon.used_count or stored.used_count >= stored.max_uses:
            return None
        updated = stored.model_copy(update={"used_count": stored.used_count + 1})
        self.items[coupon.id] = updated
        return updated

    async def decrement_used_count(self, coupon: DiscountCoupon, attempts: int = 3):
        stored = self.items.get(coupon.id)
        if stored is None or stored.used_count <= 0:
            return None
        updated = stored.model_copy(update={"used_count": stored.used_count - 1})
        self.items[coupon.id] = updated
        return updated


class FakeDueDiligenceRequestRepository(FakeRepository):
    def __init__(self):
        super().__init__(DueDiligenceRequest, "dd")

    async def find_by_user(self, user_id: str):
        return await self.find_by_filters({"user_id": user_id}, order_by="created_at", desc=True)

    async def find_by_payment_intent(self, payment_intent_id: str):
        return await self.find_one({"payment_intent_id": payment_intent_id})


class FakeDueDiligenceFeeRepository(FakeRepository):
    def __init__(self):
        super().__init__(DueDiligenceFee, "ddfee")

    async def find_by_country(self, country: str):
        return await self.find_one({"country": country})

    async def find_active_for_country(self, country: str):
        return await self.find_one({"country": country, "is_active": True})


class FakeScoutingFeeConfigRepository(FakeRepository):
    def __init__(self):
        super().__init__(ScoutingFeeConfig, "sfc")

    async def find_for_country(self, country, payer=None, active_only=False):
        filters = {"country": country}
        if payer is not None:
            filters["user_type"] = payer
        if active_only:
            filters["is_active"] = True
        return await self.find_by_filters(filters, order_by="amount_min")


class FakeScoutingFeeRecordRepository(FakeRepository):
    def __init__(self):
        super().__init__(ScoutingFeeRecord, "sf")

    async def find_by_advisor(self, advisor_id: str):
        return await self.find_by_filters({"advisor_id": advisor_id}, order_by="created_at", desc=True)


class FakeCountryRepository:
    def __init__(self, countries=()):
        self.countries = list(countries)

    async def list_countries(self):
        return sorted(set(self.countries))


class FakeUserRepository:
    def __init__(self):
        self.roles: Dict[str, str] = {}

    async def get_role(self, user_id: str):
        return self.roles.get(user_id)


class FakeStripeEventRepository(FakeRepository):
    def __init__(self):
        super().__init__(StripeEvent, "evt")

    async def find_by_stripe_event_id(self, stripe_event_id: str):
        return await self.find_one({"stripe_event_id": stripe_event_id})

    async def mark_as_processed(self, stripe_event_id: str):
        event = await self.find_by_stripe_event_id(stripe_event_id)
        if not event:
            return None
        updated = event.model_copy(update={"processed_at": utc_now()})
        self.items[event.id] = updated
        return updated


class FakeRepositoryFactory:
    """Same attribute surface as RepositoryFactory"""

    def __init__(self):
        self.plans = FakePlanRepository()
        self.subscriptions = FakeSubscriptionRepository(self.plans)
        self.coupons = FakeCouponRepository()
        self.due_diligence_requests = FakeDueDiligenceRequestRepository()
        self.due_diligence_fees = FakeDueDiligenceFeeRepository()
        self.scouting_fee_configs = FakeScoutingFeeConfigRepository()
        self.scouting_fees = FakeScoutingFeeRecordRepository()
        self.countries = FakeCountryRepository()
        self.users = FakeUserRepository()


# ============================================================================
# Fake payment gateway
# ============================================================================


class FakePaymentGateway:
    """Records intents in memory; tests flip their status with ``succeed``/``fail``"""

    def __init__(self):
        self._ids = itertools.count(1)
        self.intents: Dict[str, PaymentIntentResult] = {}
        self.fail_next_create = False

    def create_payment_intent(self, amount, currency, user_id, metadata=None):
        if self.fail_next_create:
            self.fail_next_create = False
            raise HTTPException(status_code=502, detail="Failed to create payment intent. Please try again.")

        intent_id = f"pi_{next(self._ids)}"
        intent = PaymentIntentResult(
            id=intent_id,
            amount=to_minor_units(amount, currency),
            currency=currency.lower(),
            status="pending",
            client_secret=f"{intent_id}_secret",
            metadata={"user_id": user_id, **(metadata or {})},
        )
        self.intents[intent_id] = intent
        return intent

    def retrieve_payment_intent(self, payment_intent_id):
        intent = self.intents.get(payment_intent_id)
        if intent is None:
            raise HTTPException(status_code=502, detail="Failed to verify payment. Please try again.")
        return intent

    def succeed(self, payment_intent_id):
        self.intents[payment_intent_id].status = "succeeded"

    def fail(self, payment_intent_id):
        self.intents[payment_intent_id].status = "failed"


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def repos():
    return FakeRepositoryFactory()


@pytest.fixture
def gateway():
    return FakePaymentGateway()


@pytest.fixture
def stripe_events():
    return FakeStripeEventRepository()


@pytest.fixture
def billing_service(repos, gateway):
    return BillingService(repos, gateway)


@pytest.fixture
def admin_service(repos):
    return AdminService(repos)


@pytest.fixture
def plan(repos):
    """Investor plan at 15 EUR per startup per month"""
    return repos.plans.add(
        name="Investor Basic",
        price=Decimal("15"),
        currency="EUR",
        interval=BillingInterval.MONTHLY,
        description="Per-startup monitoring",
        user_type="Investor",
        country="Global",
        is_active=True,
    )


@pytest.fixture
def make_coupon(repos):
    """Factory seeding a usable 20% coupon, with overrides"""
    def _make(**overrides) -> DiscountCoupon:
        fields = dict(
            code="SAVE20",
            discount_type=DiscountType.PERCENTAGE,
            discount_value=Decimal("20"),
            max_uses=10,
            used_count=0,
            valid_from=utc_now() - timedelta(days=1),
            valid_until=utc_now() + timedelta(days=30),
            is_active=True,
        )
        fields.update(overrides)
        return repos.coupons.add(**fields)
    return _make


@pytest.fixture
def coupon(make_coupon):
    return make_coupon()
