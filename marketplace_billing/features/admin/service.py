"""Admin service for the pricing configuration tables"""
import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from fastapi import HTTPException

from marketplace_billing.features.admin.schemas import (
    AddScoutingFeeConfigRequest,
    CreateCouponRequest,
    CreatePlanRequest,
    UpdatePlanRequest,
)
from marketplace_billing.features.pricing.currency import get_currency_for_country
from marketplace_billing.features.pricing.domain import DiscountType, FeeType, ScoutingFeePayer
from marketplace_billing.features.pricing.scouting_fees import validate_no_band_overlap
from marketplace_billing.infra.supabase.repositories import RepositoryFactory
from marketplace_billing.models.coupon import DiscountCoupon, DiscountCouponCreate, DiscountCouponUpdate
from marketplace_billing.models.due_diligence import DueDiligenceFee, DueDiligenceFeeCreate, DueDiligenceFeeUpdate
from marketplace_billing.models.plan import SubscriptionPlan, SubscriptionPlanCreate, SubscriptionPlanUpdate
from marketplace_billing.models.scouting_fee import (
    ScoutingFeeConfig,
    ScoutingFeeConfigCreate,
    ScoutingFeeConfigUpdate,
)
from marketplace_billing.utils.datetime_helper import ensure_utc, utc_now

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_MESSAGE = "Please fill in all required fields"
HUNDRED = Decimal("100")


class AdminService:
    """
    Service for admin-managed pricing configuration

    Every validation runs before the first write, so a rejected request
    leaves the tables untouched.
    """

    def __init__(self, repos: RepositoryFactory):
        self.repos = repos

    # ============================================================================
    # PRICING PLANS
    # ============================================================================

    async def get_plan_or_404(self, plan_id: str) -> SubscriptionPlan:
        plan = await self.repos.plans.find_by_id(plan_id)
        if not plan:
            logger.error(f"Subscription plan not found: {plan_id}")
            raise HTTPException(status_code=404, detail="Subscription plan not found")
        return plan

    async def create_plan(self, req: CreatePlanRequest) -> SubscriptionPlan:
        """
        Create a pricing plan

        Raises:
            HTTPException(400): Missing name/description or negative price
        """
        if not req.name.strip() or not req.description.strip():
            raise HTTPException(status_code=400, detail=REQUIRED_FIELDS_MESSAGE)
        if req.price < 0:
            raise HTTPException(status_code=400, detail="Price must not be negative")

        plan = await self.repos.plans.create(
            SubscriptionPlanCreate(
                name=req.name.strip(),
                price=req.price,
                currency=req.currency.upper(),
                interval=req.interval,
                description=req.description.strip(),
                user_type=req.user_type,
                country=req.country,
                is_active=req.is_active,
            )
        )
        logger.info(f"Created plan {plan.id} ({plan.name}, {plan.price} {plan.currency}/{plan.interval.value})")
        return plan

    async def list_plans(self) -> List[SubscriptionPlan]:
        return await self.repos.plans.find_all(order_by="price")

    async def update_plan(self, plan_id: str, req: UpdatePlanRequest) -> SubscriptionPlan:
        """
        Update a pricing plan

        A plan referenced by an active subscription may only have its
        ``is_active`` flag changed.

        Raises:
            HTTPException(400): Invalid values, or pricing change on a plan in use
            HTTPException(404): Plan not found
        """
        await self.get_plan_or_404(plan_id)

        changes = req.model_dump(exclude_unset=True)
        if not changes:
            raise HTTPException(status_code=400, detail="No changes provided")
        if "price" in changes and (changes["price"] is None or changes["price"] < 0):
            raise HTTPException(status_code=400, detail="Price must not be negative")
        for field in ("name", "description"):
            if field in changes and not (changes[field] or "").strip():
                raise HTTPException(status_code=400, detail=REQUIRED_FIELDS_MESSAGE)

        if set(changes) - {"is_active"}:
            in_use = await self.repos.subscriptions.count_active_for_plan(plan_id)
            if in_use:
                logger.warning(f"Rejected update of plan {plan_id}: {in_use} active subscriptions")
                raise HTTPException(
                    status_code=400,
                    detail=f"Plan has {in_use} active subscriptions; only its active flag can be changed"
                )

        if changes.get("currency"):
            changes["currency"] = changes["currency"].upper()

        updated = await self.repos.plans.update(plan_id, SubscriptionPlanUpdate(**changes))
        if updated is None:
            raise HTTPException(status_code=404, detail="Subscription plan not found")

        logger.info(f"Updated plan {plan_id}: {sorted(changes)}")
        return updated

    async def deactivate_plan(self, plan_id: str) -> SubscriptionPlan:
        """Hide a plan from new subscribers; existing subscriptions keep it"""
        await self.get_plan_or_404(plan_id)
        updated = await self.repos.plans.update(plan_id, SubscriptionPlanUpdate(is_active=False))
        if updated is None:
            raise HTTPException(status_code=404, detail="Subscription plan not found")

        logger.info(f"Deactivated plan {plan_id}")
        return updated

    # ============================================================================
    # DISCOUNT COUPONS
    # ============================================================================

    @staticmethod
    def validate_coupon_terms(
        discount_type: DiscountType,
        discount_value: Decimal,
        max_uses: int
    ) -> None:
        """
        Raises:
            HTTPException(400): Value outside (0, 100] for percentage, not positive
                for fixed, or max_uses below 1
        """
        if discount_type == DiscountType.PERCENTAGE and not (0 < discount_value <= HUNDRED):
            raise HTTPException(status_code=400, detail="Percentage discount must be greater than 0 and at most 100")
        if discount_type == DiscountType.FIXED and discount_value <= 0:
            raise HTTPException(status_code=400, detail="Fixed discount must be greater than 0")
        if max_uses < 1:
            raise HTTPException(status_code=400, detail="Maximum uses must be at least 1")

    async def create_coupon(self, req: CreateCouponRequest, created_by: Optional[str] = None) -> DiscountCoupon:
        """
        Create a discount coupon

        The code is stored upper-cased and must be unique; ``valid_from``
        defaults to the start of today (UTC).

        Raises:
            HTTPException(400): Invalid terms, empty or duplicate code, or a
                window ending before it starts
        """
        code = req.code.strip().upper()
        if not code:
            raise HTTPException(status_code=400, detail=REQUIRED_FIELDS_MESSAGE)

        self.validate_coupon_terms(req.discount_type, req.discount_value, req.max_uses)

        valid_from = ensure_utc(req.valid_from) if req.valid_from else utc_now().replace(
            hour=0, minute=0, second=0, microsecond=0
        )
        valid_until = ensure_utc(req.valid_until)
        if valid_until < valid_from:
            raise HTTPException(status_code=400, detail="Coupon must not expire before it becomes valid")

        if await self.repos.coupons.find_by_code(code):
            raise HTTPException(status_code=400, detail=f"Coupon code {code} already exists")

        coupon = await self.repos.coupons.create(
            DiscountCouponCreate(
                code=code,
                discount_type=req.discount_type,
                discount_value=req.discount_value,
                max_uses=req.max_uses,
                used_count=0,
                valid_from=valid_from,
                valid_until=valid_until,
                is_active=req.is_active,
                applicable_to=req.applicable_to,
                countries=req.countries,
                created_by=created_by,
            )
        )
        logger.info(f"Created coupon {coupon.code} ({coupon.discount_type.value} {coupon.discount_value})")
        return coupon

    async def list_coupons(self) -> List[DiscountCoupon]:
        return await self.repos.coupons.find_all(order_by="created_at", desc=True)

    async def toggle_coupon(self, coupon_id: str) -> DiscountCoupon:
        coupon = await self.repos.coupons.find_by_id(coupon_id)
        if not coupon:
            raise HTTPException(status_code=404, detail="Coupon not found")

        updated = await self.repos.coupons.update(coupon_id, DiscountCouponUpdate(is_active=not coupon.is_active))
        if updated is None:
            raise HTTPException(status_code=404, detail="Coupon not found")

        logger.info(f"Coupon {coupon.code} is now {'active' if updated.is_active else 'inactive'}")
        return updated

    async def delete_coupon(self, coupon_id: str) -> None:
        if not await self.repos.coupons.delete(coupon_id):
            raise HTTPException(status_code=404, detail="Coupon not found")
        logger.info(f"Deleted coupon {coupon_id}")

    # ============================================================================
    # DUE DILIGENCE FEES
    # ============================================================================

    async def upsert_due_diligence_fee(
        self,
        country: str,
        base_price: Decimal,
        currency: Optional[str] = None,
        is_active: bool = True
    ) -> DueDiligenceFee:
        """
        Set the due diligence price for a country

        Without an explicit currency the country's own currency is used.

        Raises:
            HTTPException(400): Missing country or negative price
        """
        if not country or not country.strip():
            raise HTTPException(status_code=400, detail=REQUIRED_FIELDS_MESSAGE)
        if base_price < 0:
            raise HTTPException(status_code=400, detail="Price must not be negative")

        country = country.strip()
        currency = (currency or get_currency_for_country(country)).upper()

        existing = await self.repos.due_diligence_fees.find_by_country(country)
        if existing:
            fee = await self.repos.due_diligence_fees.update(
                existing.id,
                DueDiligenceFeeUpdate(base_price=base_price, currency=currency, is_active=is_active)
            )
            logger.info(f"Updated due diligence fee for {country}: {base_price} {currency}")
            return fee or existing

        fee = await self.repos.due_diligence_fees.create(
            DueDiligenceFeeCreate(country=country, base_price=base_price, currency=currency, is_active=is_active)
        )
        logger.info(f"Created due diligence fee for {country}: {base_price} {currency}")
        return fee

    async def list_due_diligence_fees(self) -> List[DueDiligenceFee]:
        return await self.repos.due_diligence_fees.find_all(order_by="country")

    # ============================================================================
    # SCOUTING FEE CONFIGURATION
    # ============================================================================

    @staticmethod
    def validate_fee(fee_type: FeeType, fee_value: Decimal, label: str) -> None:
        if fee_value <= 0:
            raise HTTPException(status_code=400, detail=f"{label} fee must be greater than 0")
        if fee_type == FeeType.PERCENTAGE and fee_value > HUNDRED:
            raise HTTPException(status_code=400, detail=f"{label} percentage fee must be at most 100")

    async def add_scouting_fee_config_pair(
        self,
        req: AddScoutingFeeConfigRequest
    ) -> Tuple[ScoutingFeeConfig, ScoutingFeeConfig]:
        """
        Configure one amount band for a country, for investors and startups together

        Raises:
            HTTPException(400): Missing fields, invalid band bounds, or a band
                overlapping an active band of the same country and payer
        """
        if not req.country or not req.country.strip():
            raise HTTPException(status_code=400, detail=REQUIRED_FIELDS_MESSAGE)
        country = req.country.strip()

        self.validate_fee(req.investor_fee_type, req.investor_fee_value, "Investor")
        self.validate_fee(req.startup_fee_type, req.startup_fee_value, "Startup")

        existing = await self.repos.scouting_fee_configs.find_for_country(country, active_only=True)
        try:
            for payer in (ScoutingFeePayer.INVESTOR, ScoutingFeePayer.STARTUP):
                validate_no_band_overlap(existing, country, payer, req.amount_min, req.amount_max)
        except ValueError as e:
            logger.warning(f"Rejected scouting fee band for {country}: {e}")
            raise HTTPException(status_code=400, detail=str(e))

        investor_config = await self.repos.scouting_fee_configs.create(
            ScoutingFeeConfigCreate(
                country=country,
                user_type=ScoutingFeePayer.INVESTOR,
                amount_min=req.amount_min,
                amount_max=req.amount_max,
                fee_type=req.investor_fee_type,
                fee_value=req.investor_fee_value,
            )
        )
        startup_config = await self.repos.scouting_fee_configs.create(
            ScoutingFeeConfigCreate(
                country=country,
                user_type=ScoutingFeePayer.STARTUP,
                amount_min=req.amount_min,
                amount_max=req.amount_max,
                fee_type=req.startup_fee_type,
                fee_value=req.startup_fee_value,
            )
        )

        logger.info(
            f"Added scouting fee band [{req.amount_min}, {req.amount_max or 'unlimited'}) for {country} "
            f"(configs {investor_config.id}, {startup_config.id})"
        )
        return investor_config, startup_config

    async def toggle_scouting_fee_config(self, config_id: str) -> ScoutingFeeConfig:
        """
        Flip a config's active flag

        Re-activating is subject to the same overlap check as creation.

        Raises:
            HTTPException(400): Re-activation would overlap an active band
            HTTPException(404): Config not found
        """
        fee_config = await self.repos.scouting_fee_configs.find_by_id(config_id)
        if not fee_config:
            raise HTTPException(status_code=404, detail="Scouting fee configuration not found")

        if not fee_config.is_active:
            existing = await self.repos.scouting_fee_configs.find_for_country(
                fee_config.country, fee_config.user_type, active_only=True
            )
            try:
                validate_no_band_overlap(
                    existing, fee_config.country, fee_config.user_type, fee_config.amount_min, fee_config.amount_max
                )
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        updated = await self.repos.scouting_fee_configs.update(
            config_id, ScoutingFeeConfigUpdate(is_active=not fee_config.is_active)
        )
        if updated is None:
            raise HTTPException(status_code=404, detail="Scouting fee configuration not found")
        return updated

    async def delete_scouting_fee_config(self, config_id: str) -> None:
        if not await self.repos.scouting_fee_configs.delete(config_id):
            raise HTTPException(status_code=404, detail="Scouting fee configuration not found")
        logger.info(f"Deleted scouting fee configuration {config_id}")

    async def list_scouting_fee_configs(self, country: Optional[str] = None) -> List[ScoutingFeeConfig]:
        if country:
            return await self.repos.scouting_fee_configs.find_for_country(country)
        return await self.repos.scouting_fee_configs.find_all(order_by="country")

    # ============================================================================
    # COUNTRIES
    # ============================================================================

    async def list_countries(self) -> List[str]:
        return await self.repos.countries.list_countries()
