"""Admin API endpoints for the financial model (plans, coupons, due diligence and scouting fees)"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from marketplace_billing.auth import require_admin
from marketplace_billing.api.dependencies import get_repositories
from marketplace_billing.features.admin.schemas import (
    AddScoutingFeeConfigRequest,
    CouponResponse,
    CreateCouponRequest,
    CreatePlanRequest,
    DueDiligenceFeeResponse,
    PlanResponse,
    ScoutingFeeConfigPairResponse,
    ScoutingFeeConfigResponse,
    UpdatePlanRequest,
    UpsertDueDiligenceFeeRequest,
)
from marketplace_billing.features.admin.service import AdminService
from marketplace_billing.features.billing.schemas import ActionResponse
from marketplace_billing.infra.supabase.repositories import RepositoryFactory
from marketplace_billing.models.coupon import DiscountCoupon
from marketplace_billing.models.due_diligence import DueDiligenceFee
from marketplace_billing.models.plan import SubscriptionPlan
from marketplace_billing.models.scouting_fee import ScoutingFeeConfig

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


def get_admin_service(repos: RepositoryFactory = Depends(get_repositories)) -> AdminService:
    return AdminService(repos)


# ============================================================================
# PRICING PLANS
# ============================================================================

@router.get("/plans", response_model=List[SubscriptionPlan])
async def list_plans(
    admin_id: str = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        return await admin_service.list_plans()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing plans: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to load financial model data")


@router.post("/plans", response_model=PlanResponse)
async def create_plan(
    req: CreatePlanRequest,
    admin_id: str = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        plan = await admin_service.create_plan(req)
        return PlanResponse(success=True, message="Pricing plan created successfully", plan=plan)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating plan: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create pricing plan")


@router.patch("/plans/{plan_id}", response_model=PlanResponse)
async def update_plan(
    plan_id: str,
    req: UpdatePlanRequest,
    admin_id: str = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        plan = await admin_service.update_plan(plan_id, req)
        return PlanResponse(success=True, message="Pricing plan updated successfully", plan=plan)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating plan {plan_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update pricing plan")


@router.delete("/plans/{plan_id}", response_model=PlanResponse)
async def deactivate_plan(
    plan_id: str,
    admin_id: str = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    """Plans are deactivated, never deleted, so existing subscriptions keep their plan"""
    try:
        plan = await admin_service.deactivate_plan(plan_id)
        return PlanResponse(success=True, message="Pricing plan deactivated successfully", plan=plan)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deactivating plan {plan_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete pricing plan")


# ============================================================================
# DISCOUNT COUPONS
# ============================================================================

@router.get("/coupons", response_model=List[DiscountCoupon])
async def list_coupons(
    admin_id: str = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        return await admin_service.list_coupons()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing coupons: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to load financial model data")


@router.post("/coupons", response_model=CouponResponse)
async def create_coupon(
    req: CreateCouponRequest,
    admin_id: str = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        coupon = await admin_service.create_coupon(req, created_by=admin_id)
        return CouponResponse(success=True, message="Discount coupon created successfully", coupon=coupon)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating coupon {req.code}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create discount coupon")


@router.post("/coupons/{coupon_id}/toggle", response_model=CouponResponse)
async def toggle_coupon(
    coupon_id: str,
    admin_id: str = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        coupon = await admin_service.toggle_coupon(coupon_id)
        state = "activated" if coupon.is_active else "deactivated"
        return CouponResponse(success=True, message=f"Discount coupon {state}", coupon=coupon)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error toggling coupon {coupon_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update discount coupon")


@router.delete("/coupons/{coupon_id}", response_model=ActionResponse)
async def delete_coupon(
    coupon_id: str,
    admin_id: str = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        await admin_service.delete_coupon(coupon_id)
        return ActionResponse(success=True, message="Discount coupon deleted successfully")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting coupon {coupon_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete discount coupon")


# ============================================================================
# DUE DILIGENCE FEES
# ============================================================================

@router.get("/due-diligence-fees", response_model=List[DueDiligenceFee])
async def list_due_diligence_fees(
    admin_id: str = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        return await admin_service.list_due_diligence_fees()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing due diligence fees: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to load financial model data")


@router.put("/due-diligence-fees", response_model=DueDiligenceFeeResponse)
async def upsert_due_diligence_fee(
    req: UpsertDueDiligenceFeeRequest,
    admin_id: str = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        fee = await admin_service.upsert_due_diligence_fee(
            req.country, req.base_price, req.currency, req.is_active
        )
        return DueDiligenceFeeResponse(success=True, message="Due diligence settings updated successfully", fee=fee)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating due diligence fee for {req.country}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update due diligence settings")


# ============================================================================
# SCOUTING FEE CONFIGURATION
# ============================================================================

@router.get("/scouting-fee-configs", response_model=List[ScoutingFeeConfig])
async def list_scouting_fee_configs(
    country: Optional[str] = None,
    admin_id: str = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        return await admin_service.list_scouting_fee_configs(country)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing scouting fee configs: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to load financial model data")


@router.post("/scouting-fee-configs", response_model=ScoutingFeeConfigPairResponse)
async def add_scouting_fee_config_pair(
    req: AddScoutingFeeConfigRequest,
    admin_id: str = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    """Add one amount band for a country; investor and startup configs are always created together"""
    try:
        investor_config, startup_config = await admin_service.add_scouting_fee_config_pair(req)
        return ScoutingFeeConfigPairResponse(
            success=True,
            message="Fee configurations added successfully for both investors and startups",
            investor_config=investor_config,
            startup_config=startup_config
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error adding scouting fee configs for {req.country}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update scouting fee settings")


@router.post("/scouting-fee-configs/{config_id}/toggle", response_model=ScoutingFeeConfigResponse)
async def toggle_scouting_fee_config(
    config_id: str,
    admin_id: str = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        fee_config = await admin_service.toggle_scouting_fee_config(config_id)
        state = "activated" if fee_config.is_active else "deactivated"
        return ScoutingFeeConfigResponse(success=True, message=f"Fee configuration {state}", config=fee_config)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error toggling scouting fee config {config_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update scouting fee settings")


@router.delete("/scouting-fee-configs/{config_id}", response_model=ActionResponse)
async def delete_scouting_fee_config(
    config_id: str,
    admin_id: str = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        await admin_service.delete_scouting_fee_config(config_id)
        return ActionResponse(success=True, message="Fee configuration deleted successfully")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting scouting fee config {config_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update scouting fee settings")


# ============================================================================
# COUNTRIES
# ============================================================================

@router.get("/countries", response_model=List[str])
async def list_countries(
    admin_id: str = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service)
):
    try:
        return await admin_service.list_countries()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error listing countries: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to load financial model data")
