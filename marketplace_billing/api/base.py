from fastapi import APIRouter
from marketplace_billing.api import health
from marketplace_billing.features.admin.api import router as admin_router
from marketplace_billing.features.billing.api import router as billing_router

api_router = APIRouter()

# Include all sub-routers
api_router.include_router(health.router)
api_router.include_router(billing_router)
api_router.include_router(admin_router)
