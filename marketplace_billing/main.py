import logging

from marketplace_billing.config import CORS_ORIGINS, LOG_LEVEL

# Log configuration (before other imports)
# ruff: noqa: E402
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True
)

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from marketplace_billing.api.base import api_router  # noqa: E402

app = FastAPI(
    title="Marketplace Billing API",
    description="Pricing, coupons, subscriptions, due diligence and scouting fees for the startup marketplace",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include all API routes
app.include_router(api_router)


@app.get("/")
def read_root():
    return {
        "message": "Marketplace Billing API",
        "docs": "/docs",
        "version": "1.0.0"
    }
