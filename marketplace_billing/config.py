"""Application configuration loaded from the environment"""
import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv(dotenv_path=".env")

# Supabase
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

# Stripe
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")

# Frontend
CLIENT_URL = os.getenv("CLIENT_URL", "http://localhost:3000")
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", CLIENT_URL).split(",") if origin.strip()]

# Due diligence price used when no country fee is configured
DUE_DILIGENCE_DEFAULT_AMOUNT = Decimal(os.getenv("DUE_DILIGENCE_DEFAULT_AMOUNT", "150"))
DUE_DILIGENCE_DEFAULT_CURRENCY = os.getenv("DUE_DILIGENCE_DEFAULT_CURRENCY", "EUR")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
