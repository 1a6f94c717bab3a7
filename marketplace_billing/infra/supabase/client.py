"""Process-wide Supabase client, created on first use with the service role key"""
import logging
from typing import Optional

from supabase import Client, create_client  # type: ignore

from marketplace_billing import config

logger = logging.getLogger(__name__)

_supabase_client: Optional[Client] = None


def get_supabase_client() -> Client:
    global _supabase_client

    if _supabase_client is None:
        if not config.SUPABASE_URL or not config.SUPABASE_SERVICE_ROLE_KEY:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

        _supabase_client = create_client(config.SUPABASE_URL, config.SUPABASE_SERVICE_ROLE_KEY)
        logger.info(f"Supabase client created for {config.SUPABASE_URL}")

    return _supabase_client


def reset_supabase_client() -> None:
    """Drop the cached client so the next call reads the current settings"""
    global _supabase_client
    _supabase_client = None
