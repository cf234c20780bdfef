"""Supabase database client."""

import logging

from supabase import create_client, Client
from factshype.config import get_settings

logger = logging.getLogger(__name__)

_supabase_client: Client | None = None


def get_supabase() -> Client:
    """Get Supabase client instance."""
    global _supabase_client

    if _supabase_client is None:
        settings = get_settings()
        _supabase_client = create_client(
            settings.supabase_url,
            settings.supabase_key
        )

    return _supabase_client


def get_supabase_admin() -> Client:
    """Get Supabase client with service role key for writes.

    Falls back to the regular client when no service key is configured.
    """
    settings = get_settings()
    if not settings.supabase_service_key:
        return get_supabase()
    return create_client(
        settings.supabase_url,
        settings.supabase_service_key
    )


def check_database_connection() -> bool:
    """Run a trivial query to confirm the store is reachable."""
    settings = get_settings()
    if not (settings.supabase_url and settings.supabase_key):
        return False

    try:
        get_supabase().table("questions").select("question_id").limit(1).execute()
    except Exception as e:
        logger.warning("Database connection check failed: %s", e)
        return False
    return True
