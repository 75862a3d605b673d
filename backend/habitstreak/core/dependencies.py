"""
Dependency injection for shared clients and resources
"""
import logging
import threading
from typing import Optional

from supabase import create_client, Client
from habitstreak.core.config import settings
from habitstreak.core.exceptions import DatabaseError

logger = logging.getLogger(__name__)

# Singleton instance, created on first use
_supabase_client: Optional[Client] = None
_client_lock = threading.Lock()


def get_supabase_client() -> Client:
    """
    Get the shared Supabase client instance

    Returns:
        Supabase client

    Raises:
        DatabaseError: If Supabase credentials are missing or the client cannot be created
    """
    global _supabase_client

    if _supabase_client is not None:
        return _supabase_client

    with _client_lock:
        if _supabase_client is None:
            if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
                raise DatabaseError("Supabase is not configured (SUPABASE_URL / SUPABASE_KEY missing)")
            try:
                _supabase_client = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
            except Exception as e:
                logger.error(f"Failed to create Supabase client: {e}")
                raise DatabaseError(f"Failed to create Supabase client: {e}")
            logger.info("Supabase client initialized")

    return _supabase_client
