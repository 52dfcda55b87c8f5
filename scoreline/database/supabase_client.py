"""
Process-wide Supabase clients.

The API uses the anon-key client; the dev seed script uses the service-role
client so it can clear tables regardless of row level security.
"""

import logging
from typing import Optional

from supabase import create_client, Client

from scoreline.config import settings

logger = logging.getLogger(__name__)


class SupabaseConfigError(RuntimeError):
    pass


def _create(key: Optional[str], label: str) -> Client:
    if not settings.supabase_url or not key:
        raise SupabaseConfigError(f"SUPABASE_URL and {label} must be set")
    logger.info(f"Creating Supabase client ({label})")
    return create_client(settings.supabase_url, key)


class SupabaseClient:
    _client: Optional[Client] = None
    _service_client: Optional[Client] = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            cls._client = _create(settings.supabase_key, "SUPABASE_KEY")
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Service-role client; falls back to the anon client when no service key is configured"""
        if cls._service_client is None:
            if not settings.supabase_service_role_key:
                logger.warning("SUPABASE_SERVICE_ROLE_KEY not set, using the anon client")
                return cls.get_client()
            cls._service_client = _create(settings.supabase_service_role_key, "SUPABASE_SERVICE_ROLE_KEY")
        return cls._service_client

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def get_supabase() -> Client:
    """FastAPI dependency returning the shared client"""
    return SupabaseClient.get_client()
