from typing import Callable, Optional
from supabase import create_client, Client
from supabase.client import ClientOptions
from unveil.config import settings
import logging

logger = logging.getLogger(__name__)


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Use for cron, webhooks and admin routes."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client or cls.get_client()

    @classmethod
    def create_session_client(cls) -> Client:
        """
        New anon client for a single sign in or sign up.

        Signing in rewrites the calling client's Authorization header to the
        user's JWT, so these flows must never run on the shared client.
        """
        return create_client(
            settings.supabase_url,
            settings.supabase_key,
            options=ClientOptions(persist_session=False, auto_refresh_token=False),
        )

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_service_supabase() -> Client:
    return SupabaseClient.get_service_client()


def get_optional_service_supabase() -> Optional[Client]:
    """Service client, or None when it cannot be created. For routes that must answer 200 regardless."""
    try:
        return SupabaseClient.get_service_client()
    except Exception as e:
        logger.error(f"Could not create Supabase service client: {e}")
        return None


def get_session_client_factory() -> Callable[[], Client]:
    return SupabaseClient.create_session_client


def row_or_none(result) -> Optional[dict]:
    """First row of a query result. maybe_single() yields None instead of a response when nothing matched."""
    if result is None or not result.data:
        return None
    if isinstance(result.data, list):
        return result.data[0]
    return result.data
