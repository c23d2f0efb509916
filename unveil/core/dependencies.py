"""
Core dependencies for route protection and event ownership checks
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from unveil.config import settings
from unveil.database.supabase_client import get_session_client_factory, get_supabase, row_or_none
from unveil.modules.auth.service import AuthService
from supabase import Client
from typing import Callable, Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is reported as 401, not 403
security = HTTPBearer(auto_error=False)

EVENT_NOT_FOUND = "Event not found or unauthorized"


def cron_authorized(authorization: Optional[str]) -> bool:
    """Scheduler calls carry "Bearer <CRON_SECRET>". With no secret configured they are open."""
    if not settings.cron_secret:
        return True
    return authorization == f"Bearer {settings.cron_secret}"


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    session_client_factory: Callable[[], Client] = Depends(get_session_client_factory)
) -> AuthService:
    return AuthService(supabase, session_client_factory)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from the bearer token"""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization required"
        )
    return auth_service.get_current_user(credentials.credentials)


def get_hosted_event(event_id: str, user_id: str, supabase: Client) -> Dict[str, Any]:
    """Return the event if user_id is its host. Any miss (or lookup failure) is a 404."""
    try:
        result = supabase.table("events")\
            .select("id, title, event_date, host_user_id")\
            .eq("id", event_id)\
            .eq("host_user_id", user_id)\
            .maybe_single()\
            .execute()
    except Exception as e:
        logger.warning(f"Host lookup failed for event {event_id}: {e}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=EVENT_NOT_FOUND)
    event = row_or_none(result)
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=EVENT_NOT_FOUND)
    return event


def get_guest_record(event_id: str, user_id: str, supabase: Client) -> Optional[Dict[str, Any]]:
    """Return the caller's event_guests row, or None when they are not on the list"""
    try:
        result = supabase.table("event_guests")\
            .select("*")\
            .eq("event_id", event_id)\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
    except Exception as e:
        logger.warning(f"Guest lookup failed for event {event_id}: {e}")
        return None
    return row_or_none(result)


def get_event_role(event_id: str, user_id: str, supabase: Client) -> str:
    """Return "host" or "guest" for the caller's relationship to the event; 404 if neither"""
    try:
        get_hosted_event(event_id, user_id, supabase)
        return "host"
    except HTTPException:
        pass
    if get_guest_record(event_id, user_id, supabase):
        return "guest"
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=EVENT_NOT_FOUND)


def require_event_host(
    event_id: str,
    user_data: dict = Depends(get_current_user),
    supabase: Client = Depends(get_supabase)
) -> dict:
    """Dependency: caller must host the event in the path"""
    get_hosted_event(event_id, user_data["id"], supabase)
    return user_data


def require_event_member(
    event_id: str,
    user_data: dict = Depends(get_current_user),
    supabase: Client = Depends(get_supabase)
) -> dict:
    """Dependency: caller must host or be a guest of the event in the path. Adds event_role to the user dict."""
    role = get_event_role(event_id, user_data["id"], supabase)
    return {**user_data, "event_role": role}
