from supabase import Client
from unveil.database.supabase_client import row_or_none
from typing import Dict, Iterable, Optional
import logging

logger = logging.getLogger(__name__)


def fetch_public_profile(supabase: Client, user_id: Optional[str]) -> Optional[Dict]:
    """Row from public_user_profiles, or None when missing or hidden by RLS"""
    if not user_id:
        return None
    try:
        result = supabase.table("public_user_profiles")\
            .select("id, full_name, avatar_url")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        return row_or_none(result)
    except Exception as e:
        logger.debug(f"Profile {user_id} not readable: {e}")
        return None


def fetch_public_profiles(supabase: Client, user_ids: Iterable[Optional[str]]) -> Dict[str, Optional[Dict]]:
    """One lookup per distinct user id"""
    profiles: Dict[str, Optional[Dict]] = {}
    for user_id in user_ids:
        if user_id and user_id not in profiles:
            profiles[user_id] = fetch_public_profile(supabase, user_id)
    return profiles
