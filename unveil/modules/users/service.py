from supabase import Client
from unveil.database.supabase_client import row_or_none
from unveil.modules.users.schemas import UserUpdate, UserResponse, PublicProfileResponse
from typing import List
from fastapi import HTTPException
from datetime import datetime
import logging
import re

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_user_by_id(self, user_id: str) -> UserResponse:
        """Get user profile by ID"""
        try:
            result = self.supabase.table("users")\
                .select("*")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        user = row_or_none(result)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return UserResponse(**user)

    def update_user(self, user_id: str, user_data: UserUpdate) -> UserResponse:
        """Update user profile"""
        try:
            update_data = user_data.model_dump(exclude_unset=True)
            update_data["updated_at"] = datetime.utcnow().isoformat()

            result = self.supabase.table("users")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="User not found")

            return UserResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_public_profile(self, user_id: str) -> PublicProfileResponse:
        try:
            result = self.supabase.table("public_user_profiles")\
                .select("id, full_name, avatar_url")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        profile = row_or_none(result)
        if not profile:
            raise HTTPException(status_code=404, detail="User not found")
        return PublicProfileResponse(**profile)

    def search_users(self, query: str, limit: int = 10) -> List[UserResponse]:
        """Case-insensitive match on name, phone or email"""
        # PostgREST or() filters are comma separated
        term = re.sub(r"[,()%*]", "", query).strip()
        if not term:
            return []
        try:
            result = self.supabase.table("users")\
                .select("*")\
                .or_(f"full_name.ilike.%{term}%,phone.ilike.%{term}%,email.ilike.%{term}%")\
                .limit(limit)\
                .execute()
            return [UserResponse(**user) for user in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
