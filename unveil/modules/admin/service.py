"""
Development-only test account management

Creates confirmed Supabase Auth users with generated passwords so the web
client can sign in as a host or guest without email round trips. Test
accounts are recognised by their @test.local address.
"""

from supabase import Client
from unveil.config import settings
from unveil.database.supabase_client import row_or_none
from unveil.modules.admin.schemas import (
    TestUserCreate, TestUserInfo, TestUserCredentials,
    TestUserCreateResponse, TestUserListResponse, TestUserDeleteResponse
)
from fastapi import HTTPException
from datetime import datetime, timezone
from urllib.parse import urlencode
import logging
import secrets
import time

logger = logging.getLogger(__name__)

TEST_EMAIL_PATTERN = "%@test.local"


def generate_test_password(role: str) -> str:
    return f"test-{role}-{int(time.time() * 1000)}-{secrets.token_hex(4)}"


def generate_test_phone() -> str:
    return f"+1555{secrets.randbelow(9000000) + 1000000}"


class AdminService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _ensure_profile(self, user_id: str, data: TestUserCreate, phone: str) -> None:
        """The auth trigger normally creates the users row; create it if the trigger did not"""
        try:
            result = self.supabase.table("users")\
                .select("id")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()
            if row_or_none(result):
                return
        except Exception as e:
            logger.warning(f"User profile lookup failed for {user_id}: {e}")

        logger.warning(f"User profile {user_id} not found, creating manually")
        try:
            self.supabase.table("users").insert({
                "id": user_id,
                "email": data.email,
                "full_name": data.name,
                "phone": phone,
                "role": data.role,
                "avatar_url": data.avatar,
            }).execute()
        except Exception as e:
            logger.error(f"Failed to create user profile for {user_id}: {e}")

    def create_test_user(self, data: TestUserCreate) -> TestUserCreateResponse:
        if not settings.supabase_service_role_key:
            raise HTTPException(status_code=500, detail="SUPABASE_SERVICE_ROLE_KEY not configured")

        password = generate_test_password(data.role)
        phone = data.phone or generate_test_phone()
        metadata = {
            "full_name": data.name,
            "phone": phone,
            "role": data.role,
            "test_user": True,
            "created_by": "admin-api",
            "created_at": datetime.now(timezone.utc).isoformat(),
            **(data.metadata or {}),
        }

        try:
            auth_response = self.supabase.auth.admin.create_user({
                "email": data.email,
                "password": password,
                "email_confirm": True,
                "user_metadata": metadata,
            })
        except Exception as e:
            logger.error(f"Auth user creation error: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to create user: {str(e)}")

        user = getattr(auth_response, "user", None)
        if not user:
            raise HTTPException(status_code=500, detail="No user returned from auth creation")

        self._ensure_profile(user.id, data, phone)

        login_url = f"{settings.app_base_url.rstrip('/')}/login?" + urlencode(
            {"dev_email": data.email, "dev_password": password}
        )
        logger.info(f"Test {data.role} {data.email} created")
        return TestUserCreateResponse(
            user=TestUserInfo(
                id=user.id,
                email=data.email,
                name=data.name,
                role=data.role,
                created_at=getattr(user, "created_at", None),
            ),
            credentials=TestUserCredentials(email=data.email, password=password),
            login_url=login_url,
        )

    def list_test_users(self) -> TestUserListResponse:
        try:
            result = self.supabase.table("users")\
                .select("id, email, full_name, role, phone, created_at")\
                .like("email", TEST_EMAIL_PATTERN)\
                .order("created_at", desc=True)\
                .limit(50)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch users: {str(e)}")
        users = result.data or []
        return TestUserListResponse(users=users, count=len(users))

    def delete_test_user(self, user_id: str) -> TestUserDeleteResponse:
        try:
            self.supabase.auth.admin.delete_user(user_id)
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to delete user: {str(e)}")
        logger.info(f"Test user {user_id} deleted")
        return TestUserDeleteResponse(message="User deleted successfully")

    def delete_all_test_users(self) -> TestUserDeleteResponse:
        try:
            result = self.supabase.table("users")\
                .select("id, email, full_name")\
                .like("email", TEST_EMAIL_PATTERN)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch users: {str(e)}")

        deleted = []
        errors = []
        for user in result.data or []:
            try:
                self.supabase.auth.admin.delete_user(user["id"])
                deleted.append(user["email"])
            except Exception as e:
                logger.error(f"Error deleting test user {user['email']}: {e}")
                errors.append(f"{user['email']}: {str(e)}")

        message = f"Deleted {len(deleted)} users"
        if errors:
            message += f" with {len(errors)} errors"
        return TestUserDeleteResponse(deleted=deleted, errors=errors, message=message)
