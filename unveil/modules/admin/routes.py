from fastapi import APIRouter, Depends, HTTPException, Query, status
from unveil.config import settings
from unveil.database.supabase_client import get_service_supabase
from unveil.modules.admin.schemas import (
    TestUserCreate, TestUserCreateResponse, TestUserListResponse, TestUserDeleteResponse
)
from unveil.modules.admin.service import AdminService
from supabase import Client
from typing import Optional


def require_development() -> None:
    if not settings.is_development:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin API only available in development"
        )


router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_development)])


def get_admin_service(supabase: Client = Depends(get_service_supabase)) -> AdminService:
    return AdminService(supabase)


@router.post("/test-users", response_model=TestUserCreateResponse)
async def create_test_user(
    data: TestUserCreate,
    service: AdminService = Depends(get_admin_service)
):
    """Create a confirmed test account and return its credentials"""
    return service.create_test_user(data)


@router.get("/test-users", response_model=TestUserListResponse)
async def list_test_users(service: AdminService = Depends(get_admin_service)):
    """Most recent @test.local accounts"""
    return service.list_test_users()


@router.delete("/test-users", response_model=TestUserDeleteResponse)
async def delete_test_users(
    user_id: Optional[str] = Query(None),
    all: bool = Query(False),
    service: AdminService = Depends(get_admin_service)
):
    """Delete one test account by user_id, or every test account with all=true"""
    if all:
        return service.delete_all_test_users()
    if user_id:
        return service.delete_test_user(user_id)
    raise HTTPException(status_code=400, detail="Must provide user_id or all=true")
