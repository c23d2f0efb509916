from fastapi import APIRouter, Depends, Query
from unveil.database.supabase_client import get_supabase
from unveil.modules.users.schemas import UserUpdate, UserResponse, PublicProfileResponse
from unveil.modules.users.service import UserService
from unveil.core.dependencies import get_current_user
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(supabase: Client = Depends(get_supabase)) -> UserService:
    return UserService(supabase)


@router.get("/me", response_model=UserResponse)
async def get_my_profile(
    user_data: Dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """Profile row of the signed-in user"""
    return service.get_user_by_id(user_data["id"])


@router.put("/me", response_model=UserResponse)
async def update_my_profile(
    user_update: UserUpdate,
    user_data: Dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """Update name, avatar or phone"""
    return service.update_user(user_data["id"], user_update)


@router.get("/search", response_model=List[UserResponse])
async def search_users(
    q: str = Query(..., min_length=1),
    limit: int = Query(10, ge=1, le=50),
    user_data: Dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    return service.search_users(q, limit)


@router.get("/{user_id}/public", response_model=PublicProfileResponse)
async def get_public_profile(
    user_id: str,
    user_data: Dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """Public name and avatar of any user"""
    return service.get_public_profile(user_id)
