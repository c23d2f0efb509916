from fastapi import APIRouter, Depends, Security
from supabase import Client
from fastapi.security import HTTPAuthorizationCredentials
from unveil.modules.auth.schemas import (
    LoginRequest, MagicLinkRequest, RegisterRequest, TokenResponse, RegisterResponse
)
from unveil.modules.auth.service import AuthService, extract_bearer_token
from unveil.core.dependencies import get_auth_service, get_current_user, security
from unveil.database.supabase_client import get_service_supabase
from typing import Dict, Optional

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/magic-link", status_code=202)
async def magic_link(
    request: MagicLinkRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Email a passwordless sign in link"""
    service.send_magic_link(request)
    return {"message": "Check your email for a sign in link"}


@router.post("/logout", status_code=200)
async def logout(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    service: AuthService = Depends(get_auth_service),
    admin_supabase: Client = Depends(get_service_supabase)
):
    """Logout and revoke the session"""
    token = extract_bearer_token(f"Bearer {credentials.credentials}" if credentials else None)
    service.logout(token, admin_supabase)
    return {"message": "Logged out successfully"}


@router.get("/me")
async def get_me(current_user: Dict = Depends(get_current_user)):
    """Get current authenticated user"""
    return current_user
