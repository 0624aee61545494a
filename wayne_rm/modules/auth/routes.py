from fastapi import APIRouter, Depends
from wayne_rm.database.supabase_client import get_supabase
from wayne_rm.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    ForgotPasswordRequest, UpdatePasswordRequest, VerifyOtpRequest,
    MessageResponse, CurrentUserResponse, PermissionMatrixResponse
)
from wayne_rm.modules.auth.service import AuthService
from wayne_rm.config.permissions_config import PERMISSION_MATRIX
from wayne_rm.core.dependencies import (
    get_auth_service, get_current_token, get_current_user_id,
    get_access_cache, get_profile, get_user_permissions
)
from supabase import Client
from typing import Dict, Any

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


@router.post("/logout", response_model=MessageResponse)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user(
    current_user: Dict = Depends(get_current_user_id),
    cache: Dict[str, Any] = Depends(get_access_cache),
    supabase: Client = Depends(get_supabase),
):
    """Get current authenticated user, their profile and permissions (for frontend UI)."""
    profile = get_profile(current_user["id"], supabase, cache)
    permissions = get_user_permissions(current_user["id"], supabase, cache)
    return CurrentUserResponse(**current_user, profile=profile, permissions=permissions)


@router.get("/permissions", response_model=PermissionMatrixResponse)
async def get_permissions(
    current_user: Dict = Depends(get_current_user_id)
):
    """Every permission with its description, and the permissions each role grants"""
    return PERMISSION_MATRIX


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    data: ForgotPasswordRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Send a password reset email"""
    return service.forgot_password(data.email)


@router.post("/update-password", response_model=MessageResponse)
async def update_password(
    data: UpdatePasswordRequest,
    current_user: Dict = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service)
):
    """Set a new password for the authenticated user (e.g. after following a reset link)"""
    return service.update_password(current_user["id"], data.password)


@router.post("/verify-otp", response_model=TokenResponse)
async def verify_otp(
    data: VerifyOtpRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Verify an email confirmation / recovery token"""
    return service.verify_otp(data)
