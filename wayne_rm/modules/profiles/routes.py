from fastapi import APIRouter, Depends, File, UploadFile
from wayne_rm.database.supabase_client import get_supabase
from wayne_rm.modules.profiles.schemas import (
    ProfileResponse, ProfileUpdate, RoleUpdate, ProfileListResponse, AvatarResponse, Role
)
from wayne_rm.modules.profiles.service import ProfileService
from wayne_rm.core.dependencies import require_permission
from wayne_rm.core.sanitization import preset
from wayne_rm.config import settings
from supabase import Client
from typing import Dict, Optional

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.get("", response_model=ProfileListResponse)
async def list_profiles(
    search: Optional[str] = None,
    role: Optional[Role] = None,
    user_data: Dict = Depends(require_permission("users:read")),
    service: ProfileService = Depends(get_profile_service)
):
    """List users with per-role counts (managers and admins)"""
    return service.list_profiles(search=preset("query", search) if search else None, role=role)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    user_data: Dict = Depends(require_permission("profiles:read_own")),
    service: ProfileService = Depends(get_profile_service)
):
    """Get the authenticated user's profile"""
    return service.get_my_profile(user_data["id"])


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(
    data: ProfileUpdate,
    user_data: Dict = Depends(require_permission("profiles:update_own")),
    service: ProfileService = Depends(get_profile_service)
):
    """Update the authenticated user's name"""
    return service.update_my_profile(user_data["id"], data)


@router.post("/me/avatar", response_model=AvatarResponse)
async def upload_avatar(
    file: UploadFile = File(...),
    user_data: Dict = Depends(require_permission("profiles:update_own")),
    service: ProfileService = Depends(get_profile_service)
):
    """Upload a new avatar image (max 2MB)"""
    # Never buffer more than one byte past the limit
    content = await file.read(settings.avatar_max_bytes + 1)
    return service.upload_avatar(user_data["id"], file.filename, file.content_type, content)


@router.delete("/me/avatar", response_model=AvatarResponse)
async def remove_avatar(
    user_data: Dict = Depends(require_permission("profiles:update_own")),
    service: ProfileService = Depends(get_profile_service)
):
    """Remove the avatar"""
    return service.remove_avatar(user_data["id"])


@router.put("/{user_id}/role", response_model=ProfileResponse)
async def update_role(
    user_id: str,
    data: RoleUpdate,
    user_data: Dict = Depends(require_permission("users:update")),
    service: ProfileService = Depends(get_profile_service)
):
    """Change a user's role (admins only)"""
    return service.update_role(user_id, data.role)
