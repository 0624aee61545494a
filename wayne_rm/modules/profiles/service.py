import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException
from supabase import Client

from wayne_rm.config import settings
from wayne_rm.config.permissions_config import ROLES
from wayne_rm.core.sanitization import sanitize, SanitizationConfig
from wayne_rm.core.validation import ValidationRule, validate_data
from wayne_rm.modules.profiles.schemas import (
    ProfileResponse, ProfileUpdate, ProfileListResponse, AvatarResponse
)

logger = logging.getLogger(__name__)

PROFILE_SCHEMA = {
    "full_name": ValidationRule(max_length=100),
}


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_profile_by_user_id(self, user_id: str) -> Optional[ProfileResponse]:
        """Profile of an auth user, or None when the row does not exist yet"""
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
            if not result.data:
                return None
            return ProfileResponse(**result.data[0])
        except Exception as e:
            logger.error(f"Error fetching profile for {user_id}: {e}")
            return None

    def get_my_profile(self, user_id: str) -> ProfileResponse:
        profile = self.get_profile_by_user_id(user_id)
        if profile is None:
            raise HTTPException(status_code=404, detail="Profile not found")
        return profile

    def list_profiles(self, search: Optional[str] = None, role: Optional[str] = None) -> ProfileListResponse:
        """All profiles newest first, filtered by name/role; role counts cover every profile"""
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
            profiles = [ProfileResponse(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"Error loading users: {e}")
            raise HTTPException(status_code=500, detail="Could not load the user list")

        role_counts = {r: 0 for r in ROLES}
        for p in profiles:
            role_counts[p.role] = role_counts.get(p.role, 0) + 1

        filtered = profiles
        if search:
            term = search.lower()
            filtered = [p for p in filtered if p.full_name and term in p.full_name.lower()]
        if role:
            filtered = [p for p in filtered if p.role == role]

        return ProfileListResponse(data=filtered, total=len(profiles), role_counts=role_counts)

    def update_my_profile(self, user_id: str, data: ProfileUpdate) -> ProfileResponse:
        full_name = sanitize(data.full_name or "", "text", SanitizationConfig(trim=True)) or None
        validation = validate_data({"full_name": full_name}, PROFILE_SCHEMA)
        if not validation.is_valid:
            raise HTTPException(status_code=400, detail=[e.model_dump() for e in validation.errors])
        try:
            result = self.supabase.table("profiles")\
                .update({
                    "full_name": full_name,
                    "updated_at": datetime.now(timezone.utc).isoformat()
                })\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")
            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating profile for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Could not update the profile")

    def update_role(self, user_id: str, role: str) -> ProfileResponse:
        try:
            result = self.supabase.table("profiles")\
                .update({"role": role, "updated_at": datetime.now(timezone.utc).isoformat()})\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="User not found")
            logger.info(f"Role of user {user_id} changed to {role}")
            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating role for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Could not update the user role")

    def upload_avatar(self, user_id: str, filename: str, content_type: Optional[str], content: bytes) -> AvatarResponse:
        """Store an image in the avatars bucket and point the profile at its public URL"""
        if not content:
            raise HTTPException(status_code=400, detail="Select an image to upload")
        if not content_type or not content_type.startswith("image/"):
            raise HTTPException(status_code=400, detail="Only image files are allowed")
        if len(content) > settings.avatar_max_bytes:
            raise HTTPException(
                status_code=400,
                detail=f"Image must be at most {settings.avatar_max_bytes // (1024 * 1024)}MB"
            )

        safe_name = sanitize(filename or "", "filename")
        ext = safe_name.rsplit(".", 1)[-1].lower() if "." in safe_name else "img"
        path = f"{user_id}/{uuid.uuid4().hex}.{ext}"

        try:
            bucket = self.supabase.storage.from_(settings.avatars_bucket)
            bucket.upload(path, content, {"content-type": content_type})
            avatar_url = bucket.get_public_url(path)
        except Exception as e:
            logger.error(f"Avatar upload failed for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Could not upload the avatar")

        self._set_avatar_url(user_id, avatar_url)
        return AvatarResponse(avatar_url=avatar_url, message="Avatar updated")

    def remove_avatar(self, user_id: str) -> AvatarResponse:
        self._set_avatar_url(user_id, None)
        return AvatarResponse(avatar_url=None, message="Avatar removed")

    def _set_avatar_url(self, user_id: str, avatar_url: Optional[str]):
        try:
            result = self.supabase.table("profiles")\
                .update({"avatar_url": avatar_url})\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error saving avatar for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Could not update the avatar")
        if not result.data:
            raise HTTPException(status_code=404, detail="Profile not found")
