"""
Core dependencies for route protection and permission checking
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from wayne_rm.database.supabase_client import get_supabase, get_service_supabase
from wayne_rm.modules.auth.service import AuthService
from wayne_rm.modules.profiles.schemas import ProfileResponse
from wayne_rm.modules.profiles.service import ProfileService
from wayne_rm.config.permissions_config import get_role_permissions, ROLE_EMPLOYEE, ROLE_MANAGER, ROLE_ADMIN
from supabase import Client
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for access data (profile, role, permission names)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    service_client: Optional[Client] = Depends(get_service_supabase),
) -> AuthService:
    return AuthService(supabase, service_client)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_current_user_id(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    return auth_service.get_current_user(token)


def get_profile(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> Optional[ProfileResponse]:
    """Profile of the user. Uses request-scoped cache when provided."""
    if cache is not None and "profile" in cache:
        return cache["profile"]
    profile = ProfileService(supabase).get_profile_by_user_id(user_id)
    if cache is not None:
        cache["profile"] = profile
    return profile


def get_user_role(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> str:
    """Role from profiles.role; users without a profile row are treated as employees."""
    profile = get_profile(user_id, supabase, cache)
    return profile.role if profile else ROLE_EMPLOYEE


def get_user_permissions(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> List[str]:
    """Get all permissions for a user through their role. Populates request-scoped cache when provided."""
    if cache is not None and "permission_names" in cache:
        return cache["permission_names"]
    names = get_role_permissions(get_user_role(user_id, supabase, cache))
    if cache is not None:
        cache["permission_names"] = names
    return names


def is_manager_or_admin(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> bool:
    return get_user_role(user_id, supabase, cache) in (ROLE_MANAGER, ROLE_ADMIN)


def require_permission(required_permission: str):
    """Factory function to create permission check dependency"""
    def check_permission(
        request: Request,
        user_data: dict = Depends(get_current_user_id),
        supabase: Client = Depends(get_supabase)
    ) -> dict:
        """Dependency to check if user has required permission"""
        cache = _get_request_cache(request)
        user_permissions = get_user_permissions(user_data["id"], supabase, cache)
        if required_permission not in user_permissions:
            logger.info(f"User {user_data['id']} denied {required_permission}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {required_permission}"
            )
        return user_data
    return check_permission


def get_access_cache(request: Request) -> Dict[str, Any]:
    """Dependency that returns request-scoped access cache (populated by require_permission when used)."""
    return _get_request_cache(request)
