from fastapi import APIRouter, Depends
from wayne_rm.database.supabase_client import get_supabase
from wayne_rm.modules.user_settings.schemas import SettingsUpdate, SettingsResponse, ExportResponse
from wayne_rm.modules.user_settings.service import UserSettingsService
from wayne_rm.core.dependencies import require_permission
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/settings", tags=["settings"])


def get_settings_service(supabase: Client = Depends(get_supabase)) -> UserSettingsService:
    return UserSettingsService(supabase)


@router.get("", response_model=SettingsResponse)
async def get_settings(
    user_data: Dict = Depends(require_permission("settings:read")),
    service: UserSettingsService = Depends(get_settings_service)
):
    """The caller's preferences (defaults when never saved)"""
    return service.get_settings(user_data["id"])


@router.put("", response_model=SettingsResponse)
async def save_settings(
    data: SettingsUpdate,
    user_data: Dict = Depends(require_permission("settings:update")),
    service: UserSettingsService = Depends(get_settings_service)
):
    return service.save_settings(user_data["id"], data)


@router.get("/export", response_model=ExportResponse)
async def export_data(
    user_data: Dict = Depends(require_permission("settings:read")),
    service: UserSettingsService = Depends(get_settings_service)
):
    """Download everything stored about the caller"""
    return service.export_data(user_data["id"])
