from supabase import Client
from wayne_rm.modules.user_settings.schemas import (
    SettingsUpdate, SettingsResponse, ExportResponse, default_settings
)
from typing import Dict, Any
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


def _from_row(row: Dict[str, Any]) -> SettingsResponse:
    # Null columns fall back to the defaults
    return SettingsResponse(**{k: v for k, v in row.items() if v is not None})


class UserSettingsService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_settings(self, user_id: str) -> SettingsResponse:
        try:
            result = self.supabase.table("user_settings")\
                .select("*")\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error loading settings for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Could not load the settings")
        if not result.data:
            return default_settings(user_id)
        return _from_row(result.data[0])

    def save_settings(self, user_id: str, data: SettingsUpdate) -> SettingsResponse:
        """Create or replace the caller's settings row"""
        try:
            result = self.supabase.table("user_settings")\
                .upsert({
                    **data.model_dump(),
                    "user_id": user_id,
                    "updated_at": datetime.now(timezone.utc).isoformat()
                }, on_conflict="user_id")\
                .execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Could not save the settings")
            logger.info(f"Settings saved for {user_id}")
            return _from_row(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error saving settings for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Could not save the settings")

    def export_data(self, user_id: str) -> ExportResponse:
        """Personal data export: profile, own access logs, the resources they touch, settings"""
        settings = self.get_settings(user_id)
        try:
            profile = self.supabase.table("profiles")\
                .select("*")\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
            logs = self.supabase.table("access_logs")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("timestamp", desc=True)\
                .execute()
            access_logs = logs.data or []

            resource_ids = sorted({r["resource_id"] for r in access_logs if r.get("resource_id")})
            resources = []
            if resource_ids:
                resources = self.supabase.table("resources")\
                    .select("*")\
                    .in_("id", resource_ids)\
                    .execute().data or []
        except Exception as e:
            logger.error(f"Error exporting data for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Could not export your data")

        logger.info(f"Data export generated for {user_id}")
        return ExportResponse(
            profile=profile.data[0] if profile.data else None,
            resources=resources,
            access_logs=access_logs,
            settings=settings,
            export_date=datetime.now(timezone.utc),
            export_type="gdpr"
        )
