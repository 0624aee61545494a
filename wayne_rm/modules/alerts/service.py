from supabase import Client
from wayne_rm.modules.alerts.schemas import (
    AlertResponse, AlertListResponse, UnreadCountResponse, MarkAllReadResponse, unread_label
)
from typing import Optional
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


class AlertService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _unread_ids(self, user_id: str):
        result = self.supabase.table("alerts")\
            .select("id")\
            .eq("user_id", user_id)\
            .eq("status", "unread")\
            .execute()
        return [row["id"] for row in result.data or []]

    def list_alerts(self, user_id: str, filter: Optional[str] = "all") -> AlertListResponse:
        try:
            query = self.supabase.table("alerts")\
                .select("*")\
                .eq("user_id", user_id)
            if filter == "unread":
                query = query.eq("status", "unread")
            result = query.order("created_at", desc=True).execute()
            alerts = [AlertResponse(**row) for row in result.data or []]
            unread = alerts if filter == "unread" else [a for a in alerts if a.status == "unread"]
            return AlertListResponse(data=alerts, unread_count=len(unread))
        except Exception as e:
            logger.error(f"Error loading alerts for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Could not load the alerts")

    def unread_count(self, user_id: str) -> int:
        try:
            return len(self._unread_ids(user_id))
        except Exception as e:
            logger.error(f"Error counting unread alerts for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Could not load the alerts")

    def get_unread_count(self, user_id: str) -> UnreadCountResponse:
        count = self.unread_count(user_id)
        return UnreadCountResponse(unread_count=count, label=unread_label(count))

    def mark_read(self, alert_id: str, user_id: str) -> AlertResponse:
        """Mark one of the caller's alerts as read"""
        try:
            result = self.supabase.table("alerts")\
                .update({
                    "status": "read",
                    "read_at": datetime.now(timezone.utc).isoformat()
                })\
                .eq("id", alert_id)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Alert not found")
            return AlertResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error marking alert {alert_id} as read: {e}")
            raise HTTPException(status_code=500, detail="Could not update the alert")

    def mark_all_read(self, user_id: str) -> MarkAllReadResponse:
        """Mark every unread alert of the caller as read in a single update"""
        try:
            unread_ids = self._unread_ids(user_id)
            if not unread_ids:
                return MarkAllReadResponse(updated=0)
            self.supabase.table("alerts")\
                .update({
                    "status": "read",
                    "read_at": datetime.now(timezone.utc).isoformat()
                })\
                .in_("id", unread_ids)\
                .execute()
            logger.info(f"Marked {len(unread_ids)} alerts as read for {user_id}")
            return MarkAllReadResponse(updated=len(unread_ids))
        except Exception as e:
            logger.error(f"Error marking all alerts as read for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Could not update the alerts")
