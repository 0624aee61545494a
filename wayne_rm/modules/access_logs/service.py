from supabase import Client
from wayne_rm.modules.access_logs.schemas import (
    AccessLogCreate, AccessLogResponse, MyAccessLogResponse, AccessLogPage, Pagination
)
from wayne_rm.core.sanitization import preset
from typing import List, Optional, Dict, Any, Tuple
from fastapi import HTTPException
from datetime import date, datetime, time
import logging
import math

logger = logging.getLogger(__name__)

PAGE_SIZE = 10

FALLBACK_USER = "Usuário"
FALLBACK_RESOURCE = "Recurso"
FALLBACK_TYPE = "Tipo"


def _contains_pattern(term: str) -> str:
    """ILIKE substring pattern; % and _ in the term match literally"""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class AccessLogService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _user_names(self, user_ids: List[str]) -> Dict[str, str]:
        if not user_ids:
            return {}
        result = self.supabase.table("profiles")\
            .select("user_id, full_name")\
            .in_("user_id", user_ids)\
            .execute()
        return {
            row["user_id"]: row["full_name"]
            for row in result.data or []
            if row.get("user_id") and row.get("full_name")
        }

    def _resource_info(self, resource_ids: List[str]) -> Dict[str, Tuple[str, str]]:
        if not resource_ids:
            return {}
        result = self.supabase.table("resources")\
            .select("id, name, type")\
            .in_("id", resource_ids)\
            .execute()
        return {
            row["id"]: (row["name"], row["type"])
            for row in result.data or []
            if row.get("id") and row.get("name") and row.get("type")
        }

    def with_names(self, rows: List[Dict[str, Any]]) -> List[AccessLogResponse]:
        """Attach user and resource names looked up in separate queries"""
        user_ids = sorted({r["user_id"] for r in rows if r.get("user_id")})
        resource_ids = sorted({r["resource_id"] for r in rows if r.get("resource_id")})
        users = self._user_names(user_ids)
        resources = self._resource_info(resource_ids)

        logs = []
        for row in rows:
            name, type_ = resources.get(row.get("resource_id"), (FALLBACK_RESOURCE, FALLBACK_TYPE))
            logs.append(AccessLogResponse(
                id=row["id"],
                user_id=row.get("user_id"),
                resource_id=row.get("resource_id"),
                user_name=users.get(row.get("user_id"), FALLBACK_USER),
                resource_name=name,
                resource_type=type_,
                action=row["action"],
                notes=row.get("notes"),
                timestamp=row["timestamp"],
            ))
        return logs

    def _search_filter(self, term: str) -> Optional[str]:
        """PostgREST or-filter restricting logs to users/resources whose name matches"""
        pattern = _contains_pattern(term)
        profiles = self.supabase.table("profiles")\
            .select("user_id")\
            .ilike("full_name", pattern)\
            .execute()
        resources = self.supabase.table("resources")\
            .select("id")\
            .ilike("name", pattern)\
            .execute()
        user_ids = [r["user_id"] for r in profiles.data or [] if r.get("user_id")]
        resource_ids = [r["id"] for r in resources.data or [] if r.get("id")]

        clauses = []
        if user_ids:
            clauses.append(f"user_id.in.({','.join(user_ids)})")
        if resource_ids:
            clauses.append(f"resource_id.in.({','.join(resource_ids)})")
        return ",".join(clauses) or None

    def list_logs(
        self,
        search: Optional[str] = None,
        action: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        page: int = 1
    ) -> AccessLogPage:
        """One page of logs, newest first, with the exact number of matching rows"""
        page = max(page, 1)
        empty = AccessLogPage(
            data=[],
            pagination=Pagination(page=page, limit=PAGE_SIZE, total=0, total_pages=0)
        )
        try:
            query = self.supabase.table("access_logs")\
                .select("id, action, timestamp, notes, user_id, resource_id", count="exact")

            if search:
                or_filter = self._search_filter(search)
                if or_filter is None:
                    return empty
                query = query.or_(or_filter)

            if action:
                query = query.eq("action", action)
            if date_from:
                query = query.gte("timestamp", datetime.combine(date_from, time.min).isoformat())
            if date_to:
                query = query.lte("timestamp", datetime.combine(date_to, time(23, 59, 59)).isoformat())

            start = (page - 1) * PAGE_SIZE
            result = query.order("timestamp", desc=True)\
                .range(start, start + PAGE_SIZE - 1)\
                .execute()

            total = result.count or 0
            return AccessLogPage(
                data=self.with_names(result.data or []),
                pagination=Pagination(
                    page=page,
                    limit=PAGE_SIZE,
                    total=total,
                    total_pages=math.ceil(total / PAGE_SIZE)
                )
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error loading access logs: {e}")
            raise HTTPException(status_code=500, detail="Could not load the access logs")

    def list_my_logs(self, user_id: str, limit: int = 10) -> List[MyAccessLogResponse]:
        try:
            result = self.supabase.table("access_logs")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("timestamp", desc=True)\
                .limit(limit)\
                .execute()
            rows = result.data or []
            resources = self._resource_info(sorted({r["resource_id"] for r in rows if r.get("resource_id")}))
        except Exception as e:
            logger.error(f"Error loading access logs of {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Could not load your access history")

        return [
            MyAccessLogResponse(
                id=row["id"],
                resource_id=row.get("resource_id"),
                resource_name=resources.get(row.get("resource_id"), (FALLBACK_RESOURCE, FALLBACK_TYPE))[0],
                action=row["action"],
                notes=row.get("notes"),
                timestamp=row["timestamp"],
            )
            for row in rows
        ]

    def create_log(self, log_data: AccessLogCreate, user_id: str) -> AccessLogResponse:
        """Record a checkout, checkin or maintenance movement"""
        notes = preset("note", log_data.notes) if log_data.notes else None
        try:
            resource = self.supabase.table("resources")\
                .select("id")\
                .eq("id", log_data.resource_id)\
                .limit(1)\
                .execute()
            if not resource.data:
                raise HTTPException(status_code=404, detail="Resource not found")

            result = self.supabase.table("access_logs").insert({
                "user_id": user_id,
                "resource_id": log_data.resource_id,
                "action": log_data.action,
                "notes": notes or None,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Could not record the access")
            logger.info(f"Access log {log_data.action} recorded for resource {log_data.resource_id}")
            return self.with_names(result.data)[0]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error recording access log: {e}")
            raise HTTPException(status_code=500, detail="Could not record the access")
