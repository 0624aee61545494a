from supabase import Client
from wayne_rm.modules.dashboard.schemas import (
    DashboardStats, AccessPoint, StatusSlice, VehicleMovementPoint, ReportSummary
)
from wayne_rm.modules.access_logs.schemas import AccessLogResponse
from wayne_rm.modules.access_logs.service import AccessLogService
from wayne_rm.modules.resources.schemas import STATUS_LABELS
from wayne_rm.core.performance import measure_function
from typing import Any, Callable, Dict, List, Optional
from fastapi import HTTPException
from datetime import date, datetime, timedelta, timezone
from collections import Counter
from pydantic import TypeAdapter
import logging

logger = logging.getLogger(__name__)

# PostgREST caps each response (max-rows, 1000 by default); keep pages within it
ROW_PAGE_SIZE = 1000


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


_TIMESTAMP = TypeAdapter(datetime)


def _day_of(value: Any) -> date:
    ts = _TIMESTAMP.validate_python(value)
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc)
    return ts.date()


def _window(days: int, now: datetime) -> List[date]:
    """The last `days` calendar days, oldest first, ending today"""
    today = now.astimezone(timezone.utc).date()
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def _start_of(day: date) -> str:
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc).isoformat()


class DashboardService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _all_rows(self, query_factory: Callable[[], Any]) -> List[Dict[str, Any]]:
        """Every row of a query, read page by page in id order"""
        rows: List[Dict[str, Any]] = []
        start = 0
        while True:
            batch = query_factory()\
                .order("id")\
                .range(start, start + ROW_PAGE_SIZE - 1)\
                .execute().data or []
            rows.extend(batch)
            if len(batch) < ROW_PAGE_SIZE:
                return rows
            start += ROW_PAGE_SIZE

    @staticmethod
    def _exact_count(query) -> int:
        return query.limit(1).execute().count or 0

    def _resource_rows(self, columns: str) -> List[Dict[str, Any]]:
        return self._all_rows(lambda: self.supabase.table("resources").select(columns))

    def _count_profiles(self) -> int:
        return self._exact_count(self.supabase.table("profiles").select("id", count="exact"))

    def _logs_since(self, since: str, columns: str) -> List[Dict[str, Any]]:
        return self._all_rows(
            lambda: self.supabase.table("access_logs").select(columns).gte("timestamp", since)
        )

    @measure_function("dashboard.stats")
    def get_stats(self, include_users: bool, now: Optional[datetime] = None) -> DashboardStats:
        """Headline counters; total_users stays 0 unless the caller may see users"""
        now = now or _utcnow()
        try:
            statuses = Counter(r.get("status") for r in self._resource_rows("status"))
            total_users = self._count_profiles() if include_users else 0
            recent = self._exact_count(
                self.supabase.table("access_logs")
                .select("id", count="exact")
                .gte("timestamp", (now - timedelta(hours=24)).isoformat())
            )
        except Exception as e:
            logger.error(f"Error loading dashboard stats: {e}")
            raise HTTPException(status_code=500, detail="Could not load the dashboard statistics")

        return DashboardStats(
            total_resources=sum(statuses.values()),
            available_resources=statuses["disponivel"],
            resources_in_use=statuses["em_uso"],
            resources_in_maintenance=statuses["manutencao"],
            total_users=total_users,
            recent_activities=recent,
        )

    def get_activity_timeline(self, limit: int = 10) -> List[AccessLogResponse]:
        logs = AccessLogService(self.supabase)
        try:
            result = self.supabase.table("access_logs")\
                .select("id, action, timestamp, notes, user_id, resource_id")\
                .order("timestamp", desc=True)\
                .limit(limit)\
                .execute()
            return logs.with_names(result.data or [])
        except Exception as e:
            logger.error(f"Error loading recent activity: {e}")
            raise HTTPException(status_code=500, detail="Could not load the recent activity")

    @measure_function("dashboard.access_series")
    def get_access_series(self, days: int = 30, now: Optional[datetime] = None) -> List[AccessPoint]:
        """Accesses per day, one point per day including empty days"""
        window = _window(days, now or _utcnow())
        try:
            rows = self._logs_since(_start_of(window[0]), "timestamp")
        except Exception as e:
            logger.error(f"Error loading access series: {e}")
            raise HTTPException(status_code=500, detail="Could not load the access chart")

        counts = Counter(_day_of(r["timestamp"]) for r in rows if r.get("timestamp"))
        return [AccessPoint(date=day.strftime("%d/%m"), accesses=counts[day]) for day in window]

    def get_status_breakdown(self) -> List[StatusSlice]:
        try:
            statuses = Counter(r.get("status") for r in self._resource_rows("status"))
        except Exception as e:
            logger.error(f"Error loading resource status breakdown: {e}")
            raise HTTPException(status_code=500, detail="Could not load the status chart")
        return [
            StatusSlice(status=status, name=STATUS_LABELS.get(status, status), value=count)
            for status, count in statuses.items()
            if status
        ]

    @measure_function("dashboard.vehicle_movement")
    def get_vehicle_movement(self, days: int = 14, now: Optional[datetime] = None) -> List[VehicleMovementPoint]:
        """Checkouts and checkins of vehicles per day; empty when there are no vehicles"""
        window = _window(days, now or _utcnow())
        try:
            vehicles = self._all_rows(
                lambda: self.supabase.table("resources").select("id").eq("type", "veiculo")
            )
            vehicle_ids = [v["id"] for v in vehicles]
            if not vehicle_ids:
                return []
            logs = self._all_rows(
                lambda: self.supabase.table("access_logs")
                .select("id, timestamp, action, resource_id")
                .in_("resource_id", vehicle_ids)
                .gte("timestamp", _start_of(window[0]))
            )
        except Exception as e:
            logger.error(f"Error loading vehicle movement: {e}")
            raise HTTPException(status_code=500, detail="Could not load the vehicle chart")

        checkouts: Counter = Counter()
        checkins: Counter = Counter()
        for log in logs:
            day = _day_of(log["timestamp"])
            if log.get("action") == "checkout":
                checkouts[day] += 1
            elif log.get("action") == "checkin":
                checkins[day] += 1

        return [
            VehicleMovementPoint(date=day.strftime("%d/%m"), checkouts=checkouts[day], checkins=checkins[day])
            for day in window
        ]

    @measure_function("dashboard.report_summary")
    def get_report_summary(self, days: int = 30, now: Optional[datetime] = None) -> ReportSummary:
        """Totals for the management report over the last `days` days"""
        now = now or _utcnow()
        window = _window(days, now)
        try:
            resources = self._resource_rows("status, type")
            total_users = self._count_profiles()
            logs = self._logs_since(_start_of(window[0]), "action, user_id")
        except Exception as e:
            logger.error(f"Error building report summary: {e}")
            raise HTTPException(status_code=500, detail="Could not build the report")

        return ReportSummary(
            period_days=days,
            total_resources=len(resources),
            total_users=total_users,
            active_users=len({log["user_id"] for log in logs if log.get("user_id")}),
            recent_activities=len(logs),
            resources_by_status=dict(Counter(r["status"] for r in resources if r.get("status"))),
            resources_by_type=dict(Counter(r["type"] for r in resources if r.get("type"))),
            activities_by_action=dict(Counter(log["action"] for log in logs if log.get("action"))),
            generated_at=now,
        )
