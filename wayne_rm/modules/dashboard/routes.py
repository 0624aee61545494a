from fastapi import APIRouter, Depends, Query
from wayne_rm.database.supabase_client import get_supabase
from wayne_rm.modules.dashboard.schemas import (
    DashboardStats, AccessPoint, StatusSlice, VehicleMovementPoint, ReportSummary, PerformanceReport
)
from wayne_rm.modules.dashboard.service import DashboardService
from wayne_rm.modules.access_logs.schemas import AccessLogResponse
from wayne_rm.core.dependencies import require_permission, is_manager_or_admin, get_access_cache
from wayne_rm.core.performance import performance_monitor
from supabase import Client
from typing import List, Dict, Any

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def get_dashboard_service(supabase: Client = Depends(get_supabase)) -> DashboardService:
    return DashboardService(supabase)


@router.get("/stats", response_model=DashboardStats)
async def get_stats(
    user_data: Dict = Depends(require_permission("dashboard:read")),
    cache: Dict[str, Any] = Depends(get_access_cache),
    supabase: Client = Depends(get_supabase),
    service: DashboardService = Depends(get_dashboard_service)
):
    """Resource counters, user total (managers/admins) and last 24h activity"""
    include_users = is_manager_or_admin(user_data["id"], supabase, cache)
    return service.get_stats(include_users=include_users)


@router.get("/activity", response_model=List[AccessLogResponse])
async def get_activity_timeline(
    user_data: Dict = Depends(require_permission("dashboard:read")),
    service: DashboardService = Depends(get_dashboard_service)
):
    return service.get_activity_timeline()


@router.get("/access-series", response_model=List[AccessPoint])
async def get_access_series(
    days: int = Query(30, ge=1, le=365),
    user_data: Dict = Depends(require_permission("dashboard:read")),
    service: DashboardService = Depends(get_dashboard_service)
):
    """Daily accesses for the access chart"""
    return service.get_access_series(days)


@router.get("/resource-status", response_model=List[StatusSlice])
async def get_resource_status(
    user_data: Dict = Depends(require_permission("dashboard:read")),
    service: DashboardService = Depends(get_dashboard_service)
):
    return service.get_status_breakdown()


@router.get("/vehicle-movement", response_model=List[VehicleMovementPoint])
async def get_vehicle_movement(
    days: int = Query(14, ge=1, le=365),
    user_data: Dict = Depends(require_permission("dashboard:read")),
    service: DashboardService = Depends(get_dashboard_service)
):
    """Vehicle checkouts/checkins per day"""
    return service.get_vehicle_movement(days)


@router.get("/reports/summary", response_model=ReportSummary)
async def get_report_summary(
    days: int = Query(30, ge=1, le=365),
    user_data: Dict = Depends(require_permission("reports:read")),
    service: DashboardService = Depends(get_dashboard_service)
):
    """Management report totals (managers and admins)"""
    return service.get_report_summary(days)


@router.get("/performance", response_model=PerformanceReport)
async def get_performance(
    user_data: Dict = Depends(require_permission("system:read"))
):
    """Request timings collected by the timing middleware (admins only)"""
    return PerformanceReport(
        requests=performance_monitor.get_stats(),
        slow_routes=performance_monitor.get_slow_components(),
        recent=performance_monitor.metrics[-20:]
    )
