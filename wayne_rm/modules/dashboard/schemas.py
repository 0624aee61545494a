from pydantic import BaseModel
from typing import List, Dict
from datetime import datetime
from wayne_rm.core.performance import PerformanceStats, PerformanceMetric


class DashboardStats(BaseModel):
    total_resources: int = 0
    available_resources: int = 0
    resources_in_use: int = 0
    resources_in_maintenance: int = 0
    total_users: int = 0
    recent_activities: int = 0


class AccessPoint(BaseModel):
    date: str
    accesses: int


class StatusSlice(BaseModel):
    status: str
    name: str
    value: int


class VehicleMovementPoint(BaseModel):
    date: str
    checkouts: int
    checkins: int


class ReportSummary(BaseModel):
    period_days: int
    total_resources: int
    total_users: int
    active_users: int
    recent_activities: int
    resources_by_status: Dict[str, int]
    resources_by_type: Dict[str, int]
    activities_by_action: Dict[str, int]
    generated_at: datetime


class PerformanceReport(BaseModel):
    requests: PerformanceStats
    slow_routes: List[str]
    recent: List[PerformanceMetric]
