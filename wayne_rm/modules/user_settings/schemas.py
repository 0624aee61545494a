from pydantic import BaseModel, Field
from typing import Optional, List, Literal, Dict, Any
from datetime import datetime

DEFAULT_WIDGETS = ["stats", "access_chart", "resource_status", "vehicle_movement", "activity_timeline"]


class DashboardLayout(BaseModel):
    widgets: List[str] = Field(default_factory=lambda: list(DEFAULT_WIDGETS))
    layout: Literal["grid", "list"] = "grid"
    columns: int = Field(2, ge=1, le=4)


class ReportPreferences(BaseModel):
    default_format: Literal["pdf", "excel", "csv"] = "pdf"
    include_charts: bool = True
    date_range: int = Field(30, ge=1, le=365)
    auto_schedule: bool = False


class SettingsUpdate(BaseModel):
    theme: Literal["light", "dark", "system"] = "dark"
    language: Literal["pt", "en", "es"] = "pt"
    notifications_enabled: bool = True
    email_notifications: bool = True
    push_notifications: bool = True
    auto_export_enabled: bool = False
    export_frequency: Literal["daily", "weekly", "monthly"] = "weekly"
    dashboard_layout: DashboardLayout = Field(default_factory=DashboardLayout)
    report_preferences: ReportPreferences = Field(default_factory=ReportPreferences)


class SettingsResponse(SettingsUpdate):
    id: Optional[str] = None
    user_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ExportResponse(BaseModel):
    profile: Optional[Dict[str, Any]] = None
    resources: List[Dict[str, Any]]
    access_logs: List[Dict[str, Any]]
    settings: SettingsResponse
    export_date: datetime
    export_type: Literal["gdpr", "backup"] = "gdpr"


def default_settings(user_id: str) -> SettingsResponse:
    return SettingsResponse(user_id=user_id)
