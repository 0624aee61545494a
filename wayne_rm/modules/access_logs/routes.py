from fastapi import APIRouter, Depends, HTTPException, Query
from wayne_rm.database.supabase_client import get_supabase
from wayne_rm.modules.access_logs.schemas import (
    AccessLogCreate, AccessLogResponse, MyAccessLogResponse, AccessLogPage, AccessAction
)
from wayne_rm.modules.access_logs.service import AccessLogService
from wayne_rm.core.dependencies import require_permission
from wayne_rm.core.sanitization import preset
from wayne_rm.core.validation import validate_date_range
from supabase import Client
from typing import List, Dict, Optional
from datetime import date

router = APIRouter(prefix="/access-logs", tags=["access-logs"])


def get_access_log_service(supabase: Client = Depends(get_supabase)) -> AccessLogService:
    return AccessLogService(supabase)


@router.get("", response_model=AccessLogPage)
async def list_access_logs(
    search: Optional[str] = None,
    action: Optional[AccessAction] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    page: int = Query(1, ge=1),
    user_data: Dict = Depends(require_permission("access_logs:read")),
    service: AccessLogService = Depends(get_access_log_service)
):
    """Paginated access history (10 per page) with search, action and date filters"""
    if date_from and date_to:
        error = validate_date_range(date_from, date_to)
        if error:
            raise HTTPException(status_code=400, detail=error)
    return service.list_logs(
        search=preset("query", search) if search else None,
        action=action,
        date_from=date_from,
        date_to=date_to,
        page=page
    )


@router.get("/me", response_model=List[MyAccessLogResponse])
async def list_my_access_logs(
    limit: int = Query(10, ge=1, le=100),
    user_data: Dict = Depends(require_permission("access_logs:read_own")),
    service: AccessLogService = Depends(get_access_log_service)
):
    """The caller's most recent movements and requests"""
    return service.list_my_logs(user_data["id"], limit)


@router.post("", response_model=AccessLogResponse, status_code=201)
async def create_access_log(
    log_data: AccessLogCreate,
    user_data: Dict = Depends(require_permission("access_logs:create")),
    service: AccessLogService = Depends(get_access_log_service)
):
    return service.create_log(log_data, user_data["id"])
