from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket
from wayne_rm.database.supabase_client import get_supabase
from wayne_rm.modules.alerts.schemas import (
    AlertResponse, AlertListResponse, UnreadCountResponse, MarkAllReadResponse, AlertFilter
)
from wayne_rm.modules.alerts.service import AlertService
from wayne_rm.modules.alerts.feed import (
    run_feed, get_subscription_factory, SubscriptionFactory, POLICY_VIOLATION
)
from wayne_rm.modules.auth.service import AuthService
from wayne_rm.core.dependencies import require_permission, get_auth_service
from supabase import Client
from typing import Dict
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/alerts", tags=["alerts"])


def get_alert_service(supabase: Client = Depends(get_supabase)) -> AlertService:
    return AlertService(supabase)


@router.get("", response_model=AlertListResponse)
async def list_alerts(
    filter: AlertFilter = "all",
    user_data: Dict = Depends(require_permission("alerts:read")),
    service: AlertService = Depends(get_alert_service)
):
    """The caller's alerts, newest first"""
    return service.list_alerts(user_data["id"], filter)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    user_data: Dict = Depends(require_permission("alerts:read")),
    service: AlertService = Depends(get_alert_service)
):
    return service.get_unread_count(user_data["id"])


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    user_data: Dict = Depends(require_permission("alerts:update")),
    service: AlertService = Depends(get_alert_service)
):
    """Mark every unread alert as read"""
    return service.mark_all_read(user_data["id"])


@router.post("/{alert_id}/read", response_model=AlertResponse)
async def mark_read(
    alert_id: str,
    user_data: Dict = Depends(require_permission("alerts:update")),
    service: AlertService = Depends(get_alert_service)
):
    return service.mark_read(alert_id, user_data["id"])


@router.websocket("/feed")
async def alerts_feed(
    websocket: WebSocket,
    token: str = Query(...),
    supabase: Client = Depends(get_supabase),
    auth_service: AuthService = Depends(get_auth_service),
    subscription_factory: SubscriptionFactory = Depends(get_subscription_factory)
):
    """Push the caller's unread alert count whenever their alerts change"""
    try:
        user = auth_service.get_current_user(token)
    except HTTPException as e:
        logger.info(f"Alert feed rejected: {e.detail}")
        await websocket.close(code=POLICY_VIOLATION)
        return

    await websocket.accept()
    try:
        await run_feed(websocket, user["id"], token, supabase, subscription_factory)
    except Exception as e:
        logger.error(f"Alert feed failed for {user['id']}: {e}")
        await websocket.close(code=1011)
