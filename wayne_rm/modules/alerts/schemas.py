from pydantic import BaseModel
from typing import Optional, List, Literal
from datetime import datetime

AlertType = Literal["info", "warning", "error", "success"]
AlertStatus = Literal["read", "unread"]
AlertFilter = Literal["all", "unread"]


class AlertResponse(BaseModel):
    id: str
    user_id: str
    message: str
    type: str
    status: str
    created_at: datetime
    read_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AlertListResponse(BaseModel):
    data: List[AlertResponse]
    unread_count: int


class UnreadCountResponse(BaseModel):
    unread_count: int
    label: str


class MarkAllReadResponse(BaseModel):
    updated: int


def unread_label(count: int) -> str:
    """Badge text for an unread count"""
    return "99+" if count > 99 else str(count)
