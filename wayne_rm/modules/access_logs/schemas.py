from pydantic import BaseModel, model_validator
from typing import Optional, List, Literal
from datetime import datetime

AccessAction = Literal["checkout", "checkin", "maintenance", "solicitacao"]
# Movements recorded by managers; requests go through /resources/{id}/request
RecordedAction = Literal["checkout", "checkin", "maintenance"]

ACTION_LABELS = {
    "checkout": "Retirada",
    "checkin": "Devolução",
    "maintenance": "Manutenção",
    "solicitacao": "Solicitação",
}


class AccessLogCreate(BaseModel):
    resource_id: str
    action: RecordedAction
    notes: Optional[str] = None


class AccessLogResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    resource_id: Optional[str] = None
    user_name: str
    resource_name: str
    resource_type: str
    action: str
    notes: Optional[str] = None
    timestamp: datetime
    action_label: Optional[str] = None

    @model_validator(mode="after")
    def fill_label(self):
        self.action_label = ACTION_LABELS.get(self.action, self.action)
        return self

    class Config:
        from_attributes = True


class MyAccessLogResponse(BaseModel):
    id: str
    resource_id: Optional[str] = None
    resource_name: str
    action: str
    notes: Optional[str] = None
    timestamp: datetime
    action_label: Optional[str] = None

    @model_validator(mode="after")
    def fill_label(self):
        self.action_label = ACTION_LABELS.get(self.action, self.action)
        return self


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class AccessLogPage(BaseModel):
    data: List[AccessLogResponse]
    pagination: Pagination
