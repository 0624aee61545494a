from pydantic import BaseModel
from typing import Optional, List, Literal, Dict
from datetime import datetime

Role = Literal["funcionario", "gerente", "admin"]


class ProfileResponse(BaseModel):
    id: str
    user_id: str
    full_name: Optional[str] = None
    role: Role = "funcionario"
    avatar_url: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None


class RoleUpdate(BaseModel):
    role: Role


class ProfileListResponse(BaseModel):
    data: List[ProfileResponse]
    total: int
    role_counts: Dict[str, int]


class AvatarResponse(BaseModel):
    avatar_url: Optional[str] = None
    message: str
