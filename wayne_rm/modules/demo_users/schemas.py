from pydantic import BaseModel
from typing import Optional, List, Literal

ProvisionStatus = Literal[
    "created", "profile_updated", "profile_update_error", "user_created_profile_error", "error"
]


class DemoUser(BaseModel):
    email: str
    full_name: str
    role: str


class DemoUserResult(BaseModel):
    email: str
    status: ProvisionStatus
    error: Optional[str] = None


class ProvisionResponse(BaseModel):
    success: bool
    message: str
    results: List[DemoUserResult]
