from pydantic import BaseModel, EmailStr
from typing import Optional, List, Literal, Dict, Any

from wayne_rm.modules.profiles.schemas import ProfileResponse

OtpType = Literal["signup", "recovery", "invite", "magiclink", "email_change", "email"]


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    user_id: str
    email: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: str


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    message: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class UpdatePasswordRequest(BaseModel):
    password: str


class VerifyOtpRequest(BaseModel):
    email: EmailStr
    token: str
    type: OtpType


class MessageResponse(BaseModel):
    message: str


class CurrentUserResponse(BaseModel):
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = {}
    app_metadata: Dict[str, Any] = {}
    profile: Optional[ProfileResponse] = None
    permissions: List[str] = []


class PermissionInfo(BaseModel):
    name: str
    resource: str
    action: str
    description: str


class PermissionMatrixResponse(BaseModel):
    modules: Dict[str, str]
    permissions: List[PermissionInfo]
    roles: Dict[str, List[str]]
