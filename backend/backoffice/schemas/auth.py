from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class AdminUserRead(BaseModel):
    id: int
    username: str
    email: str
    role: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    message: str
    token: str
    user: AdminUserRead


class CurrentUserResponse(BaseModel):
    user: AdminUserRead


class ChangePasswordRequest(BaseModel):
    current_password: Optional[str] = None
    new_password: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
