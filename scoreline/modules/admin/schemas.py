from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime


class AdminUserResponse(BaseModel):
    user_id: int
    name: str
    email: str
    role: str
    email_verified: bool = False
    created_at: Optional[datetime] = None


class RoleUpdate(BaseModel):
    role: Literal["PLAYER", "VISITOR"]


class VerificationUpdate(BaseModel):
    is_verified: bool


class PlayerPredictionStatus(BaseModel):
    user_id: int
    name: str
    avatar_url: Optional[str] = None
    has_predicted: bool
