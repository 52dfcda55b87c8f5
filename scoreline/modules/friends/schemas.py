from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from scoreline.modules.users.schemas import UserSummary


class FriendRequestCreate(BaseModel):
    addressee_id: int = Field(..., gt=0)


class FriendshipResponse(BaseModel):
    id: int
    requester_id: int
    addressee_id: int
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FriendshipActionResponse(BaseModel):
    message: str
    friendship: FriendshipResponse


class PendingFriendRequest(FriendshipResponse):
    requester: UserSummary
