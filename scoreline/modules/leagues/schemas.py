from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from scoreline.modules.users.schemas import UserSummary


class LeagueCreate(BaseModel):
    name: str
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("League name is required.")
        if len(v) > 100:
            raise ValueError("League name cannot exceed 100 characters.")
        return v

    @field_validator("description")
    @classmethod
    def check_description(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if len(v) > 500:
            raise ValueError("Description cannot exceed 500 characters.")
        return v.strip() or None


class LeagueCreator(BaseModel):
    user_id: int
    name: str


class LeagueResponse(BaseModel):
    league_id: int
    name: str
    description: Optional[str] = None
    invite_code: Optional[str] = None
    creator_user_id: int
    created_at: Optional[datetime] = None


class MyLeague(BaseModel):
    league_id: int
    name: str
    description: Optional[str] = None
    invite_code: Optional[str] = None
    creator: Optional[LeagueCreator] = None
    my_league_role: str


class LeagueMember(BaseModel):
    membership_id: int
    user_id: int
    role: str
    status: str
    joined_at: Optional[datetime] = None
    user: UserSummary


class LeagueDetails(BaseModel):
    league_id: int
    name: str
    description: Optional[str] = None
    invite_code: Optional[str] = None
    created_at: Optional[datetime] = None
    creator: Optional[LeagueCreator] = None
    members: List[LeagueMember]


class MembershipResponse(BaseModel):
    membership_id: int
    league_id: int
    user_id: int
    role: str
    status: str
    invited_at: Optional[datetime] = None
    joined_at: Optional[datetime] = None


class MembershipActionResponse(BaseModel):
    message: str
    membership: MembershipResponse


class InviteCodeResponse(BaseModel):
    message: str
    invite_code: str


class LeagueInviteRequest(BaseModel):
    user_ids: List[int] = Field(..., min_length=1)


class InviteCountResponse(BaseModel):
    message: str
    count: int


class LeagueSummary(BaseModel):
    league_id: int
    name: str
    description: Optional[str] = None
    creator: Optional[LeagueCreator] = None


class PendingLeagueInvite(BaseModel):
    membership_id: int
    league_id: int
    role: str
    status: str
    invited_at: Optional[datetime] = None
    league: LeagueSummary
