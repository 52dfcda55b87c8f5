from pydantic import BaseModel, field_validator
from typing import Optional, List
from datetime import datetime


class UserResponse(BaseModel):
    user_id: int
    name: str
    email: str
    role: str
    team_name: Optional[str] = None
    avatar_url: Optional[str] = None
    email_verified: bool = False
    subscription_tier: str = "FREE"
    notifies_new_round: bool = True
    notifies_deadline_reminder: bool = True
    notifies_round_results: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserSummary(BaseModel):
    user_id: int
    name: str
    avatar_url: Optional[str] = None


class TeamNameUpdate(BaseModel):
    team_name: str

    @field_validator("team_name")
    @classmethod
    def strip_team_name(cls, v: str) -> Optional[str]:
        v = v.strip()
        if len(v) > 50:
            raise ValueError("Team name cannot exceed 50 characters.")
        return v or None


class NotificationSettings(BaseModel):
    notifies_new_round: bool
    notifies_deadline_reminder: bool
    notifies_round_results: bool


class NotificationSettingsUpdate(BaseModel):
    notifies_new_round: Optional[bool] = None
    notifies_deadline_reminder: Optional[bool] = None
    notifies_round_results: Optional[bool] = None


class RoundInfo(BaseModel):
    round_id: int
    round_name: str
    status: str


class UserPredictionItem(BaseModel):
    prediction_id: int
    fixture_id: int
    predicted_home_goals: Optional[int] = None
    predicted_away_goals: Optional[int] = None
    is_joker: bool = False
    points_awarded: Optional[int] = None
    home_team: str
    away_team: str
    match_time: Optional[datetime] = None
    home_score: Optional[int] = None
    away_score: Optional[int] = None


class UserRoundPredictionsResponse(BaseModel):
    round_info: Optional[RoundInfo] = None
    predictions: List[UserPredictionItem]


class RoundPoints(BaseModel):
    round_id: int
    round_name: str
    points: int


class UserPredictionStats(BaseModel):
    overall_accuracy: float
    average_points_per_round: float
    best_round: Optional[RoundPoints] = None
    points_per_round_history: List[RoundPoints]
