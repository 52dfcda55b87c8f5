from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Literal
from datetime import datetime


class RoundCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    deadline: datetime
    joker_limit: int = Field(default=1, ge=0)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Round name is required.")
        return v


class RoundUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)
    deadline: Optional[datetime] = None
    joker_limit: Optional[int] = Field(default=None, ge=0)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("If provided, round name must be a non-empty string.")
        return v


class RoundStatusUpdate(BaseModel):
    status: Literal["SETUP", "OPEN", "CLOSED"]


class RoundResponse(BaseModel):
    round_id: int
    name: str
    deadline: datetime
    status: str
    joker_limit: int = 1
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FixtureCreate(BaseModel):
    home_team: str = Field(..., min_length=1, max_length=100)
    away_team: str = Field(..., min_length=1, max_length=100)
    match_time: datetime

    @field_validator("home_team", "away_team")
    @classmethod
    def strip_team(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Team names are required.")
        return v


class FixtureResponse(BaseModel):
    fixture_id: int
    round_id: int
    home_team: str
    away_team: str
    match_time: Optional[datetime] = None
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    status: str = "SCHEDULED"


class ActiveFixture(FixtureResponse):
    predicted_home_goals: Optional[int] = None
    predicted_away_goals: Optional[int] = None
    is_joker: bool = False


class ActiveRoundResponse(BaseModel):
    round_id: int
    name: str
    deadline: datetime
    status: str
    joker_limit: int = 1
    fixtures: List[ActiveFixture]


class RoundWithFixturesResponse(RoundResponse):
    fixtures: List[FixtureResponse]


class ScoreRoundResponse(BaseModel):
    message: str
    scored_predictions: int


class CountResponse(BaseModel):
    message: str
    count: int


class FixtureImportRequest(BaseModel):
    round_id: int = Field(..., gt=0)
    competition_code: str = Field(..., min_length=1)
    matchday: int = Field(..., gt=0)

    @field_validator("competition_code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("Competition Code must be a non-empty string.")
        return v
