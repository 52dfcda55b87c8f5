from pydantic import BaseModel, Field, StrictBool, StrictInt
from typing import Optional, List
from scoreline.modules.users.schemas import UserPredictionItem


class PredictionInput(BaseModel):
    fixture_id: StrictInt = Field(..., gt=0)
    predicted_home_goals: Optional[StrictInt] = Field(default=None, ge=0)
    predicted_away_goals: Optional[StrictInt] = Field(default=None, ge=0)
    is_joker: StrictBool = False


class PredictionSubmit(BaseModel):
    predictions: List[PredictionInput]


class PredictionCountResponse(BaseModel):
    message: str
    count: int


class RoundPointsResponse(BaseModel):
    round_id: int
    total_points: int
    predictions: List[UserPredictionItem]
