from pydantic import BaseModel
from typing import Optional


class StandingEntry(BaseModel):
    rank: int
    user_id: int
    name: str
    team_name: Optional[str] = None
    avatar_url: Optional[str] = None
    points: int
    total_predictions: int
    correct_outcomes: int
    exact_scores: int
    accuracy: Optional[float] = None
    movement: Optional[int] = None
