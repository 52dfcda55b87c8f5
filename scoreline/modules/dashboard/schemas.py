from pydantic import BaseModel
from typing import Optional, List


class TopScorer(BaseModel):
    user_id: int
    name: str
    avatar_url: Optional[str] = None
    score: int


class LastRoundHighlights(BaseModel):
    round_id: int
    round_name: str
    top_scorers: List[TopScorer]


class UserLastRoundStats(BaseModel):
    round_id: int
    score: int
    rank: int


class OverallLeader(BaseModel):
    user_id: int
    name: str
    avatar_url: Optional[str] = None
    total_points: int


class OverallLeaders(BaseModel):
    leaders: List[OverallLeader]
    leading_score: int


class DashboardHighlights(BaseModel):
    last_round_highlights: Optional[LastRoundHighlights] = None
    user_last_round_stats: Optional[UserLastRoundStats] = None
    overall_leader: Optional[OverallLeaders] = None
