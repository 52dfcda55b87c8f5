import logging

from supabase import Client

from scoreline.modules.dashboard.schemas import (
    DashboardHighlights, LastRoundHighlights, TopScorer, UserLastRoundStats,
    OverallLeader, OverallLeaders
)
from scoreline.modules.standings.service import StandingsService

logger = logging.getLogger(__name__)


class DashboardService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.standings = StandingsService(supabase)

    def get_highlights(self, user_id: int) -> DashboardHighlights:
        """Top scorers of the last completed round, the caller's result in it, and the overall leaders"""
        highlights = DashboardHighlights()

        overall = self.standings.calculate_standings()
        if overall:
            leading_score = overall[0].points
            highlights.overall_leader = OverallLeaders(
                leading_score=leading_score,
                leaders=[
                    OverallLeader(user_id=e.user_id, name=e.name, avatar_url=e.avatar_url, total_points=e.points)
                    for e in overall if e.points == leading_score
                ],
            )

        completed = self.standings.completed_rounds()
        if not completed:
            return highlights

        last_round = completed[0]
        round_standings = self.standings.calculate_standings(round_id=last_round["round_id"])
        if not round_standings:
            return highlights

        top_score = round_standings[0].points
        highlights.last_round_highlights = LastRoundHighlights(
            round_id=last_round["round_id"],
            round_name=last_round["name"],
            top_scorers=[
                TopScorer(user_id=e.user_id, name=e.name, avatar_url=e.avatar_url, score=e.points)
                for e in round_standings if e.points == top_score
            ],
        )
        mine = next((e for e in round_standings if e.user_id == user_id), None)
        if mine:
            highlights.user_last_round_stats = UserLastRoundStats(
                round_id=last_round["round_id"], score=mine.points, rank=mine.rank
            )
        return highlights
