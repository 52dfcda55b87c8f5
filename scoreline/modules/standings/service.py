"""
Leaderboard computation.

Only predictions in COMPLETED rounds whose fixture has a full result count.
Players are ordered by points (desc) then name (asc) and ranked with
standard competition ranking: tied players share a rank and the next rank
skips (1, 2, 2, 4). Overall standings also carry a movement value, the
difference between a player's rank before the most recent completed round
and their rank now (positive means they climbed).
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from fastapi import HTTPException
from supabase import Client

from scoreline.config.permissions_config import ROLE_PLAYER
from scoreline.database.pagination import fetch_all
from scoreline.modules.rounds.models import ROUND_STATUS_COMPLETED
from scoreline.modules.standings.schemas import StandingEntry
from scoreline.utils.scoring import outcome, is_exact_score

logger = logging.getLogger(__name__)


def build_standings(
    players: Iterable[Mapping[str, Any]],
    predictions: Iterable[Mapping[str, Any]],
    results: Mapping[int, Mapping[str, Any]],
) -> List[Dict[str, Any]]:
    """Aggregate per-player totals. `results` maps fixture_id to a fixture with both scores."""
    entries: Dict[int, Dict[str, Any]] = {}
    for player in players:
        entries[player["user_id"]] = {
            "user_id": player["user_id"],
            "name": player["name"],
            "team_name": player.get("team_name"),
            "avatar_url": player.get("avatar_url"),
            "points": 0,
            "total_predictions": 0,
            "correct_outcomes": 0,
            "exact_scores": 0,
        }

    for prediction in predictions:
        entry = entries.get(prediction["user_id"])
        result = results.get(prediction["fixture_id"])
        if entry is None or result is None:
            continue
        entry["points"] += prediction.get("points_awarded") or 0
        entry["total_predictions"] += 1
        predicted = outcome(prediction.get("predicted_home_goals"), prediction.get("predicted_away_goals"))
        if predicted is not None and predicted == outcome(result.get("home_score"), result.get("away_score")):
            entry["correct_outcomes"] += 1
        if is_exact_score(prediction, result):
            entry["exact_scores"] += 1

    for entry in entries.values():
        total = entry["total_predictions"]
        entry["accuracy"] = round(entry["correct_outcomes"] * 100 / total, 1) if total else None
    return list(entries.values())


def rank_standings(entries: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Sort by points desc, name asc and assign competition ranks."""
    ordered = sorted(entries, key=lambda e: (-e["points"], e["name"].lower(), e["user_id"]))
    previous_points = None
    rank = 0
    for position, entry in enumerate(ordered, start=1):
        if entry["points"] != previous_points:
            rank = position
            previous_points = entry["points"]
        entry["rank"] = rank
    return ordered


def apply_movement(
    current: Sequence[Dict[str, Any]],
    previous: Optional[Sequence[Dict[str, Any]]],
) -> List[Dict[str, Any]]:
    """Set movement = previous rank - current rank.

    Movement stays None when there is no previous snapshot or the player had
    nothing counted in it.
    """
    previous_ranks = {
        e["user_id"]: e["rank"] for e in previous or [] if e["total_predictions"] > 0
    }
    for entry in current:
        previous_rank = previous_ranks.get(entry["user_id"])
        entry["movement"] = previous_rank - entry["rank"] if previous_rank is not None else None
    return list(current)


class StandingsService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def completed_rounds(self) -> List[Dict[str, Any]]:
        """Completed rounds, most recent deadline first"""
        result = self.supabase.table("rounds")\
            .select("round_id, name, deadline, status")\
            .eq("status", ROUND_STATUS_COMPLETED)\
            .order("deadline", desc=True)\
            .order("round_id", desc=True)\
            .execute()
        return result.data or []

    def _players(self, user_ids: Optional[List[int]]) -> List[Dict[str, Any]]:
        def query():
            q = self.supabase.table("users")\
                .select("user_id, name, team_name, avatar_url")\
                .eq("role", ROLE_PLAYER)\
                .order("user_id")
            if user_ids is not None:
                q = q.in_("user_id", user_ids)
            return q
        return fetch_all(query)

    def _predictions(self, round_ids: List[int], user_ids: Optional[List[int]]) -> List[Dict[str, Any]]:
        def query():
            q = self.supabase.table("predictions")\
                .select("user_id, fixture_id, round_id, predicted_home_goals, predicted_away_goals, is_joker, points_awarded")\
                .in_("round_id", round_ids)\
                .order("prediction_id")
            if user_ids is not None:
                q = q.in_("user_id", user_ids)
            return q
        return fetch_all(query)

    def _results(self, round_ids: List[int]) -> Dict[int, Dict[str, Any]]:
        fixtures = fetch_all(lambda: self.supabase.table("fixtures")
                             .select("fixture_id, round_id, home_score, away_score")
                             .in_("round_id", round_ids)
                             .order("fixture_id"))
        return {
            f["fixture_id"]: f for f in fixtures
            if f.get("home_score") is not None and f.get("away_score") is not None
        }

    def _check_round_completed(self, round_id: int):
        result = self.supabase.table("rounds")\
            .select("round_id, status")\
            .eq("round_id", round_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Round not found.")
        status = result.data[0]["status"]
        if status != ROUND_STATUS_COMPLETED:
            raise HTTPException(
                status_code=400,
                detail=f"Standings are only available for rounds with status 'COMPLETED'. "
                       f"Status of round {round_id} is '{status}'."
            )

    def calculate_standings(
        self, round_id: Optional[int] = None, user_ids: Optional[List[int]] = None
    ) -> List[StandingEntry]:
        """Ranked standings for one completed round, or overall when round_id is None.

        `user_ids` restricts the ranked players (league standings); an empty
        list yields an empty table.
        """
        if user_ids is not None and not user_ids:
            return []

        if round_id is not None:
            self._check_round_completed(round_id)
            round_ids = [round_id]
        else:
            round_ids = [r["round_id"] for r in self.completed_rounds()]

        players = self._players(user_ids)
        if not round_ids:
            ranked = rank_standings(build_standings(players, [], {}))
            return [StandingEntry(**e) for e in apply_movement(ranked, None)]

        predictions = self._predictions(round_ids, user_ids)
        results = self._results(round_ids)
        current = rank_standings(build_standings(players, predictions, results))

        previous = None
        if round_id is None and len(round_ids) > 1:
            latest_round_id = round_ids[0]
            earlier = [p for p in predictions if p["round_id"] != latest_round_id]
            previous = rank_standings(build_standings(players, earlier, results))

        return [StandingEntry(**e) for e in apply_movement(current, previous)]
