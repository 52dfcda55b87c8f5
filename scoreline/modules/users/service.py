import logging
from typing import Any, Dict, List, Optional, Set

from fastapi import HTTPException
from supabase import Client

from scoreline.core.dependencies import USER_PUBLIC_COLUMNS
from scoreline.database.pagination import fetch_all
from scoreline.modules.rounds.models import ROUND_STATUS_COMPLETED
from scoreline.modules.rounds.service import RoundService
from scoreline.modules.users.schemas import (
    UserResponse, UserSummary, NotificationSettings, NotificationSettingsUpdate,
    RoundInfo, UserPredictionItem, UserRoundPredictionsResponse,
    RoundPoints, UserPredictionStats
)
from scoreline.utils.dates import utc_now_iso
from scoreline.utils.scoring import outcome

logger = logging.getLogger(__name__)

SEARCH_MIN_LENGTH = 2
SEARCH_LIMIT = 10
ACTIVE_ROUND_ALIASES = ("current", "active")


def _like_escape(term: str) -> str:
    """Make LIKE wildcards in user input match literally"""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _match_time_key(item: Dict[str, Any]):
    # Fixtures without a kick-off time sort last
    match_time = item.get("match_time")
    return (match_time is None, str(match_time or ""), item.get("fixture_id", 0))


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_user(self, user_id: int) -> Dict[str, Any]:
        result = self.supabase.table("users")\
            .select(USER_PUBLIC_COLUMNS)\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="User not found.")
        return result.data[0]

    def connected_user_ids(self, user_id: int) -> Set[int]:
        """Ids of everyone sharing a friendship row (pending or accepted) with the user"""
        sent = self.supabase.table("friendships")\
            .select("addressee_id")\
            .eq("requester_id", user_id)\
            .execute()
        received = self.supabase.table("friendships")\
            .select("requester_id")\
            .eq("addressee_id", user_id)\
            .execute()
        return {row["addressee_id"] for row in sent.data or []} | \
            {row["requester_id"] for row in received.data or []}

    def search_users(self, current_user_id: int, query: Optional[str]) -> List[UserSummary]:
        """Case-insensitive name/email search, excluding the caller and existing connections"""
        term = (query or "").strip()
        if len(term) < SEARCH_MIN_LENGTH:
            return []

        excluded = self.connected_user_ids(current_user_id) | {current_user_id}
        pattern = f"%{_like_escape(term)}%"
        found: Dict[int, Dict[str, Any]] = {}
        for column in ("name", "email"):
            result = self.supabase.table("users")\
                .select("user_id, name, avatar_url")\
                .ilike(column, pattern)\
                .order("name")\
                .limit(SEARCH_LIMIT + len(excluded))\
                .execute()
            for row in result.data or []:
                if row["user_id"] not in excluded:
                    found.setdefault(row["user_id"], row)

        matches = sorted(found.values(), key=lambda row: row["name"].lower())
        return [UserSummary(**row) for row in matches[:SEARCH_LIMIT]]

    def update_team_name(self, user_id: int, team_name: Optional[str]) -> UserResponse:
        result = self.supabase.table("users")\
            .update({"team_name": team_name, "updated_at": utc_now_iso()})\
            .eq("user_id", user_id)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="User not found.")
        logger.info(f"User {user_id} set team name to {team_name!r}")
        return UserResponse(**result.data[0])

    def get_notification_settings(self, user_id: int) -> NotificationSettings:
        return NotificationSettings(**self.get_user(user_id))

    def update_notification_settings(
        self, user_id: int, settings_data: NotificationSettingsUpdate
    ) -> UserResponse:
        update_data = settings_data.model_dump(exclude_none=True)
        if not update_data:
            raise HTTPException(status_code=400, detail="No valid settings provided to update.")

        update_data["updated_at"] = utc_now_iso()
        result = self.supabase.table("users")\
            .update(update_data)\
            .eq("user_id", user_id)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="User not found.")
        return UserResponse(**result.data[0])

    def get_predictions_for_round(self, user_id: int, round_ref: str) -> UserRoundPredictionsResponse:
        """The user's predictions for a round id, or for the open round when `round_ref` is current/active"""
        rounds = RoundService(self.supabase)
        if round_ref.lower() in ACTIVE_ROUND_ALIASES:
            round_row = rounds.find_open_round()
            if not round_row:
                return UserRoundPredictionsResponse(round_info=None, predictions=[])
        else:
            try:
                round_id = int(round_ref)
            except ValueError:
                round_id = 0
            if round_id <= 0:
                raise HTTPException(status_code=400, detail="Invalid Round ID parameter.")
            round_row = rounds.get_round(round_id)

        return UserRoundPredictionsResponse(
            round_info=RoundInfo(
                round_id=round_row["round_id"],
                round_name=round_row["name"],
                status=round_row["status"],
            ),
            predictions=self.list_round_predictions(user_id, round_row["round_id"]),
        )

    def list_round_predictions(self, user_id: int, round_id: int) -> List[UserPredictionItem]:
        predictions = self.supabase.table("predictions")\
            .select("*")\
            .eq("user_id", user_id)\
            .eq("round_id", round_id)\
            .execute().data or []
        if not predictions:
            return []

        fixtures = self.supabase.table("fixtures")\
            .select("fixture_id, home_team, away_team, match_time, home_score, away_score")\
            .in_("fixture_id", [p["fixture_id"] for p in predictions])\
            .execute().data or []
        fixtures_by_id = {f["fixture_id"]: f for f in fixtures}

        items = []
        for prediction in predictions:
            fixture = fixtures_by_id.get(prediction["fixture_id"])
            if not fixture:
                continue
            items.append({**fixture, **prediction})
        items.sort(key=_match_time_key)
        return [UserPredictionItem(**item) for item in items]

    def get_prediction_stats(self, user_id: int) -> UserPredictionStats:
        """Accuracy and per-round points across completed rounds with results"""
        completed_rounds = self.supabase.table("rounds")\
            .select("round_id, name")\
            .eq("status", ROUND_STATUS_COMPLETED)\
            .execute().data or []
        round_names = {r["round_id"]: r["name"] for r in completed_rounds}
        if not round_names:
            return UserPredictionStats(
                overall_accuracy=0.0, average_points_per_round=0.0,
                best_round=None, points_per_round_history=[]
            )

        predictions = fetch_all(lambda: self.supabase.table("predictions")
                                .select("round_id, fixture_id, predicted_home_goals, predicted_away_goals, points_awarded")
                                .eq("user_id", user_id)
                                .in_("round_id", list(round_names))
                                .order("prediction_id"))
        fixtures = fetch_all(lambda: self.supabase.table("fixtures")
                             .select("fixture_id, home_score, away_score")
                             .in_("round_id", list(round_names))
                             .order("fixture_id"))
        results = {
            f["fixture_id"]: f for f in fixtures
            if f.get("home_score") is not None and f.get("away_score") is not None
        }

        points_by_round: Dict[int, int] = {}
        decided = 0
        correct = 0
        for prediction in predictions:
            result = results.get(prediction["fixture_id"])
            if result is None:
                continue
            round_id = prediction["round_id"]
            points_by_round[round_id] = points_by_round.get(round_id, 0) + (prediction.get("points_awarded") or 0)
            predicted = outcome(prediction.get("predicted_home_goals"), prediction.get("predicted_away_goals"))
            if predicted is None:
                continue
            decided += 1
            if predicted == outcome(result["home_score"], result["away_score"]):
                correct += 1

        history = [
            RoundPoints(round_id=round_id, round_name=round_names[round_id], points=points)
            for round_id, points in sorted(points_by_round.items())
        ]
        best_round = None
        for entry in history:
            if best_round is None or entry.points > best_round.points:
                best_round = entry

        return UserPredictionStats(
            overall_accuracy=round(correct / decided, 2) if decided else 0.0,
            average_points_per_round=round(sum(e.points for e in history) / len(history), 1) if history else 0.0,
            best_round=best_round,
            points_per_round_history=history,
        )
