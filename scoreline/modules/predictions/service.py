import logging
import random
from typing import Any, Dict, List

from fastapi import HTTPException
from supabase import Client

from scoreline.modules.predictions.schemas import (
    PredictionInput, PredictionCountResponse, RoundPointsResponse
)
from scoreline.modules.rounds.models import ROUND_STATUS_COMPLETED
from scoreline.modules.rounds.service import RoundService, RANDOM_SCORE_MAX
from scoreline.modules.users.service import UserService
from scoreline.utils.dates import deadline_passed, utc_now_iso

logger = logging.getLogger(__name__)

PREDICTION_CONFLICT_COLUMNS = "user_id,fixture_id"


class PredictionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.rounds = RoundService(supabase)

    def _open_round_for_predictions(self) -> Dict[str, Any]:
        """The open round, provided its deadline has not passed"""
        round_row = self.rounds.find_open_round()
        if not round_row:
            raise HTTPException(status_code=400, detail="No active round found for submitting predictions.")
        if deadline_passed(round_row.get("deadline")):
            raise HTTPException(status_code=400, detail="Prediction deadline has passed or is invalid.")
        return round_row

    def _stored_jokers(self, user_id: int, round_id: int) -> Dict[int, bool]:
        result = self.supabase.table("predictions")\
            .select("fixture_id, is_joker")\
            .eq("user_id", user_id)\
            .eq("round_id", round_id)\
            .execute()
        return {row["fixture_id"]: bool(row.get("is_joker")) for row in result.data or []}

    def _upsert(self, rows: List[Dict[str, Any]]):
        self.supabase.table("predictions")\
            .upsert(rows, on_conflict=PREDICTION_CONFLICT_COLUMNS)\
            .execute()

    def submit_predictions(self, user_id: int, predictions: List[PredictionInput]) -> PredictionCountResponse:
        """Create or update the caller's predictions for the open round.

        Every fixture must belong to the open round and the number of jokers,
        counting the ones already stored for other fixtures of the round, may
        not exceed the round's joker limit.
        """
        round_row = self._open_round_for_predictions()
        round_id = round_row["round_id"]

        fixture_ids = [p.fixture_id for p in predictions]
        if len(set(fixture_ids)) != len(fixture_ids):
            raise HTTPException(status_code=400, detail="Each fixture can only be predicted once per submission.")

        round_fixture_ids = {f["fixture_id"] for f in self.rounds.fixture_rows(round_id)}
        if any(fixture_id not in round_fixture_ids for fixture_id in fixture_ids):
            raise HTTPException(
                status_code=400,
                detail="Invalid input: One or more fixture IDs provided do not belong to the active round."
            )

        jokers = self._stored_jokers(user_id, round_id)
        jokers.update({p.fixture_id: p.is_joker for p in predictions})
        joker_limit = round_row.get("joker_limit", 1)
        if sum(jokers.values()) > joker_limit:
            raise HTTPException(
                status_code=400,
                detail=f"You can only mark {joker_limit} prediction(s) as a Joker per round."
            )

        if not predictions:
            return PredictionCountResponse(message="No prediction data needed updating.", count=0)

        now = utc_now_iso()
        self._upsert([
            {
                "user_id": user_id,
                "fixture_id": p.fixture_id,
                "round_id": round_id,
                "predicted_home_goals": p.predicted_home_goals,
                "predicted_away_goals": p.predicted_away_goals,
                "is_joker": p.is_joker,
                "submitted_at": now,
            }
            for p in predictions
        ])
        logger.info(f"User {user_id} saved {len(predictions)} predictions for round {round_id}")
        return PredictionCountResponse(message="Predictions submitted successfully.", count=len(predictions))

    def generate_random_predictions(self, user_id: int) -> PredictionCountResponse:
        """Random 0-4 guesses for every fixture of the open round; clears jokers"""
        round_row = self._open_round_for_predictions()
        round_id = round_row["round_id"]
        fixtures = self.rounds.fixture_rows(round_id)
        if not fixtures:
            raise HTTPException(status_code=400, detail="No fixtures found in the active round to predict.")

        now = utc_now_iso()
        self._upsert([
            {
                "user_id": user_id,
                "fixture_id": f["fixture_id"],
                "round_id": round_id,
                "predicted_home_goals": random.randint(0, RANDOM_SCORE_MAX),
                "predicted_away_goals": random.randint(0, RANDOM_SCORE_MAX),
                "is_joker": False,
                "submitted_at": now,
            }
            for f in fixtures
        ])
        logger.info(f"User {user_id} generated random predictions for round {round_id}")
        return PredictionCountResponse(message="Random predictions generated successfully.", count=len(fixtures))

    def get_round_points(self, user_id: int, round_id: int) -> RoundPointsResponse:
        """Points breakdown of the caller's predictions in a completed round"""
        round_row = self.rounds.get_round(round_id)
        if round_row["status"] != ROUND_STATUS_COMPLETED:
            raise HTTPException(
                status_code=400,
                detail=f"Points are only available for COMPLETED rounds. This round status is: {round_row['status']}"
            )

        items = UserService(self.supabase).list_round_predictions(user_id, round_id)
        return RoundPointsResponse(
            round_id=round_id,
            total_points=sum(item.points_awarded or 0 for item in items),
            predictions=items,
        )
