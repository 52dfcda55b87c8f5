import logging
import random
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from supabase import Client

from scoreline.database.errors import is_unique_violation
from scoreline.database.pagination import fetch_all
from scoreline.modules.rounds.football_data import FootballDataClient, FootballDataError
from scoreline.modules.rounds.models import (
    ROUND_STATUS_SETUP, ROUND_STATUS_OPEN, ROUND_STATUS_CLOSED, ROUND_STATUS_COMPLETED,
    FIXTURE_STATUS_SCHEDULED, FIXTURE_STATUS_FINISHED
)
from scoreline.modules.rounds.schemas import (
    RoundCreate, RoundUpdate, RoundResponse, RoundWithFixturesResponse,
    FixtureCreate, FixtureResponse, ActiveFixture, ActiveRoundResponse,
    ScoreRoundResponse, CountResponse, FixtureImportRequest
)
from scoreline.utils.dates import utc_now_iso, parse_iso8601_utc
from scoreline.utils.scoring import calculate_points

logger = logging.getLogger(__name__)

RANDOM_SCORE_MAX = 4


def _iso_utc(value: Any) -> Optional[str]:
    parsed = parse_iso8601_utc(value)
    return parsed.isoformat() if parsed else None


def _fixture_key(row: Dict[str, Any]):
    return (row["home_team"], row["away_team"], parse_iso8601_utc(row.get("match_time")))


class RoundService:
    def __init__(self, supabase: Client, football_data: Optional[FootballDataClient] = None):
        self.supabase = supabase
        self.football_data = football_data

    # Rounds

    def _find_round_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("rounds")\
            .select("round_id")\
            .eq("name", name)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def get_round(self, round_id: int) -> Dict[str, Any]:
        result = self.supabase.table("rounds")\
            .select("*")\
            .eq("round_id", round_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Round not found.")
        return result.data[0]

    def find_open_round(self) -> Optional[Dict[str, Any]]:
        """The OPEN round with the earliest deadline, or None"""
        result = self.supabase.table("rounds")\
            .select("*")\
            .eq("status", ROUND_STATUS_OPEN)\
            .order("deadline")\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def create_round(self, round_data: RoundCreate, user_id: int) -> RoundResponse:
        """Create a round in SETUP status"""
        if self._find_round_by_name(round_data.name):
            raise HTTPException(status_code=409, detail="A round with this name already exists.")
        try:
            result = self.supabase.table("rounds").insert({
                "name": round_data.name,
                "deadline": _iso_utc(round_data.deadline),
                "status": ROUND_STATUS_SETUP,
                "joker_limit": round_data.joker_limit,
                "created_by": user_id,
            }).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise HTTPException(status_code=409, detail="A round with this name already exists.")
            raise

        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create round")
        logger.info(f"Round {result.data[0]['round_id']} created by user {user_id}")
        return RoundResponse(**result.data[0])

    def list_rounds(self, status: Optional[str] = None) -> List[RoundResponse]:
        query = self.supabase.table("rounds").select("*")
        if status:
            query = query.eq("status", status.upper())
        result = query.order("deadline", desc=True).execute()
        return [RoundResponse(**r) for r in result.data or []]

    def get_round_with_fixtures(self, round_id: int) -> RoundWithFixturesResponse:
        round_row = self.get_round(round_id)
        return RoundWithFixturesResponse(**round_row, fixtures=self.list_fixtures(round_id))

    def get_active_round(self, user_id: int) -> Optional[ActiveRoundResponse]:
        """The open round with its fixtures, each merged with the caller's prediction"""
        round_row = self.find_open_round()
        if not round_row:
            return None

        fixtures = self.fixture_rows(round_row["round_id"])
        predictions = self.supabase.table("predictions")\
            .select("fixture_id, predicted_home_goals, predicted_away_goals, is_joker")\
            .eq("user_id", user_id)\
            .eq("round_id", round_row["round_id"])\
            .execute().data or []
        by_fixture = {p["fixture_id"]: p for p in predictions}

        merged = []
        for fixture in fixtures:
            prediction = by_fixture.get(fixture["fixture_id"], {})
            merged.append(ActiveFixture(
                **fixture,
                predicted_home_goals=prediction.get("predicted_home_goals"),
                predicted_away_goals=prediction.get("predicted_away_goals"),
                is_joker=bool(prediction.get("is_joker")),
            ))
        return ActiveRoundResponse(
            round_id=round_row["round_id"],
            name=round_row["name"],
            deadline=round_row["deadline"],
            status=round_row["status"],
            joker_limit=round_row.get("joker_limit", 1),
            fixtures=merged,
        )

    def update_round(self, round_id: int, round_data: RoundUpdate) -> RoundResponse:
        current = self.get_round(round_id)
        update_data: Dict[str, Any] = {}
        if round_data.name is not None and round_data.name != current["name"]:
            existing = self._find_round_by_name(round_data.name)
            if existing and existing["round_id"] != round_id:
                raise HTTPException(status_code=409, detail="A round with this name already exists.")
            update_data["name"] = round_data.name
        if round_data.deadline is not None:
            update_data["deadline"] = _iso_utc(round_data.deadline)
            if current["status"] != ROUND_STATUS_SETUP:
                logger.warning(f"Deadline of round {round_id} changed while {current['status']}")
        if round_data.joker_limit is not None:
            update_data["joker_limit"] = round_data.joker_limit

        if not update_data:
            return RoundResponse(**current)

        update_data["updated_at"] = utc_now_iso()
        try:
            result = self.supabase.table("rounds")\
                .update(update_data)\
                .eq("round_id", round_id)\
                .execute()
        except Exception as e:
            if is_unique_violation(e):
                raise HTTPException(status_code=409, detail="A round with this name already exists.")
            raise
        return RoundResponse(**result.data[0])

    def update_status(self, round_id: int, status: str) -> RoundResponse:
        current = self.get_round(round_id)
        if current["status"] == ROUND_STATUS_COMPLETED:
            logger.warning(f"Round {round_id} reopened from COMPLETED to {status}")
        result = self.supabase.table("rounds")\
            .update({"status": status, "updated_at": utc_now_iso()})\
            .eq("round_id", round_id)\
            .execute()
        logger.info(f"Round {round_id} status {current['status']} -> {status}")
        return RoundResponse(**result.data[0])

    def delete_round(self, round_id: int):
        """Delete a round together with its fixtures and predictions"""
        self.get_round(round_id)
        self.supabase.table("predictions").delete().eq("round_id", round_id).execute()
        self.supabase.table("fixtures").delete().eq("round_id", round_id).execute()
        self.supabase.table("rounds").delete().eq("round_id", round_id).execute()
        logger.info(f"Round {round_id} deleted")

    # Fixtures

    def fixture_rows(self, round_id: int) -> List[Dict[str, Any]]:
        result = self.supabase.table("fixtures")\
            .select("fixture_id, round_id, home_team, away_team, match_time, home_score, away_score, status")\
            .eq("round_id", round_id)\
            .order("match_time")\
            .order("fixture_id")\
            .execute()
        return result.data or []

    def list_fixtures(self, round_id: int) -> List[FixtureResponse]:
        return [FixtureResponse(**f) for f in self.fixture_rows(round_id)]

    def add_fixture(self, round_id: int, fixture_data: FixtureCreate) -> FixtureResponse:
        self.get_round(round_id)
        row = {
            "round_id": round_id,
            "home_team": fixture_data.home_team,
            "away_team": fixture_data.away_team,
            "match_time": _iso_utc(fixture_data.match_time),
            "status": FIXTURE_STATUS_SCHEDULED,
        }
        existing_keys = {_fixture_key(f) for f in self.fixture_rows(round_id)}
        if _fixture_key(row) in existing_keys:
            raise HTTPException(status_code=409, detail="This fixture already exists in the round.")
        try:
            result = self.supabase.table("fixtures").insert(row).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise HTTPException(status_code=409, detail="This fixture already exists in the round.")
            raise
        return FixtureResponse(**result.data[0])

    def score_round(self, round_id: int) -> ScoreRoundResponse:
        """Award points for every prediction of a CLOSED round and mark it COMPLETED"""
        round_row = self.get_round(round_id)
        if round_row["status"] != ROUND_STATUS_CLOSED:
            raise HTTPException(
                status_code=400,
                detail=f"Round must be CLOSED to be scored (current status: {round_row['status']})."
            )

        fixtures = self.fixture_rows(round_id)
        missing = [
            str(f["fixture_id"]) for f in fixtures
            if f.get("home_score") is None or f.get("away_score") is None
        ]
        if missing:
            raise HTTPException(
                status_code=400,
                detail=f"Cannot score round. Results missing for fixtures: {', '.join(missing)}. "
                       "Please enter all results first."
            )

        results = {f["fixture_id"]: f for f in fixtures}
        predictions = fetch_all(lambda: self.supabase.table("predictions")
                                .select("prediction_id, fixture_id, predicted_home_goals, predicted_away_goals, is_joker")
                                .eq("round_id", round_id)
                                .order("prediction_id"))

        # One update per distinct points value rather than per prediction
        ids_by_points: Dict[int, List[int]] = {}
        for prediction in predictions:
            points = calculate_points(prediction, results.get(prediction["fixture_id"], {}))
            ids_by_points.setdefault(points, []).append(prediction["prediction_id"])
        for points, prediction_ids in ids_by_points.items():
            self.supabase.table("predictions")\
                .update({"points_awarded": points})\
                .in_("prediction_id", prediction_ids)\
                .execute()

        self.supabase.table("rounds")\
            .update({"status": ROUND_STATUS_COMPLETED, "updated_at": utc_now_iso()})\
            .eq("round_id", round_id)\
            .execute()
        logger.info(f"Round {round_id} scored: {len(predictions)} predictions")
        return ScoreRoundResponse(
            message=f"Round {round_id} scored successfully.",
            scored_predictions=len(predictions),
        )

    def generate_random_results(self, round_id: int) -> CountResponse:
        """Fill every fixture of the round with a random result (development helper)"""
        self.get_round(round_id)
        fixtures = self.fixture_rows(round_id)
        now = utc_now_iso()
        for fixture in fixtures:
            self.supabase.table("fixtures")\
                .update({
                    "home_score": random.randint(0, RANDOM_SCORE_MAX),
                    "away_score": random.randint(0, RANDOM_SCORE_MAX),
                    "status": FIXTURE_STATUS_FINISHED,
                    "updated_at": now,
                })\
                .eq("fixture_id", fixture["fixture_id"])\
                .execute()
        logger.info(f"Random results generated for {len(fixtures)} fixtures of round {round_id}")
        return CountResponse(
            message=f"Generated random results for {len(fixtures)} fixtures.",
            count=len(fixtures),
        )

    def import_fixtures(self, import_data: FixtureImportRequest) -> CountResponse:
        """Append a football-data.org matchday to a round, skipping fixtures it already has"""
        result = self.supabase.table("rounds")\
            .select("round_id")\
            .eq("round_id", import_data.round_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail=f"Round with ID {import_data.round_id} not found.")

        client = self.football_data or FootballDataClient()
        try:
            fetched = client.fetch_matchday(import_data.competition_code, import_data.matchday)
        except FootballDataError as e:
            raise HTTPException(status_code=e.status_code, detail=e.message)

        existing_keys = {_fixture_key(f) for f in self.fixture_rows(import_data.round_id)}
        rows = []
        for fixture in fetched:
            row = {
                "round_id": import_data.round_id,
                "home_team": fixture["home_team"],
                "away_team": fixture["away_team"],
                "match_time": _iso_utc(fixture["match_time"]),
                "status": FIXTURE_STATUS_SCHEDULED,
            }
            key = _fixture_key(row)
            if key not in existing_keys:
                existing_keys.add(key)
                rows.append(row)

        if not rows:
            return CountResponse(message="No new fixtures to import.", count=0)

        self.supabase.table("fixtures").insert(rows).execute()
        logger.info(f"Imported {len(rows)} fixtures into round {import_data.round_id}")
        return CountResponse(message=f"Successfully imported {len(rows)} fixtures.", count=len(rows))
