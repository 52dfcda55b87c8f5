import logging
from typing import Any, Dict

from fastapi import HTTPException
from supabase import Client

from scoreline.modules.fixtures.schemas import FixtureResultUpdate
from scoreline.modules.rounds.models import FIXTURE_STATUS_FINISHED
from scoreline.modules.rounds.schemas import FixtureResponse
from scoreline.utils.dates import utc_now_iso

logger = logging.getLogger(__name__)


class FixtureService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_fixture(self, fixture_id: int) -> Dict[str, Any]:
        result = self.supabase.table("fixtures")\
            .select("*")\
            .eq("fixture_id", fixture_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Fixture not found.")
        return result.data[0]

    def set_result(self, fixture_id: int, result_data: FixtureResultUpdate) -> FixtureResponse:
        """Record the final score and mark the fixture FINISHED"""
        self.get_fixture(fixture_id)
        result = self.supabase.table("fixtures")\
            .update({
                "home_score": result_data.home_score,
                "away_score": result_data.away_score,
                "status": FIXTURE_STATUS_FINISHED,
                "updated_at": utc_now_iso(),
            })\
            .eq("fixture_id", fixture_id)\
            .execute()
        logger.info(f"Result {result_data.home_score}-{result_data.away_score} saved for fixture {fixture_id}")
        return FixtureResponse(**result.data[0])

    def delete_fixture(self, fixture_id: int):
        """Delete a fixture and the predictions made on it"""
        self.get_fixture(fixture_id)
        self.supabase.table("predictions").delete().eq("fixture_id", fixture_id).execute()
        self.supabase.table("fixtures").delete().eq("fixture_id", fixture_id).execute()
        logger.info(f"Fixture {fixture_id} deleted")
