from fastapi import APIRouter, Depends
from scoreline.core.dependencies import require_permission
from scoreline.database.supabase_client import get_supabase
from scoreline.modules.standings.schemas import StandingEntry
from scoreline.modules.standings.service import StandingsService
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/standings", tags=["standings"])


def get_standings_service(supabase: Client = Depends(get_supabase)) -> StandingsService:
    return StandingsService(supabase)


@router.get("", response_model=List[StandingEntry])
async def get_standings(
    round_id: Optional[int] = None,
    user_data: Dict = Depends(require_permission("standings:read")),
    service: StandingsService = Depends(get_standings_service)
):
    """Overall standings with movement, or the standings of one completed round"""
    return service.calculate_standings(round_id=round_id)
