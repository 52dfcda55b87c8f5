from fastapi import APIRouter, Depends, Response
from scoreline.core.dependencies import require_permission
from scoreline.database.supabase_client import get_supabase
from scoreline.modules.rounds.football_data import FootballDataClient
from scoreline.modules.rounds.schemas import (
    RoundCreate, RoundUpdate, RoundStatusUpdate, RoundResponse, RoundWithFixturesResponse,
    FixtureCreate, FixtureResponse, ActiveRoundResponse, ScoreRoundResponse,
    CountResponse, FixtureImportRequest
)
from scoreline.modules.rounds.service import RoundService
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/rounds", tags=["rounds"])

ADMIN_ONLY = "Not authorized as an admin"


def get_football_data_client() -> FootballDataClient:
    return FootballDataClient()


def get_round_service(
    supabase: Client = Depends(get_supabase),
    football_data: FootballDataClient = Depends(get_football_data_client)
) -> RoundService:
    return RoundService(supabase, football_data)


@router.post("", response_model=RoundResponse, status_code=201)
async def create_round(
    round_data: RoundCreate,
    user_data: Dict = Depends(require_permission("rounds:manage", ADMIN_ONLY)),
    service: RoundService = Depends(get_round_service)
):
    """Create a new round in SETUP status (admin only)"""
    return service.create_round(round_data, user_data["user_id"])


@router.get("", response_model=List[RoundResponse])
async def list_rounds(
    status: Optional[str] = None,
    user_data: Dict = Depends(require_permission("rounds:read")),
    service: RoundService = Depends(get_round_service)
):
    """List rounds, newest deadline first, optionally filtered by status"""
    return service.list_rounds(status)


@router.get("/active", response_model=Optional[ActiveRoundResponse])
async def get_active_round(
    user_data: Dict = Depends(require_permission("rounds:read")),
    service: RoundService = Depends(get_round_service)
):
    """The open round with the caller's predictions merged into its fixtures, or null"""
    return service.get_active_round(user_data["user_id"])


@router.post("/import/fixtures", response_model=CountResponse)
async def import_fixtures(
    import_data: FixtureImportRequest,
    response: Response,
    user_data: Dict = Depends(require_permission("rounds:manage", ADMIN_ONLY)),
    service: RoundService = Depends(get_round_service)
):
    """Import a football-data.org matchday into a round (admin only)"""
    result = service.import_fixtures(import_data)
    response.status_code = 201 if result.count > 0 else 200
    return result


@router.get("/{round_id}", response_model=RoundWithFixturesResponse)
async def get_round(
    round_id: int,
    user_data: Dict = Depends(require_permission("rounds:read")),
    service: RoundService = Depends(get_round_service)
):
    return service.get_round_with_fixtures(round_id)


@router.put("/{round_id}", response_model=RoundResponse)
async def update_round(
    round_id: int,
    round_data: RoundUpdate,
    user_data: Dict = Depends(require_permission("rounds:manage", ADMIN_ONLY)),
    service: RoundService = Depends(get_round_service)
):
    return service.update_round(round_id, round_data)


@router.put("/{round_id}/status", response_model=RoundResponse)
async def update_round_status(
    round_id: int,
    body: RoundStatusUpdate,
    user_data: Dict = Depends(require_permission("rounds:manage", ADMIN_ONLY)),
    service: RoundService = Depends(get_round_service)
):
    """Move a round between SETUP, OPEN and CLOSED"""
    return service.update_status(round_id, body.status)


@router.delete("/{round_id}", status_code=204)
async def delete_round(
    round_id: int,
    user_data: Dict = Depends(require_permission("rounds:manage", ADMIN_ONLY)),
    service: RoundService = Depends(get_round_service)
):
    service.delete_round(round_id)


@router.post("/{round_id}/fixtures", response_model=FixtureResponse, status_code=201)
async def add_fixture(
    round_id: int,
    fixture_data: FixtureCreate,
    user_data: Dict = Depends(require_permission("rounds:manage", ADMIN_ONLY)),
    service: RoundService = Depends(get_round_service)
):
    return service.add_fixture(round_id, fixture_data)


@router.get("/{round_id}/fixtures", response_model=List[FixtureResponse])
async def list_fixtures(
    round_id: int,
    user_data: Dict = Depends(require_permission("rounds:manage", ADMIN_ONLY)),
    service: RoundService = Depends(get_round_service)
):
    service.get_round(round_id)
    return service.list_fixtures(round_id)


@router.post("/{round_id}/fixtures/random-results", response_model=CountResponse)
async def generate_random_results(
    round_id: int,
    user_data: Dict = Depends(require_permission("rounds:manage", ADMIN_ONLY)),
    service: RoundService = Depends(get_round_service)
):
    """Fill every fixture with a random 0-4 score (development helper)"""
    return service.generate_random_results(round_id)


@router.post("/{round_id}/score", response_model=ScoreRoundResponse)
async def score_round(
    round_id: int,
    user_data: Dict = Depends(require_permission("rounds:manage", ADMIN_ONLY)),
    service: RoundService = Depends(get_round_service)
):
    """Award points for a CLOSED round whose fixtures all have results"""
    return service.score_round(round_id)
