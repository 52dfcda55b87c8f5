from fastapi import APIRouter, Depends
from scoreline.core.dependencies import require_permission
from scoreline.database.supabase_client import get_supabase
from scoreline.modules.fixtures.schemas import FixtureResultUpdate
from scoreline.modules.fixtures.service import FixtureService
from scoreline.modules.rounds.schemas import FixtureResponse
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/fixtures", tags=["fixtures"])

ADMIN_ONLY = "Not authorized as an admin"


def get_fixture_service(supabase: Client = Depends(get_supabase)) -> FixtureService:
    return FixtureService(supabase)


@router.put("/{fixture_id}/result", response_model=FixtureResponse)
async def set_fixture_result(
    fixture_id: int,
    result_data: FixtureResultUpdate,
    user_data: Dict = Depends(require_permission("fixtures:manage", ADMIN_ONLY)),
    service: FixtureService = Depends(get_fixture_service)
):
    """Enter the final score of a fixture (admin only)"""
    return service.set_result(fixture_id, result_data)


@router.delete("/{fixture_id}", status_code=204)
async def delete_fixture(
    fixture_id: int,
    user_data: Dict = Depends(require_permission("fixtures:manage", ADMIN_ONLY)),
    service: FixtureService = Depends(get_fixture_service)
):
    service.delete_fixture(fixture_id)
