from fastapi import APIRouter, Depends
from scoreline.core.dependencies import get_current_user
from scoreline.database.supabase_client import get_supabase
from scoreline.modules.dashboard.schemas import DashboardHighlights
from scoreline.modules.dashboard.service import DashboardService
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def get_dashboard_service(supabase: Client = Depends(get_supabase)) -> DashboardService:
    return DashboardService(supabase)


@router.get("/highlights", response_model=DashboardHighlights)
async def get_highlights(
    current_user: Dict = Depends(get_current_user),
    service: DashboardService = Depends(get_dashboard_service)
):
    return service.get_highlights(current_user["user_id"])
