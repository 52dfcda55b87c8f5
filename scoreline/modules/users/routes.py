from fastapi import APIRouter, Depends
from scoreline.core.dependencies import get_current_user
from scoreline.database.supabase_client import get_supabase
from scoreline.modules.users.schemas import (
    UserResponse, UserSummary, TeamNameUpdate,
    UserRoundPredictionsResponse, UserPredictionStats
)
from scoreline.modules.users.service import UserService
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(supabase: Client = Depends(get_supabase)) -> UserService:
    return UserService(supabase)


@router.get("/search", response_model=List[UserSummary])
async def search_users(
    query: Optional[str] = None,
    current_user: Dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """Find users to befriend by name or email (at least 2 characters)"""
    return service.search_users(current_user["user_id"], query)


@router.post("/profile/team-name", response_model=UserResponse)
async def update_team_name(
    body: TeamNameUpdate,
    current_user: Dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """Set the caller's team name; an empty name clears it"""
    return service.update_team_name(current_user["user_id"], body.team_name)


@router.get("/me/stats/predictions", response_model=UserPredictionStats)
async def get_my_prediction_stats(
    current_user: Dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    return service.get_prediction_stats(current_user["user_id"])


@router.get("/me/predictions/{round_ref}", response_model=UserRoundPredictionsResponse)
async def get_my_predictions(
    round_ref: str,
    current_user: Dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """Caller's predictions for a round id, or for the open round via `current` / `active`"""
    return service.get_predictions_for_round(current_user["user_id"], round_ref)
