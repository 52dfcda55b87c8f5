from fastapi import APIRouter, Depends
from scoreline.core.dependencies import require_permission
from scoreline.database.supabase_client import get_supabase
from scoreline.modules.predictions.schemas import (
    PredictionSubmit, PredictionCountResponse, RoundPointsResponse
)
from scoreline.modules.predictions.service import PredictionService
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/predictions", tags=["predictions"])

PLAYERS_ONLY = "Forbidden: Admins cannot submit predictions."


def get_prediction_service(supabase: Client = Depends(get_supabase)) -> PredictionService:
    return PredictionService(supabase)


@router.post("", response_model=PredictionCountResponse)
async def submit_predictions(
    body: PredictionSubmit,
    user_data: Dict = Depends(require_permission("predictions:submit", PLAYERS_ONLY)),
    service: PredictionService = Depends(get_prediction_service)
):
    """Submit or update predictions for the open round (players only)"""
    return service.submit_predictions(user_data["user_id"], body.predictions)


@router.post("/random", response_model=PredictionCountResponse)
async def generate_random_predictions(
    user_data: Dict = Depends(require_permission("predictions:submit", PLAYERS_ONLY)),
    service: PredictionService = Depends(get_prediction_service)
):
    return service.generate_random_predictions(user_data["user_id"])


@router.get("/points/{round_id}", response_model=RoundPointsResponse)
async def get_round_points(
    round_id: int,
    user_data: Dict = Depends(require_permission(
        "predictions:read_points", "Visitors cannot view points breakdowns."
    )),
    service: PredictionService = Depends(get_prediction_service)
):
    return service.get_round_points(user_data["user_id"], round_id)
