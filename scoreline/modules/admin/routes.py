from fastapi import APIRouter, Depends
from scoreline.core.dependencies import require_admin, require_permission
from scoreline.database.supabase_client import get_supabase
from scoreline.modules.admin.schemas import (
    AdminUserResponse, RoleUpdate, VerificationUpdate, PlayerPredictionStatus
)
from scoreline.modules.admin.service import AdminService
from scoreline.modules.auth.schemas import MessageResponse
from scoreline.modules.news.schemas import NewsItemCreate, NewsItemResponse
from scoreline.modules.news.service import NewsService
from scoreline.modules.users.schemas import UserRoundPredictionsResponse
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/admin", tags=["admin"])


def get_admin_service(supabase: Client = Depends(get_supabase)) -> AdminService:
    return AdminService(supabase)


def get_news_service(supabase: Client = Depends(get_supabase)) -> NewsService:
    return NewsService(supabase)


@router.get("/users", response_model=List[AdminUserResponse])
async def list_users(
    user_data: Dict = Depends(require_permission("users:manage", "Not authorized as an admin")),
    service: AdminService = Depends(get_admin_service)
):
    """All non-admin users"""
    return service.list_users()


@router.patch("/users/{user_id}/role", response_model=AdminUserResponse)
async def update_user_role(
    user_id: int,
    body: RoleUpdate,
    user_data: Dict = Depends(require_permission("users:manage", "Not authorized as an admin")),
    service: AdminService = Depends(get_admin_service)
):
    """Switch a user between PLAYER and VISITOR"""
    return service.update_role(user_id, body.role, user_data["user_id"])


@router.patch("/users/{user_id}/verification", response_model=AdminUserResponse)
async def update_user_verification(
    user_id: int,
    body: VerificationUpdate,
    user_data: Dict = Depends(require_permission("users:manage", "Not authorized as an admin")),
    service: AdminService = Depends(get_admin_service)
):
    return service.update_verification(user_id, body.is_verified, user_data["user_id"])


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    user_data: Dict = Depends(require_permission("users:manage", "Not authorized as an admin")),
    service: AdminService = Depends(get_admin_service)
):
    return service.delete_user(user_id, user_data["user_id"])


@router.get("/users/{user_id}/predictions/{round_id}", response_model=UserRoundPredictionsResponse)
async def get_user_round_predictions(
    user_id: int,
    round_id: int,
    user_data: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    return service.user_round_predictions(user_id, round_id)


@router.get("/rounds/{round_id}/prediction-status", response_model=List[PlayerPredictionStatus])
async def get_round_prediction_status(
    round_id: int,
    user_data: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    """Which players have predicted in the round"""
    return service.round_prediction_status(round_id)


@router.post("/news", response_model=NewsItemResponse, status_code=201)
async def create_news_item(
    body: NewsItemCreate,
    user_data: Dict = Depends(require_permission("news:manage", "Not authorized as an admin")),
    service: NewsService = Depends(get_news_service)
):
    return service.create_news_item(body, user_data["user_id"])


@router.delete("/news/{news_item_id}", response_model=MessageResponse)
async def delete_news_item(
    news_item_id: int,
    user_data: Dict = Depends(require_permission("news:manage", "Not authorized as an admin")),
    service: NewsService = Depends(get_news_service)
):
    return service.delete_news_item(news_item_id)
