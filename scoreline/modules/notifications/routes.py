from fastapi import APIRouter, Depends
from scoreline.core.dependencies import get_current_user
from scoreline.modules.users.routes import get_user_service
from scoreline.modules.users.schemas import (
    NotificationSettings, NotificationSettingsUpdate, UserResponse
)
from scoreline.modules.users.service import UserService
from typing import Dict

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/settings", response_model=NotificationSettings)
async def get_notification_settings(
    current_user: Dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    return service.get_notification_settings(current_user["user_id"])


@router.put("/settings", response_model=UserResponse)
async def update_notification_settings(
    body: NotificationSettingsUpdate,
    current_user: Dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """Update any of the three notification flags and return the refreshed profile"""
    return service.update_notification_settings(current_user["user_id"], body)
