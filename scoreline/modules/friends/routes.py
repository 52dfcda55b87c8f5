from fastapi import APIRouter, Depends
from scoreline.core.dependencies import get_current_user
from scoreline.database.supabase_client import get_supabase
from scoreline.modules.auth.schemas import MessageResponse
from scoreline.modules.friends.schemas import (
    FriendRequestCreate, FriendshipActionResponse, PendingFriendRequest
)
from scoreline.modules.friends.service import FriendService
from scoreline.modules.users.schemas import UserSummary
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/friends", tags=["friends"])


def get_friend_service(supabase: Client = Depends(get_supabase)) -> FriendService:
    return FriendService(supabase)


@router.post("/requests", response_model=FriendshipActionResponse, status_code=201)
async def send_friend_request(
    body: FriendRequestCreate,
    current_user: Dict = Depends(get_current_user),
    service: FriendService = Depends(get_friend_service)
):
    return service.send_request(current_user["user_id"], body.addressee_id)


@router.get("/requests/pending", response_model=List[PendingFriendRequest])
async def list_pending_requests(
    current_user: Dict = Depends(get_current_user),
    service: FriendService = Depends(get_friend_service)
):
    """Friend requests waiting for the caller's answer"""
    return service.list_pending_requests(current_user["user_id"])


@router.patch("/requests/{request_id}/accept", response_model=FriendshipActionResponse)
async def accept_friend_request(
    request_id: int,
    current_user: Dict = Depends(get_current_user),
    service: FriendService = Depends(get_friend_service)
):
    return service.accept_request(request_id, current_user["user_id"])


@router.patch("/requests/{request_id}/reject", response_model=MessageResponse)
async def reject_friend_request(
    request_id: int,
    current_user: Dict = Depends(get_current_user),
    service: FriendService = Depends(get_friend_service)
):
    return service.reject_request(request_id, current_user["user_id"])


@router.get("", response_model=List[UserSummary])
async def list_friends(
    current_user: Dict = Depends(get_current_user),
    service: FriendService = Depends(get_friend_service)
):
    return service.list_friends(current_user["user_id"])


@router.delete("/{friend_user_id}", response_model=MessageResponse)
async def remove_friend(
    friend_user_id: int,
    current_user: Dict = Depends(get_current_user),
    service: FriendService = Depends(get_friend_service)
):
    return service.remove_friend(current_user["user_id"], friend_user_id)
