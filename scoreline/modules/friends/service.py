import logging
from typing import Any, Dict, List, Optional, Set

from fastapi import HTTPException
from supabase import Client

from scoreline.database.errors import is_unique_violation
from scoreline.modules.auth.schemas import MessageResponse
from scoreline.modules.friends.models import FRIENDSHIP_PENDING, FRIENDSHIP_ACCEPTED
from scoreline.modules.friends.schemas import (
    FriendshipResponse, FriendshipActionResponse, PendingFriendRequest
)
from scoreline.modules.users.schemas import UserSummary
from scoreline.utils.dates import utc_now_iso

logger = logging.getLogger(__name__)


class FriendService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _friendship(self, requester_id: int, addressee_id: int) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("friendships")\
            .select("*")\
            .eq("requester_id", requester_id)\
            .eq("addressee_id", addressee_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def friendship_between(self, user_id: int, other_user_id: int) -> Optional[Dict[str, Any]]:
        """The friendship row linking two users in either direction"""
        return self._friendship(user_id, other_user_id) or self._friendship(other_user_id, user_id)

    def _user_summaries(self, user_ids: List[int]) -> Dict[int, UserSummary]:
        if not user_ids:
            return {}
        result = self.supabase.table("users")\
            .select("user_id, name, avatar_url")\
            .in_("user_id", user_ids)\
            .execute()
        return {row["user_id"]: UserSummary(**row) for row in result.data or []}

    def send_request(self, requester_id: int, addressee_id: int) -> FriendshipActionResponse:
        if requester_id == addressee_id:
            raise HTTPException(status_code=400, detail="You cannot send a friend request to yourself.")
        if addressee_id not in self._user_summaries([addressee_id]):
            raise HTTPException(status_code=404, detail="Recipient user not found.")

        existing = self.friendship_between(requester_id, addressee_id)
        if existing:
            if existing["status"] == FRIENDSHIP_ACCEPTED:
                detail = "You are already friends with this user."
            elif existing["requester_id"] == requester_id:
                detail = "Friend request already sent and is pending."
            else:
                detail = "This user has already sent you a friend request. Please accept or reject it."
            raise HTTPException(status_code=400, detail=detail)

        try:
            result = self.supabase.table("friendships").insert({
                "requester_id": requester_id,
                "addressee_id": addressee_id,
                "status": FRIENDSHIP_PENDING,
            }).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise HTTPException(status_code=400, detail="Friend request already sent and is pending.")
            raise

        logger.info(f"User {requester_id} sent a friend request to {addressee_id}")
        return FriendshipActionResponse(
            message="Friend request sent successfully.",
            friendship=FriendshipResponse(**result.data[0])
        )

    def list_pending_requests(self, user_id: int) -> List[PendingFriendRequest]:
        """Incoming pending requests, newest first, with the requester's details"""
        rows = self.supabase.table("friendships")\
            .select("*")\
            .eq("addressee_id", user_id)\
            .eq("status", FRIENDSHIP_PENDING)\
            .order("created_at", desc=True)\
            .execute().data or []
        requesters = self._user_summaries([row["requester_id"] for row in rows])
        return [
            PendingFriendRequest(**row, requester=requesters[row["requester_id"]])
            for row in rows if row["requester_id"] in requesters
        ]

    def _pending_request_for(self, request_id: int, user_id: int) -> Dict[str, Any]:
        result = self.supabase.table("friendships")\
            .select("*")\
            .eq("id", request_id)\
            .eq("addressee_id", user_id)\
            .eq("status", FRIENDSHIP_PENDING)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Pending friend request not found or already actioned.")
        return result.data[0]

    def accept_request(self, request_id: int, user_id: int) -> FriendshipActionResponse:
        self._pending_request_for(request_id, user_id)
        result = self.supabase.table("friendships")\
            .update({"status": FRIENDSHIP_ACCEPTED, "updated_at": utc_now_iso()})\
            .eq("id", request_id)\
            .execute()
        logger.info(f"User {user_id} accepted friend request {request_id}")
        return FriendshipActionResponse(
            message="Friend request accepted.",
            friendship=FriendshipResponse(**result.data[0])
        )

    def reject_request(self, request_id: int, user_id: int) -> MessageResponse:
        self._pending_request_for(request_id, user_id)
        self.supabase.table("friendships").delete().eq("id", request_id).execute()
        return MessageResponse(message="Friend request rejected.")

    def accepted_friend_ids(self, user_id: int) -> Set[int]:
        sent = self.supabase.table("friendships")\
            .select("addressee_id")\
            .eq("requester_id", user_id)\
            .eq("status", FRIENDSHIP_ACCEPTED)\
            .execute()
        received = self.supabase.table("friendships")\
            .select("requester_id")\
            .eq("addressee_id", user_id)\
            .eq("status", FRIENDSHIP_ACCEPTED)\
            .execute()
        return {row["addressee_id"] for row in sent.data or []} | \
            {row["requester_id"] for row in received.data or []}

    def list_friends(self, user_id: int) -> List[UserSummary]:
        friends = self._user_summaries(list(self.accepted_friend_ids(user_id)))
        return sorted(friends.values(), key=lambda friend: friend.name.lower())

    def remove_friend(self, user_id: int, friend_user_id: int) -> MessageResponse:
        if user_id == friend_user_id:
            raise HTTPException(status_code=400, detail="You cannot unfriend yourself.")
        friendship = self.friendship_between(user_id, friend_user_id)
        if not friendship or friendship["status"] != FRIENDSHIP_ACCEPTED:
            raise HTTPException(status_code=404, detail="Friendship not found.")

        self.supabase.table("friendships").delete().eq("id", friendship["id"]).execute()
        logger.info(f"User {user_id} removed friend {friend_user_id}")
        return MessageResponse(message="Friend removed successfully.")
