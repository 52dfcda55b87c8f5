import logging
from typing import Any, Dict, List

from fastapi import HTTPException
from supabase import Client

from scoreline.config.permissions_config import ROLE_ADMIN, ROLE_PLAYER
from scoreline.database.errors import is_foreign_key_violation
from scoreline.modules.admin.schemas import AdminUserResponse, PlayerPredictionStatus
from scoreline.modules.auth.schemas import MessageResponse
from scoreline.modules.rounds.service import RoundService
from scoreline.modules.users.schemas import UserRoundPredictionsResponse
from scoreline.modules.users.service import UserService
from scoreline.utils.dates import utc_now_iso

logger = logging.getLogger(__name__)

ADMIN_USER_COLUMNS = "user_id, name, email, role, email_verified, created_at"


class AdminService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_user(self, user_id: int) -> Dict[str, Any]:
        result = self.supabase.table("users")\
            .select(ADMIN_USER_COLUMNS)\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="User not found.")
        return result.data[0]

    def list_users(self) -> List[AdminUserResponse]:
        """Every non-admin account, oldest first"""
        result = self.supabase.table("users")\
            .select(ADMIN_USER_COLUMNS)\
            .neq("role", ROLE_ADMIN)\
            .order("user_id")\
            .execute()
        return [AdminUserResponse(**row) for row in result.data or []]

    def update_role(self, user_id: int, role: str, admin_id: int) -> AdminUserResponse:
        if user_id == admin_id:
            raise HTTPException(status_code=400, detail="Admins cannot change their own role via this endpoint.")
        user = self._get_user(user_id)
        if user["role"] == ROLE_ADMIN:
            raise HTTPException(status_code=400, detail="Cannot change the role of an existing Admin via this endpoint.")

        result = self.supabase.table("users")\
            .update({"role": role, "updated_at": utc_now_iso()})\
            .eq("user_id", user_id)\
            .execute()
        logger.info(f"Admin {admin_id} changed role of user {user_id} from {user['role']} to {role}")
        return AdminUserResponse(**result.data[0])

    def update_verification(self, user_id: int, is_verified: bool, admin_id: int) -> AdminUserResponse:
        if user_id == admin_id and not is_verified:
            raise HTTPException(status_code=400, detail="Admin cannot un-verify their own account.")
        self._get_user(user_id)

        update_data: Dict[str, Any] = {"email_verified": is_verified, "updated_at": utc_now_iso()}
        if is_verified:
            update_data["email_verification_token"] = None
        result = self.supabase.table("users")\
            .update(update_data)\
            .eq("user_id", user_id)\
            .execute()
        return AdminUserResponse(**result.data[0])

    def delete_user(self, user_id: int, admin_id: int) -> MessageResponse:
        """Delete a non-admin account with its predictions, memberships, friendships and leagues"""
        if user_id == admin_id:
            raise HTTPException(status_code=400, detail="Admin cannot delete their own account.")
        user = self._get_user(user_id)
        if user["role"] == ROLE_ADMIN:
            raise HTTPException(status_code=400, detail="Cannot delete an Admin account.")

        try:
            owned_leagues = self.supabase.table("leagues")\
                .select("league_id")\
                .eq("creator_user_id", user_id)\
                .execute().data or []
            league_ids = [row["league_id"] for row in owned_leagues]
            if league_ids:
                self.supabase.table("league_memberships").delete().in_("league_id", league_ids).execute()
                self.supabase.table("leagues").delete().in_("league_id", league_ids).execute()
            self.supabase.table("league_memberships").delete().eq("user_id", user_id).execute()
            self.supabase.table("predictions").delete().eq("user_id", user_id).execute()
            self.supabase.table("friendships").delete().eq("requester_id", user_id).execute()
            self.supabase.table("friendships").delete().eq("addressee_id", user_id).execute()
            self.supabase.table("news_items")\
                .update({"posted_by_user_id": None})\
                .eq("posted_by_user_id", user_id)\
                .execute()
            self.supabase.table("users").delete().eq("user_id", user_id).execute()
        except Exception as e:
            if is_foreign_key_violation(e):
                raise HTTPException(
                    status_code=409,
                    detail="Cannot delete user. User has related data. Consider disabling the account instead."
                )
            raise

        logger.info(f"Admin {admin_id} deleted user {user_id}")
        return MessageResponse(message="User deleted successfully.")

    def round_prediction_status(self, round_id: int) -> List[PlayerPredictionStatus]:
        """Which players have submitted at least one prediction for the round"""
        RoundService(self.supabase).get_round(round_id)
        players = self.supabase.table("users")\
            .select("user_id, name, avatar_url")\
            .eq("role", ROLE_PLAYER)\
            .order("name")\
            .execute().data or []
        if not players:
            return []

        predicted = self.supabase.table("predictions")\
            .select("user_id")\
            .eq("round_id", round_id)\
            .in_("user_id", [p["user_id"] for p in players])\
            .execute().data or []
        predicted_ids = {row["user_id"] for row in predicted}
        return [
            PlayerPredictionStatus(**player, has_predicted=player["user_id"] in predicted_ids)
            for player in players
        ]

    def user_round_predictions(self, user_id: int, round_id: int) -> UserRoundPredictionsResponse:
        self._get_user(user_id)
        return UserService(self.supabase).get_predictions_for_round(user_id, str(round_id))
