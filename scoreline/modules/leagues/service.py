import logging
import secrets
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from supabase import Client

from scoreline.database.errors import is_unique_violation
from scoreline.modules.auth.schemas import MessageResponse
from scoreline.modules.friends.service import FriendService
from scoreline.modules.leagues.models import (
    LEAGUE_ROLE_ADMIN, LEAGUE_ROLE_MEMBER, MEMBERSHIP_INVITED, MEMBERSHIP_ACCEPTED,
    INVITE_CODE_BYTES, INVITE_CODE_RETRIES
)
from scoreline.modules.leagues.schemas import (
    LeagueCreate, LeagueResponse, LeagueCreator, MyLeague, LeagueMember, LeagueDetails,
    MembershipResponse, MembershipActionResponse, InviteCodeResponse,
    InviteCountResponse, LeagueSummary, PendingLeagueInvite
)
from scoreline.modules.standings.schemas import StandingEntry
from scoreline.modules.standings.service import StandingsService
from scoreline.modules.users.schemas import UserSummary
from scoreline.utils.dates import utc_now_iso

logger = logging.getLogger(__name__)


def generate_invite_code() -> str:
    """8 uppercase hex characters"""
    return secrets.token_hex(INVITE_CODE_BYTES).upper()


class LeagueService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    # Lookups

    def get_league(self, league_id: int) -> Dict[str, Any]:
        result = self.supabase.table("leagues")\
            .select("*")\
            .eq("league_id", league_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="League not found.")
        return result.data[0]

    def _membership(self, league_id: int, user_id: int) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("league_memberships")\
            .select("*")\
            .eq("league_id", league_id)\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def _require_member(self, league_id: int, user_id: int) -> Dict[str, Any]:
        membership = self._membership(league_id, user_id)
        if not membership or membership["status"] != MEMBERSHIP_ACCEPTED:
            raise HTTPException(status_code=403, detail="You are not a member of this league.")
        return membership

    def _require_league_admin(self, league: Dict[str, Any], user_id: int, detail: str):
        if league["creator_user_id"] == user_id:
            return
        membership = self._membership(league["league_id"], user_id)
        if not membership or membership["role"] != LEAGUE_ROLE_ADMIN:
            raise HTTPException(status_code=403, detail=detail)

    def _users(self, user_ids: List[int]) -> Dict[int, Dict[str, Any]]:
        if not user_ids:
            return {}
        result = self.supabase.table("users")\
            .select("user_id, name, avatar_url")\
            .in_("user_id", list(set(user_ids)))\
            .execute()
        return {row["user_id"]: row for row in result.data or []}

    def _creators(self, leagues: List[Dict[str, Any]]) -> Dict[int, LeagueCreator]:
        users = self._users([league["creator_user_id"] for league in leagues])
        return {
            user_id: LeagueCreator(user_id=user_id, name=row["name"])
            for user_id, row in users.items()
        }

    def _unused_invite_code(self) -> str:
        for _ in range(INVITE_CODE_RETRIES + 1):
            code = generate_invite_code()
            taken = self.supabase.table("leagues")\
                .select("league_id")\
                .eq("invite_code", code)\
                .limit(1)\
                .execute()
            if not taken.data:
                return code
        logger.error("Invite code generation kept colliding")
        raise HTTPException(status_code=500, detail="Could not generate a unique invite code. Please try again.")

    # Leagues

    def create_league(self, league_data: LeagueCreate, user_id: int) -> LeagueResponse:
        """Create a league; the creator becomes its accepted ADMIN member"""
        try:
            result = self.supabase.table("leagues").insert({
                "name": league_data.name,
                "description": league_data.description,
                "creator_user_id": user_id,
                "invite_code": self._unused_invite_code(),
            }).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise HTTPException(status_code=500, detail="Failed to generate a unique invite code. Please try again.")
            raise

        league = result.data[0]
        now = utc_now_iso()
        self.supabase.table("league_memberships").insert({
            "league_id": league["league_id"],
            "user_id": user_id,
            "role": LEAGUE_ROLE_ADMIN,
            "status": MEMBERSHIP_ACCEPTED,
            "joined_at": now,
        }).execute()
        logger.info(f"League {league['league_id']} created by user {user_id}")
        return LeagueResponse(**league)

    def list_my_leagues(self, user_id: int) -> List[MyLeague]:
        memberships = self.supabase.table("league_memberships")\
            .select("league_id, role")\
            .eq("user_id", user_id)\
            .eq("status", MEMBERSHIP_ACCEPTED)\
            .execute().data or []
        if not memberships:
            return []

        roles = {m["league_id"]: m["role"] for m in memberships}
        leagues = self.supabase.table("leagues")\
            .select("*")\
            .in_("league_id", list(roles))\
            .order("name")\
            .execute().data or []
        creators = self._creators(leagues)
        return [
            MyLeague(
                league_id=league["league_id"],
                name=league["name"],
                description=league.get("description"),
                invite_code=league["invite_code"] if roles[league["league_id"]] == LEAGUE_ROLE_ADMIN else None,
                creator=creators.get(league["creator_user_id"]),
                my_league_role=roles[league["league_id"]],
            )
            for league in leagues
        ]

    def join_by_invite_code(self, invite_code: str, user_id: int) -> MembershipActionResponse:
        code = invite_code.strip().upper()
        result = self.supabase.table("leagues")\
            .select("league_id, name")\
            .eq("invite_code", code)\
            .limit(1)\
            .execute()
        if not code or not result.data:
            raise HTTPException(status_code=404, detail="League not found or invite code is invalid.")
        league = result.data[0]

        existing = self._membership(league["league_id"], user_id)
        if existing and existing["status"] == MEMBERSHIP_ACCEPTED:
            raise HTTPException(status_code=400, detail="You are already a member of this league.")

        now = utc_now_iso()
        if existing:
            # A pending invitation is accepted by joining with the code
            membership = self.supabase.table("league_memberships")\
                .update({"status": MEMBERSHIP_ACCEPTED, "joined_at": now})\
                .eq("membership_id", existing["membership_id"])\
                .execute().data[0]
        else:
            membership = self.supabase.table("league_memberships").insert({
                "league_id": league["league_id"],
                "user_id": user_id,
                "role": LEAGUE_ROLE_MEMBER,
                "status": MEMBERSHIP_ACCEPTED,
                "joined_at": now,
            }).execute().data[0]

        logger.info(f"User {user_id} joined league {league['league_id']}")
        return MembershipActionResponse(
            message=f"Successfully joined league: {league['name']}",
            membership=MembershipResponse(**membership)
        )

    def get_league_details(self, league_id: int, user_id: int) -> LeagueDetails:
        """League with its members; the invite code is shown to league admins only"""
        membership = self._require_member(league_id, user_id)
        league = self.get_league(league_id)

        memberships = self.supabase.table("league_memberships")\
            .select("*")\
            .eq("league_id", league_id)\
            .execute().data or []
        users = self._users([m["user_id"] for m in memberships] + [league["creator_user_id"]])
        memberships.sort(key=lambda m: (m["role"], str(m.get("joined_at") or m.get("invited_at") or "")))

        creator = users.get(league["creator_user_id"])
        return LeagueDetails(
            league_id=league["league_id"],
            name=league["name"],
            description=league.get("description"),
            invite_code=league["invite_code"] if membership["role"] == LEAGUE_ROLE_ADMIN else None,
            created_at=league.get("created_at"),
            creator=LeagueCreator(user_id=creator["user_id"], name=creator["name"]) if creator else None,
            members=[
                LeagueMember(**m, user=UserSummary(**users[m["user_id"]]))
                for m in memberships if m["user_id"] in users
            ],
        )

    def accepted_member_ids(self, league_id: int) -> List[int]:
        result = self.supabase.table("league_memberships")\
            .select("user_id")\
            .eq("league_id", league_id)\
            .eq("status", MEMBERSHIP_ACCEPTED)\
            .execute()
        return [row["user_id"] for row in result.data or []]

    def get_league_standings(self, league_id: int, user_id: int) -> List[StandingEntry]:
        """Overall standings restricted to the league's accepted members"""
        self._require_member(league_id, user_id)
        return StandingsService(self.supabase).calculate_standings(user_ids=self.accepted_member_ids(league_id))

    def remove_member(self, league_id: int, member_user_id: int, user_id: int) -> MessageResponse:
        if member_user_id == user_id:
            raise HTTPException(status_code=400, detail="You cannot remove yourself from the league.")
        league = self.get_league(league_id)
        self._require_league_admin(league, user_id, "Only the league admin can remove members.")
        if member_user_id == league["creator_user_id"]:
            raise HTTPException(status_code=400, detail="The league creator cannot be removed.")

        membership = self._membership(league_id, member_user_id)
        if not membership:
            raise HTTPException(status_code=404, detail="User is not a member of this league.")
        self.supabase.table("league_memberships")\
            .delete()\
            .eq("membership_id", membership["membership_id"])\
            .execute()
        logger.info(f"User {member_user_id} removed from league {league_id} by {user_id}")
        return MessageResponse(message="Member removed successfully.")

    def regenerate_invite_code(self, league_id: int, user_id: int) -> InviteCodeResponse:
        league = self.get_league(league_id)
        self._require_league_admin(league, user_id, "Only the league admin can regenerate the invite code.")

        code = self._unused_invite_code()
        self.supabase.table("leagues")\
            .update({"invite_code": code, "updated_at": utc_now_iso()})\
            .eq("league_id", league_id)\
            .execute()
        return InviteCodeResponse(message="Invite code regenerated successfully.", invite_code=code)

    def invite_friends(self, league_id: int, user_ids: List[int], user_id: int) -> InviteCountResponse:
        """Invite accepted friends of the caller who are not yet in the league"""
        league = self.get_league(league_id)
        membership = self._membership(league_id, user_id)
        if not membership or membership["role"] != LEAGUE_ROLE_ADMIN:
            raise HTTPException(status_code=403, detail="Only the league admin can invite members.")

        existing = self.supabase.table("league_memberships")\
            .select("user_id")\
            .eq("league_id", league_id)\
            .execute().data or []
        in_league = {row["user_id"] for row in existing}
        friends = FriendService(self.supabase).accepted_friend_ids(user_id)

        to_invite = []
        for target in user_ids:
            if target != user_id and target not in in_league and target in friends and target not in to_invite:
                to_invite.append(target)

        if not to_invite:
            return InviteCountResponse(
                message="No valid users to invite. They might already be members, not friends, "
                        "or you tried to invite yourself.",
                count=0,
            )

        now = utc_now_iso()
        self.supabase.table("league_memberships").insert([
            {
                "league_id": league_id,
                "user_id": target,
                "role": LEAGUE_ROLE_MEMBER,
                "status": MEMBERSHIP_INVITED,
                "invited_at": now,
            }
            for target in to_invite
        ]).execute()
        logger.info(f"User {user_id} invited {len(to_invite)} friends to league {league_id}")
        return InviteCountResponse(
            message=f"Successfully sent {len(to_invite)} invitation(s) for league \"{league['name']}\".",
            count=len(to_invite),
        )

    def leave_league(self, league_id: int, user_id: int) -> MessageResponse:
        league = self.get_league(league_id)
        membership = self._membership(league_id, user_id)
        if not membership or membership["status"] != MEMBERSHIP_ACCEPTED:
            raise HTTPException(status_code=404, detail="You are not currently a member of this league.")
        if membership["role"] == LEAGUE_ROLE_ADMIN or league["creator_user_id"] == user_id:
            raise HTTPException(status_code=403, detail="League admins/creators cannot leave the league this way.")

        self.supabase.table("league_memberships")\
            .delete()\
            .eq("membership_id", membership["membership_id"])\
            .execute()
        return MessageResponse(message=f"Successfully left league: {league['name']}")

    def delete_league(self, league_id: int, user_id: int) -> MessageResponse:
        league = self.get_league(league_id)
        if league["creator_user_id"] != user_id:
            raise HTTPException(status_code=403, detail="Only the league creator can delete the league.")

        self.supabase.table("league_memberships").delete().eq("league_id", league_id).execute()
        self.supabase.table("leagues").delete().eq("league_id", league_id).execute()
        logger.info(f"League {league_id} deleted by user {user_id}")
        return MessageResponse(message=f"League \"{league['name']}\" deleted successfully.")

    # Invitations

    def list_pending_invites(self, user_id: int) -> List[PendingLeagueInvite]:
        invites = self.supabase.table("league_memberships")\
            .select("*")\
            .eq("user_id", user_id)\
            .eq("status", MEMBERSHIP_INVITED)\
            .order("invited_at", desc=True)\
            .execute().data or []
        if not invites:
            return []

        leagues = self.supabase.table("leagues")\
            .select("*")\
            .in_("league_id", [i["league_id"] for i in invites])\
            .execute().data or []
        creators = self._creators(leagues)
        summaries = {
            league["league_id"]: LeagueSummary(
                league_id=league["league_id"],
                name=league["name"],
                description=league.get("description"),
                creator=creators.get(league["creator_user_id"]),
            )
            for league in leagues
        }
        return [
            PendingLeagueInvite(**invite, league=summaries[invite["league_id"]])
            for invite in invites if invite["league_id"] in summaries
        ]

    def _pending_invite_for(self, membership_id: int, user_id: int, action: str) -> Dict[str, Any]:
        result = self.supabase.table("league_memberships")\
            .select("*")\
            .eq("membership_id", membership_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Invitation not found.")
        invite = result.data[0]
        if invite["user_id"] != user_id:
            raise HTTPException(status_code=403, detail=f"You are not authorized to {action} this invitation.")
        if invite["status"] != MEMBERSHIP_INVITED:
            raise HTTPException(status_code=400, detail="This invitation is not pending.")
        return invite

    def accept_invite(self, membership_id: int, user_id: int) -> MembershipActionResponse:
        invite = self._pending_invite_for(membership_id, user_id, "accept")
        league = self.get_league(invite["league_id"])
        result = self.supabase.table("league_memberships")\
            .update({"status": MEMBERSHIP_ACCEPTED, "joined_at": utc_now_iso()})\
            .eq("membership_id", membership_id)\
            .execute()
        return MembershipActionResponse(
            message=f"Successfully joined league: {league['name']}",
            membership=MembershipResponse(**result.data[0])
        )

    def reject_invite(self, membership_id: int, user_id: int):
        self._pending_invite_for(membership_id, user_id, "reject")
        self.supabase.table("league_memberships")\
            .delete()\
            .eq("membership_id", membership_id)\
            .execute()
