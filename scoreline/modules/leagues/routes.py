from fastapi import APIRouter, Depends, Response
from scoreline.core.dependencies import get_current_user, require_permission
from scoreline.database.supabase_client import get_supabase
from scoreline.modules.auth.schemas import MessageResponse
from scoreline.modules.leagues.schemas import (
    LeagueCreate, LeagueResponse, MyLeague, LeagueDetails, MembershipActionResponse,
    InviteCodeResponse, LeagueInviteRequest, InviteCountResponse, PendingLeagueInvite
)
from scoreline.modules.leagues.service import LeagueService
from scoreline.modules.standings.schemas import StandingEntry
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/leagues", tags=["leagues"])


def get_league_service(supabase: Client = Depends(get_supabase)) -> LeagueService:
    return LeagueService(supabase)


# Invitation routes come first so /invites/... is never read as a league id

@router.get("/invites/pending", response_model=List[PendingLeagueInvite])
async def list_pending_invites(
    current_user: Dict = Depends(get_current_user),
    service: LeagueService = Depends(get_league_service)
):
    return service.list_pending_invites(current_user["user_id"])


@router.patch("/invites/{membership_id}/accept", response_model=MembershipActionResponse)
async def accept_invite(
    membership_id: int,
    current_user: Dict = Depends(get_current_user),
    service: LeagueService = Depends(get_league_service)
):
    return service.accept_invite(membership_id, current_user["user_id"])


@router.delete("/invites/{membership_id}/reject", status_code=204)
async def reject_invite(
    membership_id: int,
    current_user: Dict = Depends(get_current_user),
    service: LeagueService = Depends(get_league_service)
):
    service.reject_invite(membership_id, current_user["user_id"])


@router.post("", response_model=LeagueResponse, status_code=201)
async def create_league(
    league_data: LeagueCreate,
    user_data: Dict = Depends(require_permission("leagues:create", "Only Players can create leagues.")),
    service: LeagueService = Depends(get_league_service)
):
    """Create a private league; the caller becomes its admin"""
    return service.create_league(league_data, user_data["user_id"])


@router.get("/my-leagues", response_model=List[MyLeague])
async def list_my_leagues(
    current_user: Dict = Depends(get_current_user),
    service: LeagueService = Depends(get_league_service)
):
    return service.list_my_leagues(current_user["user_id"])


@router.post("/join/{invite_code}", response_model=MembershipActionResponse)
async def join_league(
    invite_code: str,
    user_data: Dict = Depends(require_permission("leagues:join", "Only Players can join leagues.")),
    service: LeagueService = Depends(get_league_service)
):
    """Join a league with its invite code (case-insensitive)"""
    return service.join_by_invite_code(invite_code, user_data["user_id"])


@router.get("/{league_id}", response_model=LeagueDetails)
async def get_league(
    league_id: int,
    current_user: Dict = Depends(get_current_user),
    service: LeagueService = Depends(get_league_service)
):
    return service.get_league_details(league_id, current_user["user_id"])


@router.get("/{league_id}/standings", response_model=List[StandingEntry])
async def get_league_standings(
    league_id: int,
    current_user: Dict = Depends(get_current_user),
    service: LeagueService = Depends(get_league_service)
):
    return service.get_league_standings(league_id, current_user["user_id"])


@router.delete("/{league_id}/members/{member_user_id}", response_model=MessageResponse)
async def remove_member(
    league_id: int,
    member_user_id: int,
    current_user: Dict = Depends(get_current_user),
    service: LeagueService = Depends(get_league_service)
):
    return service.remove_member(league_id, member_user_id, current_user["user_id"])


@router.patch("/{league_id}/invite-code", response_model=InviteCodeResponse)
async def regenerate_invite_code(
    league_id: int,
    current_user: Dict = Depends(get_current_user),
    service: LeagueService = Depends(get_league_service)
):
    return service.regenerate_invite_code(league_id, current_user["user_id"])


@router.post("/{league_id}/invites", response_model=InviteCountResponse)
async def invite_friends(
    league_id: int,
    body: LeagueInviteRequest,
    response: Response,
    current_user: Dict = Depends(get_current_user),
    service: LeagueService = Depends(get_league_service)
):
    """Invite accepted friends to the league (league admin only)"""
    result = service.invite_friends(league_id, body.user_ids, current_user["user_id"])
    response.status_code = 201 if result.count > 0 else 200
    return result


@router.delete("/{league_id}/membership", response_model=MessageResponse)
async def leave_league(
    league_id: int,
    current_user: Dict = Depends(get_current_user),
    service: LeagueService = Depends(get_league_service)
):
    return service.leave_league(league_id, current_user["user_id"])


@router.delete("/{league_id}", response_model=MessageResponse)
async def delete_league(
    league_id: int,
    current_user: Dict = Depends(get_current_user),
    service: LeagueService = Depends(get_league_service)
):
    return service.delete_league(league_id, current_user["user_id"])
