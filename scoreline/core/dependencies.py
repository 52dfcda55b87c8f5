"""
Core dependencies for route protection and role checking
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from scoreline.config.permissions_config import ROLE_ADMIN, role_has_permission
from scoreline.core.security import decode_access_token
from scoreline.database.supabase_client import get_supabase
from supabase import Client
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

# auto_error disabled so a missing header is reported as 401 rather than FastAPI's default
security = HTTPBearer(auto_error=False)

USER_PUBLIC_COLUMNS = (
    "user_id, name, email, role, team_name, avatar_url, email_verified, subscription_tier, "
    "notifies_new_round, notifies_deadline_reminder, notifies_round_results, created_at, updated_at"
)


def get_current_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, no token"
        )
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_current_token),
    supabase: Client = Depends(get_supabase)
) -> Dict[str, Any]:
    """Verify the JWT and load the caller's current row from the users table.

    The role is always taken from the database, never from the token payload,
    so demotions and deletions apply to tokens that were issued earlier.
    """
    payload = decode_access_token(token)
    if not payload or "user_id" not in payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, token failed"
        )
    result = supabase.table("users")\
        .select(USER_PUBLIC_COLUMNS)\
        .eq("user_id", payload["user_id"])\
        .limit(1)\
        .execute()
    if not result.data:
        logger.warning(f"Token for unknown user {payload['user_id']}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, user not found"
        )
    return result.data[0]


def is_admin(user_data: Dict[str, Any]) -> bool:
    return user_data.get("role") == ROLE_ADMIN


def require_admin(user_data: Dict = Depends(get_current_user)) -> Dict[str, Any]:
    """Dependency that only lets ADMIN users through"""
    if not is_admin(user_data):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized as an admin"
        )
    return user_data


def require_permission(required_permission: str, detail: Optional[str] = None):
    """Factory function to create a role permission check dependency"""
    def check_permission(user_data: Dict = Depends(get_current_user)) -> Dict[str, Any]:
        if not role_has_permission(user_data.get("role"), required_permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=detail or f"Insufficient permissions. Required: {required_permission}"
            )
        return user_data
    return check_permission
