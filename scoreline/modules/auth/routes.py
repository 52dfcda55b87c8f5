from fastapi import APIRouter, Depends, Request
from scoreline.config import settings
from scoreline.config.permissions_config import get_role_permissions
from scoreline.core.dependencies import get_current_user
from scoreline.core.rate_limit import limiter
from scoreline.database.supabase_client import get_supabase
from scoreline.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    CurrentUserResponse, ForgotPasswordRequest, ResetPasswordRequest, MessageResponse
)
from scoreline.modules.auth.service import AuthService
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


@router.post("/register", response_model=RegisterResponse, status_code=201)
@limiter.limit(settings.auth_rate_limit)
async def register(
    request: Request,
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new player account"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.auth_rate_limit)
async def login(
    request: Request,
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(current_user: Dict = Depends(get_current_user)):
    """Get current authenticated user and the permissions of their role (for frontend UI)."""
    return {**current_user, "permissions": get_role_permissions(current_user["role"])}


@router.post("/forgot-password", response_model=MessageResponse)
@limiter.limit(settings.auth_rate_limit)
async def forgot_password(
    request: Request,
    body: ForgotPasswordRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Email a password reset link if the account exists"""
    return service.forgot_password(body.email)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: ResetPasswordRequest,
    service: AuthService = Depends(get_auth_service)
):
    return service.reset_password(body)


@router.get("/verify-email", response_model=MessageResponse)
async def verify_email(
    token: str = "",
    service: AuthService = Depends(get_auth_service)
):
    return service.verify_email(token)
