import logging
from datetime import timedelta
from typing import Dict, Any, Optional

from fastapi import HTTPException
from supabase import Client

from scoreline.config import settings
from scoreline.config.permissions_config import ROLE_PLAYER
from scoreline.core.email import send_email
from scoreline.core.security import (
    hash_password, verify_password, create_access_token, generate_url_token
)
from scoreline.database.errors import is_unique_violation
from scoreline.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    ResetPasswordRequest, MessageResponse
)
from scoreline.modules.users.schemas import UserResponse
from scoreline.utils.dates import utc_now, utc_now_iso, parse_iso8601_utc
from scoreline.utils.formatters import format_date_time

logger = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = "If an account with that email exists, a password reset link has been sent."


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _find_user(self, column: str, value: Any) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("users")\
            .select("*")\
            .eq(column, value)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def _check_password_policy(self, password: str):
        if len(password) < settings.password_min_length:
            raise HTTPException(
                status_code=400,
                detail=f"Password must be at least {settings.password_min_length} characters."
            )

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Create a PLAYER account and email a verification link"""
        self._check_password_policy(register_data.password)
        email = register_data.email.strip().lower()

        if self._find_user("email", email):
            raise HTTPException(status_code=409, detail="Email already registered.")

        verification_token = generate_url_token()
        try:
            result = self.supabase.table("users").insert({
                "name": register_data.name,
                "email": email,
                "password_hash": hash_password(register_data.password),
                "role": ROLE_PLAYER,
                "email_verified": False,
                "email_verification_token": verification_token,
            }).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise HTTPException(status_code=409, detail="Email already registered.")
            raise

        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to register user")

        user = result.data[0]
        logger.info(f"Registered user {user['user_id']}")
        send_email(
            email,
            "Verify your email address",
            f"Hi {user['name']},\n\nConfirm your email address by opening:\n"
            f"{settings.frontend_url}/verify-email?token={verification_token}\n",
            to_name=user["name"],
        )
        return RegisterResponse(
            message="User registered successfully!",
            user=UserResponse(**user)
        )

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Check credentials and issue an access token"""
        user = self._find_user("email", login_data.email.strip().lower())
        if not user or not verify_password(login_data.password, user.get("password_hash")):
            raise HTTPException(status_code=401, detail="Invalid credentials.")

        return TokenResponse(
            message="Login successful!",
            token=create_access_token(user),
            user=UserResponse(**user)
        )

    def forgot_password(self, email: str) -> MessageResponse:
        """Store a reset token and email it. The response never reveals whether the account exists."""
        user = self._find_user("email", email.strip().lower())
        if not user:
            logger.info("Password reset requested for unknown email")
            return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)

        reset_token = generate_url_token()
        expires = utc_now() + timedelta(minutes=settings.password_reset_ttl_minutes)
        self.supabase.table("users")\
            .update({
                "password_reset_token": reset_token,
                "password_reset_expires": expires.isoformat(),
                "updated_at": utc_now_iso(),
            })\
            .eq("user_id", user["user_id"])\
            .execute()

        send_email(
            user["email"],
            "Reset your password",
            f"Hi {user['name']},\n\nReset your password before "
            f"{format_date_time(expires)} by opening:\n"
            f"{settings.frontend_url}/reset-password/{reset_token}\n",
            to_name=user["name"],
        )
        return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)

    def reset_password(self, reset_data: ResetPasswordRequest) -> MessageResponse:
        self._check_password_policy(reset_data.password)
        user = self._find_user("password_reset_token", reset_data.token)
        expires = parse_iso8601_utc(user.get("password_reset_expires")) if user else None
        if not user or expires is None or utc_now() > expires:
            raise HTTPException(status_code=400, detail="Password reset token is invalid or has expired.")

        self.supabase.table("users")\
            .update({
                "password_hash": hash_password(reset_data.password),
                "password_reset_token": None,
                "password_reset_expires": None,
                "updated_at": utc_now_iso(),
            })\
            .eq("user_id", user["user_id"])\
            .execute()
        logger.info(f"Password reset for user {user['user_id']}")
        return MessageResponse(message="Password has been reset successfully.")

    def verify_email(self, token: str) -> MessageResponse:
        user = self._find_user("email_verification_token", token) if token else None
        if not user:
            raise HTTPException(status_code=400, detail="Verification token is invalid.")

        self.supabase.table("users")\
            .update({
                "email_verified": True,
                "email_verification_token": None,
                "updated_at": utc_now_iso(),
            })\
            .eq("user_id", user["user_id"])\
            .execute()
        logger.info(f"Email verified for user {user['user_id']}")
        return MessageResponse(message="Email verified successfully.")
