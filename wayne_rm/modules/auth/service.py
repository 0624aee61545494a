import hashlib
import logging
import time
from supabase import Client
from wayne_rm.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    VerifyOtpRequest, MessageResponse
)
from wayne_rm.core.validation import validate_password
from wayne_rm.config.settings import settings
from fastapi import HTTPException
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_MAX_SIZE = 500

RESET_PASSWORD_MESSAGE = "If the email is registered, a password reset link has been sent"


def clear_auth_cache():
    _AUTH_USER_CACHE.clear()


def _check_password(password: str):
    error = validate_password(password)
    if error:
        raise HTTPException(status_code=400, detail=error)


class AuthService:
    def __init__(self, supabase: Client, service_client: Optional[Client] = None):
        self.supabase = supabase
        self.service_client = service_client

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Register a new user using Supabase Auth; the profile row is created by a DB trigger"""
        _check_password(register_data.password)
        try:
            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "email_redirect_to": f"{settings.site_url.rstrip('/')}/",
                    "data": {"full_name": register_data.full_name}
                }
            })

            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to register user")

            logger.info(f"User registered: {auth_response.user.id}")
            return RegisterResponse(
                user_id=auth_response.user.id,
                email=auth_response.user.email or register_data.email,
                message="User registered successfully. Check your email to confirm the account."
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            logger.error(f"Registration failed: {error_message}")
            raise HTTPException(status_code=500, detail="Registration failed")

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid credentials")

            return TokenResponse(
                access_token=auth_response.session.access_token,
                refresh_token=auth_response.session.refresh_token,
                token_type="bearer",
                user_id=auth_response.user.id,
                email=auth_response.user.email or login_data.email
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            logger.error(f"Login failed: {error_message}")
            raise HTTPException(status_code=500, detail="Login failed")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "app_metadata": user.app_metadata or {},
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + settings.auth_cache_ttl_sec)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def logout(self, token: str) -> bool:
        """Logout user using Supabase Auth"""
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
        try:
            # Supabase Auth tokens are stateless JWTs, so logout is mainly client-side
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Sign out failed: {e}")
            return False

    def forgot_password(self, email: str) -> MessageResponse:
        """Send a password reset link; the answer does not reveal whether the email exists"""
        try:
            self.supabase.auth.reset_password_for_email(
                email,
                {"redirect_to": f"{settings.site_url.rstrip('/')}/reset-password"}
            )
        except Exception as e:
            logger.warning(f"Password reset request failed for {email}: {e}")
        return MessageResponse(message=RESET_PASSWORD_MESSAGE)

    def update_password(self, user_id: str, password: str) -> MessageResponse:
        """Set a new password through the admin API (requires service role key)"""
        _check_password(password)
        if self.service_client is None:
            raise HTTPException(
                status_code=500,
                detail="Service role key not configured. Cannot update password."
            )
        try:
            response = self.service_client.auth.admin.update_user_by_id(
                user_id,
                {"password": password}
            )
            if not response.user:
                raise HTTPException(status_code=404, detail="User not found")
            logger.info(f"Password updated for user {user_id}")
            return MessageResponse(message="Password updated successfully")
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Password update failed for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Could not update the password")

    def verify_otp(self, data: VerifyOtpRequest) -> TokenResponse:
        """Confirm a signup/recovery/magic link token and return the resulting session"""
        try:
            auth_response = self.supabase.auth.verify_otp({
                "email": data.email,
                "token": data.token,
                "type": data.type
            })
        except Exception as e:
            logger.warning(f"OTP verification failed for {data.email}: {e}")
            raise HTTPException(status_code=400, detail="Invalid or expired verification code")

        if not auth_response.user or not auth_response.session:
            raise HTTPException(status_code=400, detail="Invalid or expired verification code")
        return TokenResponse(
            access_token=auth_response.session.access_token,
            refresh_token=auth_response.session.refresh_token,
            user_id=auth_response.user.id,
            email=auth_response.user.email or data.email
        )
