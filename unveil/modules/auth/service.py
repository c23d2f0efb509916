import hashlib
import logging
import time
from supabase import Client
from unveil.database.supabase_client import SupabaseClient
from unveil.modules.auth.schemas import LoginRequest, MagicLinkRequest, RegisterRequest, TokenResponse, RegisterResponse
from fastapi import HTTPException
from typing import Callable, Dict, Any, Optional

logger = logging.getLogger(__name__)

# Token -> user lookups are cached briefly; one page load fans out into many
# API calls carrying the same bearer token.
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def _cache_key(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def _cached_user(token: str) -> Optional[Dict[str, Any]]:
    entry = _AUTH_USER_CACHE.get(_cache_key(token))
    if entry is None:
        return None
    user_data, expiry = entry
    if time.monotonic() >= expiry:
        _AUTH_USER_CACHE.pop(_cache_key(token), None)
        return None
    return user_data


def _purge_expired(now: float) -> None:
    for key in [key for key, (_, expiry) in _AUTH_USER_CACHE.items() if expiry <= now]:
        del _AUTH_USER_CACHE[key]


def _remember_user(token: str, user_data: Dict[str, Any]) -> None:
    now = time.monotonic()
    if len(_AUTH_USER_CACHE) >= _AUTH_CACHE_MAX_SIZE:
        _purge_expired(now)
    if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
        _AUTH_USER_CACHE[_cache_key(token)] = (user_data, now + _AUTH_CACHE_TTL_SEC)


def forget_token(token: str) -> None:
    _AUTH_USER_CACHE.pop(_cache_key(token), None)


def clear_auth_cache() -> None:
    _AUTH_USER_CACHE.clear()


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Return the token from an Authorization header. Missing header is a 401."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Authorization required")
    token = authorization.replace("Bearer ", "", 1).strip()
    if not token:
        raise HTTPException(status_code=401, detail="Authorization required")
    return token


def _user_payload(user) -> Dict[str, Any]:
    """Plain dict handed to routes as user_data"""
    metadata = user.user_metadata or {}
    return {
        "id": user.id,
        "email": user.email,
        "phone": getattr(user, "phone", None) or metadata.get("phone"),
        "full_name": metadata.get("full_name"),
        "user_metadata": metadata,
        "app_metadata": user.app_metadata or {},
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


class AuthService:
    def __init__(self, supabase: Client, session_client_factory: Optional[Callable[[], Client]] = None):
        # Shared client: token lookups only, it never holds a user session
        self.supabase = supabase
        self.new_session_client = session_client_factory or SupabaseClient.create_session_client

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """
        Create a password account (hosts).

        full_name and phone travel in user_metadata; the database trigger
        copies them into public.users.
        """
        user_metadata = {}
        if register_data.full_name:
            user_metadata["full_name"] = register_data.full_name
        if register_data.phone:
            user_metadata["phone"] = register_data.phone

        session_auth = self.new_session_client().auth
        try:
            auth_response = session_auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {"data": user_metadata},
            })
            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to register user")

            logger.info(f"Registered account {auth_response.user.id}")
            return RegisterResponse(
                user_id=auth_response.user.id,
                email=auth_response.user.email or register_data.email,
                message="User registered successfully"
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e).lower()
            if "already registered" in error_message or "already exists" in error_message:
                raise HTTPException(status_code=400, detail="User already exists")
            raise HTTPException(status_code=500, detail=f"Registration failed: {str(e)}")

    def login(self, login_data: LoginRequest) -> TokenResponse:
        session_auth = self.new_session_client().auth
        try:
            auth_response = session_auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })
            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid credentials")

            return TokenResponse(
                access_token=auth_response.session.access_token,
                user_id=auth_response.user.id,
                email=auth_response.user.email or login_data.email
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e).lower()
            if "invalid" in error_message or "credentials" in error_message:
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {str(e)}")

    def send_magic_link(self, request: MagicLinkRequest) -> bool:
        """Email a one-time sign in link; unknown addresses get an account on first use"""
        options = {"should_create_user": True}
        if request.redirect_to:
            options["email_redirect_to"] = request.redirect_to
        try:
            self.new_session_client().auth.sign_in_with_otp({"email": request.email, "options": options})
            return True
        except Exception as e:
            logger.error(f"Magic link request failed: {e}")
            raise HTTPException(status_code=500, detail="Failed to send magic link")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Resolve a bearer token to the signed-in user. Any failure is a 401."""
        user_data = _cached_user(token)
        if user_data is not None:
            return user_data

        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            logger.debug(f"Token rejected by Supabase Auth: {e}")
            raise HTTPException(status_code=401, detail="Invalid authentication")
        if not user_response or not user_response.user:
            raise HTTPException(status_code=401, detail="Invalid authentication")

        user_data = _user_payload(user_response.user)
        _remember_user(token, user_data)
        return user_data

    def logout(self, token: str, admin_supabase: Client) -> bool:
        """Revoke the session behind token. The JWT itself stays valid until it expires."""
        forget_token(token)
        try:
            admin_supabase.auth.admin.sign_out(token, "local")
            return True
        except Exception as e:
            logger.warning(f"Sign out failed: {e}")
            return False
