# app/routers/auth.py
from fastapi import APIRouter, Depends, status
from supabase import Client

from app.core.auth import get_bearer_token, require_session
from app.core.config import Settings, get_settings
from app.core.errors import BoundaryRoute
from app.core.supabase_client import get_auth_supabase, get_supabase
from app.repositories.profile_repo import ProfileRepository
from app.schemas.user import (
    Credentials,
    CurrentUser,
    LoginResponse,
    MagicLinkRequest,
    MagicLinkResponse,
    MessageResponse,
    OAuthResponse,
    ProfileResponse,
    ProfileUpdate,
    ProfileUpdateResponse,
    RegisterRequest,
    SessionResponse,
)
from app.services.auth_service import AuthService
from app.services.profile_service import ProfileService

router = APIRouter(prefix="/auth", tags=["Auth"], route_class=BoundaryRoute)

service = AuthService()
profile_repo = ProfileRepository()
profile_service = ProfileService(profile_repo)


# -------- Sign-up / sign-in --------


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(
    payload: RegisterRequest,
    client: Client = Depends(get_auth_supabase),
):
    """
    Create an account with email + password.

    No session is returned; log in separately.
    """
    return service.register(client, payload)


@router.post("/login", response_model=LoginResponse)
def login(
    payload: Credentials,
    client: Client = Depends(get_auth_supabase),
):
    """
    Password sign-in. Returns a user summary and the Supabase session.
    """
    return service.login(client, payload)


@router.post("/magic-link", response_model=MagicLinkResponse)
def magic_link(
    payload: MagicLinkRequest,
    client: Client = Depends(get_auth_supabase),
    settings: Settings = Depends(get_settings),
):
    """
    Email a one-time login link. Unknown addresses get an account.
    """
    return service.send_magic_link(client, settings, payload)


@router.post("/google", response_model=OAuthResponse)
def google_login(
    client: Client = Depends(get_auth_supabase),
    settings: Settings = Depends(get_settings),
):
    """
    Start the OAuth flow; the client should navigate to `redirectUrl`.
    """
    return service.start_oauth(client, settings)


# -------- Session --------


@router.get("/session", response_model=SessionResponse)
def read_session(current_user: CurrentUser = Depends(require_session)):
    """
    Return the token's session and user ("whoami").

    Auth:
      - Requires valid Supabase access token.
    """
    return service.get_session(current_user)


@router.post("/logout", response_model=MessageResponse)
def logout(
    token: str | None = Depends(get_bearer_token),
    client: Client = Depends(get_supabase),
):
    """
    Sign the token's user out everywhere.

    Calling without a token is a successful no-op.
    """
    return service.logout(client, token)


# -------- Self profile --------


@router.get("/profile", response_model=ProfileResponse)
def read_profile(
    client: Client = Depends(get_supabase),
    current_user: CurrentUser = Depends(require_session),
):
    """
    Return the authenticated user's profile.

    Users without a profile row get values from their Auth metadata.
    """
    return profile_service.get_profile(client, current_user)


@router.put("/profile", response_model=ProfileUpdateResponse)
def update_profile(
    payload: ProfileUpdate,
    client: Client = Depends(get_supabase),
    current_user: CurrentUser = Depends(require_session),
):
    """
    Create or update the authenticated user's profile.

    Auth:
      - Requires valid Supabase access token.
    """
    return profile_service.update_profile(client, current_user, payload)
