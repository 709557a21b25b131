# app/services/auth_service.py
import logging

from fastapi import status
from supabase import Client

from app.core.config import Settings
from app.core.errors import UpstreamFailure, upstream_errors
from app.schemas.user import (
    Credentials,
    CurrentUser,
    Identity,
    LoginResponse,
    MagicLinkRequest,
    MagicLinkResponse,
    MessageResponse,
    OAuthResponse,
    RegisterRequest,
    SessionInfo,
    SessionResponse,
    UserSummary,
)

logger = logging.getLogger(__name__)


class LoginFailed(UpstreamFailure):
    """Supabase rejected the credentials; answered as 401 rather than 400."""

    status_code = status.HTTP_401_UNAUTHORIZED


class AuthService:
    """
    Thin wrapper over Supabase Auth.

    Responsibilities:
      - sign-up / sign-in (password, magic link, OAuth)
      - session introspection and sign-out
      - map Supabase Auth errors to the API error envelope

    Registration does not sign the user in; Supabase may require the
    address to be confirmed first.
    """

    def register(self, client: Client, payload: RegisterRequest) -> MessageResponse:
        with upstream_errors("Registration failed"):
            client.auth.sign_up(
                {
                    "email": payload.email,
                    "password": payload.password,
                    "options": {"data": {"full_name": "", "avatar_url": ""}},
                }
            )

        logger.info("Registered new account for %s", payload.email)
        return MessageResponse(message="Registration successful")

    def login(self, client: Client, payload: Credentials) -> LoginResponse:
        """
        Password sign-in.

        Raises:
            LoginFailed(401): if Supabase rejects the credentials.
        """
        with upstream_errors("Login failed", error_cls=LoginFailed):
            response = client.auth.sign_in_with_password(
                {"email": payload.email, "password": payload.password}
            )

        if response.user is None:
            raise LoginFailed("Login failed")

        identity = Identity.model_validate(response.user.model_dump(mode="json"))
        session = response.session.model_dump(mode="json") if response.session else None
        return LoginResponse(
            message="Login successful",
            user=UserSummary.from_identity(identity),
            session=session,
        )

    def send_magic_link(
        self,
        client: Client,
        settings: Settings,
        payload: MagicLinkRequest,
    ) -> MagicLinkResponse:
        """Ask Supabase to email a one-time login link; the link never comes back here."""
        with upstream_errors("Failed to send magic link"):
            client.auth.sign_in_with_otp(
                {
                    "email": payload.email,
                    "options": {
                        "should_create_user": True,
                        "email_redirect_to": settings.auth_callback_url,
                    },
                }
            )

        return MagicLinkResponse(message="Magic link sent successfully", email=payload.email)

    def start_oauth(self, client: Client, settings: Settings) -> OAuthResponse:
        with upstream_errors("Failed to initiate Google login"):
            response = client.auth.sign_in_with_oauth(
                {
                    "provider": settings.OAUTH_PROVIDER,
                    "options": {"redirect_to": settings.auth_callback_url},
                }
            )

        return OAuthResponse(message="Google OAuth initiated", redirectUrl=response.url)

    def get_session(self, current_user: CurrentUser) -> SessionResponse:
        return SessionResponse(
            session=SessionInfo(access_token=current_user.token, user=current_user.raw),
            user=UserSummary.from_identity(current_user.user),
        )

    def logout(self, client: Client, token: str | None) -> MessageResponse:
        """
        Revoke every session of the token's user.

        Without a token there is nothing to revoke and logout still succeeds.
        """
        if token:
            with upstream_errors("Logout failed"):
                client.auth.admin.sign_out(token, "global")

        return MessageResponse(message="Logout successful")