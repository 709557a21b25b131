# app/core/auth.py
import logging

from fastapi import Depends, Header
from supabase import AuthError, Client

from app.core.config import Settings, get_settings
from app.core.errors import InvalidToken, Unauthorized, error_text
from app.core.supabase_client import get_supabase, supabase_for_token
from app.schemas.user import CurrentUser, Identity

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: str | None) -> str | None:
    """
    Pull the token out of an Authorization header value.

    The token is the second whitespace-delimited segment
    ("Bearer <token>"); anything shorter yields None.
    """
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) < 2:
        return None
    return parts[1]


def get_bearer_token(
    authorization: str | None = Header(default=None),
) -> str | None:
    """FastAPI dependency: the raw bearer token, or None when absent."""
    return extract_bearer_token(authorization)


def resolve_identity(client: Client, token: str) -> CurrentUser:
    """
    Resolve a bearer token to a Supabase Auth user.

    Raises:
        InvalidToken(401): if Supabase rejects the token or returns no user.
    """
    try:
        response = client.auth.get_user(token)
    except AuthError as exc:
        logger.info("Token rejected by Supabase Auth: %s", error_text(exc))
        raise InvalidToken(details=error_text(exc)) from exc

    user = getattr(response, "user", None)
    if user is None:
        raise InvalidToken()

    raw = user.model_dump(mode="json")
    return CurrentUser(token=token, user=Identity.model_validate(raw), raw=raw)


def get_current_user(
    token: str | None = Depends(get_bearer_token),
    client: Client = Depends(get_supabase),
) -> CurrentUser | None:
    """
    Resolve the current user from the Authorization header.

    Flow:
      1. If no bearer token => guest => return None.
      2. Ask Supabase Auth who the token belongs to.
      3. Reject unknown / expired tokens with 401.

    Returns:
        CurrentUser if authenticated, else None for guests.
    """
    if token is None:
        return None
    return resolve_identity(client, token)


def require_auth(user: CurrentUser | None = Depends(get_current_user)) -> CurrentUser:
    """
    Enforce authentication.

    If attached to a route, guests (missing token) are rejected with 401
    before the handler runs.

    Raises:
        Unauthorized(401): if no token was supplied.
    """
    if user is None:
        raise Unauthorized()
    return user


def require_session(
    token: str | None = Depends(get_bearer_token),
    client: Client = Depends(get_supabase),
) -> CurrentUser:
    """
    Guard for the session and profile endpoints.

    Same as `require_auth`, but a rejected token answers a bare
    "Invalid token" with no provider details.
    """
    if token is None:
        raise Unauthorized()
    try:
        return resolve_identity(client, token)
    except InvalidToken as exc:
        raise InvalidToken("Invalid token") from exc


def get_user_supabase(
    current_user: CurrentUser = Depends(require_auth),
    settings: Settings = Depends(get_settings),
) -> Client:
    """FastAPI dependency returning a client scoped to the authenticated caller."""
    return supabase_for_token(settings, current_user.token)
