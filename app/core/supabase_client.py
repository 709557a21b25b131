# app/core/supabase_client.py
from functools import lru_cache

from fastapi import Depends
from supabase import Client, ClientOptions, create_client

from app.core.config import Settings, get_settings


@lru_cache
def supabase_admin(settings: Settings) -> Client:
    """
    Create a Supabase client with the service role key.

    Use cases:
      - resolving bearer tokens to users (auth.get_user)
      - sign-up / sign-in / sign-out calls to Supabase Auth
      - reads and writes that must see every row (bypass RLS)

    WARNING:
      - Never expose service role key to frontend.
      - Only backend should call this.
    """
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)


def supabase_for_token(settings: Settings, token: str) -> Client:
    """
    Create a Supabase client acting as the caller.

    Uses the anon key plus the caller's bearer token, so PostgREST applies
    row-level security as that user. Not cached: one client per request.

    Raises:
        RuntimeError: if SUPABASE_ANON_KEY is not set.
    """
    if not settings.SUPABASE_ANON_KEY:
        raise RuntimeError("Missing SUPABASE_ANON_KEY in .env")
    return create_client(
        settings.SUPABASE_URL,
        settings.SUPABASE_ANON_KEY,
        options=ClientOptions(headers={"Authorization": f"Bearer {token}"}),
    )


def get_supabase(settings: Settings = Depends(get_settings)) -> Client:
    """
    FastAPI dependency returning the administrative client.

    Usage:

        @router.get("/example")
        def example(client: Client = Depends(get_supabase)):
            ...
    """
    return supabase_admin(settings)


def supabase_session_client(settings: Settings) -> Client:
    """
    Fresh client for Auth flows that establish a session (sign-up, sign-in,
    magic link, OAuth).

    The client stores the session it receives, so it is never cached or
    shared between requests.

    Uses the implicit flow: a PKCE code verifier would be lost with this
    client, and the frontend callback expects tokens in the redirect.
    """
    return create_client(
        settings.SUPABASE_URL,
        settings.SUPABASE_SERVICE_KEY,
        options=ClientOptions(flow_type="implicit"),
    )


def get_auth_supabase(settings: Settings = Depends(get_settings)) -> Client:
    """FastAPI dependency returning a per-request client for sign-in flows."""
    return supabase_session_client(settings)
