# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - SUPABASE_URL
      - SUPABASE_SERVICE_KEY (service role key, backend only)

    Optional:
      - SUPABASE_ANON_KEY (needed for inserts made with the caller's token)
      - FRONTEND_URL (used to build magic-link / OAuth callback URLs)
      - PORT, LOG_LEVEL, CORS_ORIGINS

    Settings are frozen so a single instance can be shared safely and
    used as a cache key for the Supabase client factories.
    """

    PROJECT_NAME: str = "GoBuy API"
    API_PREFIX: str = "/api"

    # Supabase config
    SUPABASE_URL: str
    SUPABASE_SERVICE_KEY: str
    SUPABASE_ANON_KEY: str | None = None

    # Where the frontend lives; auth callbacks land on <FRONTEND_URL>/auth/callback
    FRONTEND_URL: str = "http://localhost:5173"
    OAUTH_PROVIDER: str = "google"

    # Tuple, not list: the frozen instance must stay hashable
    CORS_ORIGINS: tuple[str, ...] = ("https://gobuy-frontend.vercel.app",)

    PORT: int = 3001
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    @property
    def auth_callback_url(self) -> str:
        return f"{self.FRONTEND_URL.rstrip('/')}/auth/callback"


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
