# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - SUPABASE_URL
      - SUPABASE_KEY (anon key)
      - DATABASE_URL (Supabase Postgres connection string)
      - SUPABASE_JWT_SECRET (JWT signing secret from Supabase project settings)

    Optional:
      - STRIPE_SECRET_KEY (server-side; checkout returns 500 without it)
      - STRIPE_PUBLISHABLE_KEY (handed to the client for Stripe.js)
      - STRIPE_WEBHOOK_SECRET (verifies Stripe webhook signatures)
      - CLIENT_ORIGIN (storefront origin, used for CORS and redirect URLs)
    """

    PROJECT_NAME: str = "Happy Toes API"
    API_V1_STR: str = "/api/v1"
    PORT: int = 4242

    # Supabase / DB config
    SUPABASE_URL: str
    SUPABASE_KEY: str
    DATABASE_URL: str

    # JWT verification (backend-side)
    SUPABASE_JWT_SECRET: str
    SUPABASE_JWT_ALG: str = "HS256"

    # Stripe hosted checkout
    STRIPE_SECRET_KEY: str | None = None
    STRIPE_PUBLISHABLE_KEY: str | None = None
    STRIPE_WEBHOOK_SECRET: str | None = None

    # Single-page client served by Vite in development
    CLIENT_ORIGIN: str = "http://localhost:5173"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
