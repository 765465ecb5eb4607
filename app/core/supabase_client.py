# app/core/supabase_client.py
from functools import lru_cache
from typing import Any

from supabase import create_client, Client

from app.core.config import get_settings

settings = get_settings()


@lru_cache
def supabase_public() -> Client:
    """
    Supabase client built from the anon key (RLS applies).

    The backend only needs it for Auth sign-up; everything else goes
    through Postgres directly.
    """
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)


def sign_up(email: str, password: str, full_name: str) -> Any | None:
    """
    Create a Supabase Auth user and return it (None if Supabase sent no user).

    `full_name` lands in the user's metadata, which the JWT later carries
    as `user_metadata.full_name`.

    Raises:
        supabase.AuthError: Supabase rejected the sign-up.
    """
    response = supabase_public().auth.sign_up(
        {
            "email": email,
            "password": password,
            "options": {"data": {"full_name": full_name}},
        }
    )
    return response.user
