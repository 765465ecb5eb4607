# app/services/profile_service.py
import logging
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session
from supabase import AuthError

from app.core.supabase_client import sign_up
from app.models.profile import Profile
from app.repositories.profile_repo import ProfileRepository
from app.schemas.profile import RegisterRequest

logger = logging.getLogger(__name__)


class ProfileService:
    """
    Business logic for Profile.

    Responsibilities:
      - sign customers up with Supabase Auth
      - mirror the new identity into public.profiles
    """

    def __init__(self, repo: ProfileRepository):
        self.repo = repo

    def get_me(self, current_user: Profile) -> Profile:
        """Return the current authenticated profile."""
        return current_user

    def register(self, session: Session, payload: RegisterRequest) -> Profile:
        """
        Create the Supabase Auth user, then its profile row (role 'user').

        Raises:
            HTTPException(400): Supabase rejected the sign-up.
            HTTPException(502): Supabase returned no user.
        """
        try:
            user = sign_up(payload.email, payload.password, payload.full_name)
        except AuthError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=exc.message,
            ) from exc

        if user is None:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Sign-up did not return a user",
            )

        user_id = uuid.UUID(str(user.id))
        existing = self.repo.get_by_id(session, user_id)
        if existing is not None:
            return existing

        logger.info("Registered new customer %s", payload.email)
        return self.repo.create(
            session,
            Profile(
                id=user_id,
                email=payload.email,
                full_name=payload.full_name,
                role="user",
            ),
        )
