# app/routers/profiles.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_auth
from app.database import get_session
from app.models.profile import Profile
from app.repositories.profile_repo import ProfileRepository
from app.schemas.profile import ProfileRead, RegisterRequest
from app.services.profile_service import ProfileService

router = APIRouter(tags=["Profiles"])

repo = ProfileRepository()
service = ProfileService(repo)


@router.post(
    "/auth/register",
    response_model=ProfileRead,
    status_code=status.HTTP_201_CREATED,
)
def register(
    payload: RegisterRequest,
    session: Session = Depends(get_session),
):
    """
    Sign up with Supabase Auth and create the profile row.

    The client logs in afterwards through Supabase directly.
    """
    return service.register(session, payload)


@router.get("/profiles/me", response_model=ProfileRead)
def read_me(current_user: Profile = Depends(require_auth)):
    """
    Return the authenticated user's profile.

    `role` tells the client whether to open /admin or /dashboard.
    """
    return service.get_me(current_user)
