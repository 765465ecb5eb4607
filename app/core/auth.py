# app/core/auth.py
import uuid
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlmodel import Session

from app.core.config import get_settings
from app.database import get_session
from app.models.profile import Profile
from app.repositories.profile_repo import ProfileRepository

settings = get_settings()

# Guests browse the catalog without a token, so a missing header is not an error here.
bearer_scheme = HTTPBearer(auto_error=False)

profile_repo = ProfileRepository()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify a Supabase access token and return its claims.

    Signature (SUPABASE_JWT_SECRET / SUPABASE_JWT_ALG) and `exp` are
    checked; `aud` is not.

    Raises:
        HTTPException(401): bad signature, expired or unparsable token.
    """
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.SUPABASE_JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise _unauthorized("Invalid or expired token")


def _identity_from_claims(claims: dict[str, Any]) -> tuple[uuid.UUID, str, str | None]:
    """(profile id, email, full name) carried by the token."""
    sub = claims.get("sub")
    email = claims.get("email")
    if not sub or not email:
        raise _unauthorized("Token missing sub/email")

    try:
        profile_id = uuid.UUID(sub)
    except ValueError:
        raise _unauthorized("Invalid sub in token")

    metadata = claims.get("user_metadata") or {}
    return profile_id, email, metadata.get("full_name")


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> Profile | None:
    """
    The caller's profile, or None for guests.

    The token `sub` is the profile id. A valid token without a profile
    row (sign-up mirrored late or failed) gets a customer profile
    created on the spot; admins are promoted by hand in the database.
    """
    if credentials is None:
        return None

    profile_id, email, full_name = _identity_from_claims(
        decode_access_token(credentials.credentials)
    )

    profile = profile_repo.get_by_id(session, profile_id)
    if profile is None:
        profile = profile_repo.create(
            session,
            Profile(id=profile_id, email=email, full_name=full_name, role="user"),
        )
    return profile


def require_auth(user: Profile | None = Depends(get_current_user)) -> Profile:
    """Any signed-in profile; guests get 401."""
    if user is None:
        raise _unauthorized("Authentication required")
    return user


def require_admin(user: Profile = Depends(require_auth)) -> Profile:
    """Back-office routes. Non-admins get 403."""
    if user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


def require_user(user: Profile = Depends(require_auth)) -> Profile:
    """
    Customer-only routes: cart, checkout and order history.

    Admins have no cart, so they get 403 here.
    """
    if user.role != "user":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Customer access required",
        )
    return user
