from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_session
from app.models.user import User
from app.routers.auth import get_current_user
from app.schemas.user import UserOut, UserPublic, UserUpdate
from app.services.profile_service import get_profile, get_public_profile, update_profile

router = APIRouter(prefix="/users", tags=["profile"])


@router.get("/me", response_model=UserOut)
def read_profile(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> UserOut:
    """Return the authenticated user's profile."""
    return get_profile(db=db, user_id=current_user.id)


@router.patch("/me", response_model=UserOut)
def update_profile_me(
    payload: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> UserOut:
    """Update profile details for the authenticated user."""
    return update_profile(db=db, user_id=current_user.id, payload=payload)


@router.get("/{user_id}", response_model=UserPublic)
def read_public_profile(user_id: str, db: Session = Depends(get_session)) -> UserPublic:
    """Return another user's public profile."""
    return get_public_profile(db=db, user_id=user_id)
