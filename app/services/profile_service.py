from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.models.user import User
from app.schemas.user import UserOut, UserPublic, UserUpdate


def _get_user(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("user_not_found", "User not found.")
    return user


def get_profile(db: Session, user_id: str) -> UserOut:
    """Return the full profile of the given user."""
    return UserOut.model_validate(_get_user(db, user_id))


def get_public_profile(db: Session, user_id: str) -> UserPublic:
    """Return the fields of a profile that any visitor may see."""
    return UserPublic.model_validate(_get_user(db, user_id))


def update_profile(db: Session, user_id: str, payload: UserUpdate) -> UserOut:
    """Update profile fields for the given user."""
    user = _get_user(db, user_id)

    for field, value in payload.model_dump(exclude_unset=True).items():
        if field == "name" and value is None:
            continue
        setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return UserOut.model_validate(user)
