from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.user import User


class _EmailLookup(BaseModel):
    """Internal schema used to validate inbound email lookups."""

    email: EmailStr = Field(max_length=255)


def _validated_email(email: str) -> str:
    """Validate and normalise an email string before use in queries."""
    try:
        payload = _EmailLookup(email=email)
    except ValidationError as exc:
        # Raise a ValueError so callers can translate into domain-specific errors.
        raise ValueError("Invalid email address provided.") from exc
    return payload.email


def get_user_by_email(email: str, db: Session) -> Optional[User]:
    """
    Fetch a User using a parameterised ORM query.

    Parameters
    ----------
    email:
        Lookup email captured from user input.
    db:
        Active SQLAlchemy session.
    """

    validated_email = _validated_email(email)
    stmt = select(User).where(User.email == validated_email)
    return db.execute(stmt).scalar_one_or_none()


def get_user_by_id(user_id: str, db: Session) -> Optional[User]:
    return db.get(User, user_id)
