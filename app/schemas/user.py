from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.models.user import User, UserRole
from app.schemas.common import UTCDateTime


class UserBase(BaseModel):
    email: EmailStr
    name: str = Field(min_length=1, max_length=50)
    avatar_url: Optional[str] = Field(default=None, alias="avatar")
    bio: Optional[str] = Field(default=None, max_length=500)
    location: Optional[str] = Field(default=None, max_length=255)

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class UserOut(UserBase):
    id: str
    role: UserRole
    is_active: bool = Field(alias="isActive")
    created_at: UTCDateTime = Field(alias="createdAt")
    updated_at: Optional[UTCDateTime] = Field(default=None, alias="updatedAt")

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        extra="forbid",
        use_enum_values=True,
    )


class UserPublic(BaseModel):
    """Profile fields visible to any visitor."""

    id: str
    name: str
    avatar_url: Optional[str] = Field(default=None, alias="avatar")
    bio: Optional[str] = None
    location: Optional[str] = None
    created_at: UTCDateTime = Field(alias="createdAt")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class UserLite(BaseModel):
    id: str
    name: str
    avatar_url: Optional[str] = Field(default=None, alias="avatar")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class UserCreate(UserBase):
    password: str = Field(repr=False)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name is required")
        return value

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, value: str) -> str:
        if len(value) < 8:
            raise ValueError("password must be at least 8 characters")
        if not any(char.isalpha() for char in value) or not any(char.isdigit() for char in value):
            raise ValueError("password must contain letters and digits")
        return value


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(repr=False)

    model_config = ConfigDict(extra="forbid")


class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    avatar_url: Optional[str] = Field(default=None, alias="avatar")
    bio: Optional[str] = Field(default=None, max_length=500)
    location: Optional[str] = Field(default=None, max_length=255)

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


def user_to_schema(user: User) -> UserOut:
    """Convert a SQLAlchemy User instance to a UserOut schema."""
    return UserOut.model_validate(user)


def create_user_model(payload: UserCreate, password_hash: str) -> User:
    """Instantiate a User ORM object from a validated UserCreate payload."""
    return User(
        email=payload.email,
        name=payload.name,
        password_hash=password_hash,
        avatar_url=payload.avatar_url,
        bio=payload.bio,
        location=payload.location,
    )
