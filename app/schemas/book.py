from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.book import BookCondition, BookGenre
from app.schemas.common import UTCDateTime
from app.schemas.user import UserLite


def _clean_looking_for(value: Optional[list[str]]) -> Optional[list[str]]:
    if value is None:
        return None
    return [item.strip() for item in value if item and item.strip()]


class BookBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    author: str = Field(min_length=1, max_length=100)
    isbn: Optional[str] = Field(default=None, max_length=32)
    genre: BookGenre
    condition: BookCondition
    description: str = Field(default="", max_length=1000)
    cover_image: str = Field(default="", alias="coverImage", max_length=512)
    looking_for: list[str] = Field(default_factory=list, alias="lookingFor")

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class BookCreate(BookBase):
    @field_validator("title", "author")
    @classmethod
    def strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("looking_for")
    @classmethod
    def clean_looking_for(cls, value: list[str]) -> list[str]:
        return _clean_looking_for(value) or []


class BookUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    author: Optional[str] = Field(default=None, min_length=1, max_length=100)
    isbn: Optional[str] = Field(default=None, max_length=32)
    genre: Optional[BookGenre] = None
    condition: Optional[BookCondition] = None
    description: Optional[str] = Field(default=None, max_length=1000)
    cover_image: Optional[str] = Field(default=None, alias="coverImage", max_length=512)
    looking_for: Optional[list[str]] = Field(default=None, alias="lookingFor")
    is_available: Optional[bool] = Field(default=None, alias="isAvailable")

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    @field_validator("title", "author")
    @classmethod
    def strip_provided(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("looking_for")
    @classmethod
    def clean_looking_for(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        return _clean_looking_for(value)


class BookOut(BookBase):
    id: str
    owner_id: str = Field(alias="ownerId")
    owner: Optional[UserLite] = None
    is_available: bool = Field(alias="isAvailable")
    views: int
    created_at: UTCDateTime = Field(alias="createdAt")
    updated_at: Optional[UTCDateTime] = Field(default=None, alias="updatedAt")

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        extra="forbid",
        use_enum_values=True,
    )


class BookLite(BaseModel):
    id: str
    title: str
    author: str
    cover_image: str = Field(default="", alias="coverImage")
    condition: BookCondition
    owner_id: str = Field(alias="ownerId")
    is_available: bool = Field(alias="isAvailable")

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )


class BookPage(BaseModel):
    books: list[BookOut]
    page: int
    pages: int
    total: int
