from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.user import UserOut


class UserPage(BaseModel):
    users: list[UserOut]
    page: int
    pages: int
    total: int


class UserActivation(BaseModel):
    id: str
    name: str
    email: str
    is_active: bool = Field(alias="isActive")
    message: str

    model_config = ConfigDict(populate_by_name=True)


class UserCounts(BaseModel):
    total: int
    active: int
    new_this_week: int = Field(alias="newThisWeek")

    model_config = ConfigDict(populate_by_name=True)


class BookCounts(BaseModel):
    total: int
    available: int


class TradeCounts(BaseModel):
    total: int
    completed: int
    pending: int
    by_status: dict[str, int] = Field(alias="byStatus")

    model_config = ConfigDict(populate_by_name=True)


class ReportCounts(BaseModel):
    pending: int


class PlatformStats(BaseModel):
    users: UserCounts
    books: BookCounts
    trades: TradeCounts
    reports: ReportCounts
    books_by_genre: dict[str, int] = Field(alias="booksByGenre")

    model_config = ConfigDict(populate_by_name=True)
