from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.models.report import ReportReason, ReportStatus
from app.schemas.common import UTCDateTime
from app.schemas.user import UserLite


class ReportCreate(BaseModel):
    reported_user: Optional[str] = Field(default=None, alias="reportedUser")
    reported_book: Optional[str] = Field(default=None, alias="reportedBook")
    reason: ReportReason
    description: Optional[str] = Field(default=None, max_length=500)

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class ReportUpdate(BaseModel):
    status: Optional[ReportStatus] = None
    admin_note: Optional[str] = Field(default=None, alias="adminNote", max_length=500)

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    @model_validator(mode="after")
    def validate_not_empty(self) -> "ReportUpdate":
        if self.status is None and self.admin_note is None:
            raise ValueError("provide status or adminNote")
        return self


class ReportedBook(BaseModel):
    id: str
    title: str
    author: str

    model_config = ConfigDict(from_attributes=True)


class ReportOut(BaseModel):
    id: str
    reporter: Optional[UserLite] = None
    reported_user: Optional[UserLite] = Field(default=None, alias="reportedUser")
    reported_book: Optional[ReportedBook] = Field(default=None, alias="reportedBook")
    reason: ReportReason
    description: Optional[str] = None
    status: ReportStatus
    admin_note: Optional[str] = Field(default=None, alias="adminNote")
    resolved_by: Optional[UserLite] = Field(default=None, alias="resolvedBy")
    resolved_at: Optional[UTCDateTime] = Field(default=None, alias="resolvedAt")
    created_at: UTCDateTime = Field(alias="createdAt")

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )
