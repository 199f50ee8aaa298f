from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.common import UTCDateTime
from app.schemas.user import UserLite

MESSAGE_MAX_LENGTH = 1000


class MessageCreate(BaseModel):
    trade_id: str = Field(alias="tradeId", min_length=1)
    content: str

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    @field_validator("content")
    @classmethod
    def validate_content(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("message content is required")
        if len(value) > MESSAGE_MAX_LENGTH:
            raise ValueError(f"message cannot exceed {MESSAGE_MAX_LENGTH} characters")
        return value


class MessageOut(BaseModel):
    id: str
    trade_id: str = Field(alias="tradeId")
    sender_id: str = Field(alias="senderId")
    sender: Optional[UserLite] = None
    content: str
    is_read: bool = Field(alias="isRead")
    created_at: UTCDateTime = Field(alias="createdAt")

    model_config = ConfigDict(populate_by_name=True, from_attributes=True, extra="forbid")


class UnreadCount(BaseModel):
    unread_count: int = Field(alias="unreadCount")

    model_config = ConfigDict(populate_by_name=True)
