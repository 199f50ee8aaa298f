from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.trade import TradeStatus
from app.schemas.book import BookLite
from app.schemas.common import UTCDateTime
from app.schemas.user import UserLite

TradeDirection = Literal["incoming", "outgoing", "both"]
TradeDecision = Literal["accepted", "rejected"]
TradeParty = Literal["requester", "receiver"]


class TradeCreate(BaseModel):
    book_offered: str = Field(alias="bookOffered", min_length=1)
    book_requested: str = Field(alias="bookRequested", min_length=1)
    message: str = Field(default="", max_length=500)

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class TradeUpdate(BaseModel):
    """Either a status change or a single confirmation flag."""

    status: Optional[Literal["accepted", "rejected", "cancelled"]] = None
    requester_confirmed: Optional[bool] = Field(default=None, alias="requesterConfirmed")
    receiver_confirmed: Optional[bool] = Field(default=None, alias="receiverConfirmed")

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    @field_validator("requester_confirmed", "receiver_confirmed")
    @classmethod
    def confirmations_are_final(cls, value: Optional[bool]) -> Optional[bool]:
        if value is False:
            raise ValueError("confirmations cannot be withdrawn")
        return value

    @model_validator(mode="after")
    def validate_single_action(self) -> "TradeUpdate":
        provided = sum(
            value is not None
            for value in (self.status, self.requester_confirmed, self.receiver_confirmed)
        )
        if provided != 1:
            raise ValueError("provide exactly one of status, requesterConfirmed or receiverConfirmed")
        return self


class TradeOut(BaseModel):
    id: str
    requester_id: str = Field(alias="requesterId")
    receiver_id: str = Field(alias="receiverId")
    requester: Optional[UserLite] = None
    receiver: Optional[UserLite] = None
    book_offered: Optional[BookLite] = Field(default=None, alias="bookOffered")
    book_requested: Optional[BookLite] = Field(default=None, alias="bookRequested")
    status: TradeStatus
    message: str = ""
    requester_confirmed: bool = Field(alias="requesterConfirmed")
    receiver_confirmed: bool = Field(alias="receiverConfirmed")
    completed_at: Optional[UTCDateTime] = Field(default=None, alias="completedAt")
    created_at: UTCDateTime = Field(alias="createdAt")
    updated_at: Optional[UTCDateTime] = Field(default=None, alias="updatedAt")

    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        extra="forbid",
        use_enum_values=True,
    )


class TradeStats(BaseModel):
    pending: int = 0
    accepted: int = 0
    completed: int = 0
    rejected: int = 0
    total: int = 0
