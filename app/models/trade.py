from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.book import Book
from app.models.user import Base, User, enum_values, utcnow


class TradeStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Trade(Base):
    """A proposed or executed book-for-book swap between two users."""

    __tablename__ = "trades"
    __table_args__ = (
        Index(
            "uq_trades_requester_book_pending",
            "requester_id",
            "book_requested_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    requester_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    receiver_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    book_offered_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("books.id", ondelete="SET NULL"),
        nullable=True,
    )
    book_requested_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("books.id", ondelete="SET NULL"),
        nullable=True,
    )
    status: Mapped[TradeStatus] = mapped_column(
        SAEnum(TradeStatus, name="trade_status", values_callable=enum_values),
        nullable=False,
        default=TradeStatus.PENDING,
        server_default=TradeStatus.PENDING.value,
        index=True,
    )
    message: Mapped[str] = mapped_column(Text, nullable=False, default="")
    requester_confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="0")
    receiver_confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="0")
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    requester: Mapped[User] = relationship("User", foreign_keys=[requester_id])
    receiver: Mapped[User] = relationship("User", foreign_keys=[receiver_id])
    book_offered: Mapped[Optional[Book]] = relationship("Book", foreign_keys=[book_offered_id])
    book_requested: Mapped[Optional[Book]] = relationship("Book", foreign_keys=[book_requested_id])

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.requester_id, self.receiver_id)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"Trade(id={self.id!r}, status={self.status.value!r})"
