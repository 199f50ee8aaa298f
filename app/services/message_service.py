from __future__ import annotations

import logging

from fastapi import Depends
from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session, joinedload

from app.core.errors import ForbiddenError, NotFoundError
from app.db.session import get_session
from app.models.message import Message
from app.models.trade import Trade
from app.models.user import User
from app.schemas.message import MessageCreate

logger = logging.getLogger(__name__)


class MessageService:
    """Per-trade message threads with read tracking."""

    def __init__(self, db: Session):
        self.db = db

    def _get_trade(self, trade_id: str) -> Trade:
        trade = self.db.get(Trade, trade_id)
        if not trade:
            raise NotFoundError("trade_not_found", "Trade not found.")
        return trade

    def send(self, payload: MessageCreate, sender: User) -> Message:
        trade = self._get_trade(payload.trade_id)
        if not trade.is_participant(sender.id):
            raise ForbiddenError("not_participant", "Not authorized to send messages in this trade.")

        message = Message(trade_id=trade.id, sender_id=sender.id, content=payload.content)
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)
        logger.info("Message %s sent on trade %s by %s", message.id, trade.id, sender.id)
        return message

    def list_for_trade(self, trade_id: str, actor: User) -> list[Message]:
        """Return the thread oldest first and mark the counterpart's messages read.

        The returned messages carry their read state from before this call.
        Administrators can read any thread without marking it.
        """
        trade = self._get_trade(trade_id)
        participant = trade.is_participant(actor.id)
        if not participant and not actor.is_admin:
            raise ForbiddenError("not_participant", "Not authorized to view these messages.")

        stmt = (
            select(Message)
            .options(joinedload(Message.sender))
            .where(Message.trade_id == trade.id)
            .order_by(Message.created_at.asc())
        )
        messages = list(self.db.execute(stmt).scalars().all())

        if participant:
            result = self.db.execute(
                update(Message)
                .where(
                    Message.trade_id == trade.id,
                    Message.sender_id != actor.id,
                    Message.is_read.is_(False),
                )
                .values(is_read=True)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
            if result.rowcount:
                logger.debug("Marked %d message(s) read on trade %s", result.rowcount, trade.id)
        return messages

    def unread_count_for_user(self, user: User) -> int:
        stmt = (
            select(func.count(Message.id))
            .join(Trade, Message.trade_id == Trade.id)
            .where(
                or_(Trade.requester_id == user.id, Trade.receiver_id == user.id),
                Message.sender_id != user.id,
                Message.is_read.is_(False),
            )
        )
        return self.db.execute(stmt).scalar_one()


def get_message_service(db: Session = Depends(get_session)) -> MessageService:
    return MessageService(db)
