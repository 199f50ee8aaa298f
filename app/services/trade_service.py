from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.errors import ConflictError, ForbiddenError, InvalidOperationError, NotFoundError
from app.db.session import get_session
from app.models.book import Book
from app.models.trade import Trade, TradeStatus
from app.models.user import User
from app.schemas.trade import TradeCreate, TradeDecision, TradeDirection, TradeParty, TradeStats, TradeUpdate
from app.services.book_service import BookService

logger = logging.getLogger(__name__)

COUNTED_STATUSES = (
    TradeStatus.PENDING,
    TradeStatus.ACCEPTED,
    TradeStatus.COMPLETED,
    TradeStatus.REJECTED,
)


class TradeService:
    """Trade lifecycle engine.

    ``pending`` moves to ``accepted``, ``rejected`` or ``cancelled``; ``accepted``
    moves to ``completed`` once both parties have confirmed. Acceptance locks both
    books through the book registry in the same transaction as the status change.
    """

    def __init__(self, db: Session, books: BookService):
        self.db = db
        self.books = books

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _trade_query(self):
        return select(Trade).options(
            joinedload(Trade.requester),
            joinedload(Trade.receiver),
            joinedload(Trade.book_offered),
            joinedload(Trade.book_requested),
        )

    def _get_trade(self, trade_id: str) -> Trade:
        trade = self.db.execute(self._trade_query().where(Trade.id == trade_id)).scalars().first()
        if not trade:
            raise NotFoundError("trade_not_found", "Trade not found.")
        return trade

    def _ensure_participant(self, trade: Trade, actor: User, action: str) -> None:
        if not trade.is_participant(actor.id):
            raise ForbiddenError("not_participant", f"Not authorized to {action} this trade.")

    def _ensure_status(self, trade: Trade, expected: TradeStatus, action: str) -> None:
        if trade.status != expected:
            raise InvalidOperationError(
                f"trade_not_{expected.value}",
                f"Only {expected.value} trades can be {action}; this trade is {trade.status.value}.",
            )

    def _complete_if_confirmed(self, trade: Trade) -> None:
        """Run after every mutation that can leave a trade ``accepted``."""
        if (
            trade.status == TradeStatus.ACCEPTED
            and trade.requester_confirmed
            and trade.receiver_confirmed
        ):
            trade.status = TradeStatus.COMPLETED
            trade.completed_at = self._now()
            logger.info("Trade %s completed", trade.id)

    # ------------------------------------------------------------------ #
    # Public interface
    # ------------------------------------------------------------------ #
    def propose(self, payload: TradeCreate, actor: User) -> Trade:
        offered: Optional[Book] = self.books.find_book(payload.book_offered)
        requested: Optional[Book] = self.books.find_book(payload.book_requested)

        if not offered:
            raise NotFoundError("book_offered_not_found", "Book offered not found.")
        if not requested:
            raise NotFoundError("book_requested_not_found", "Book requested not found.")

        if offered.owner_id != actor.id:
            raise ForbiddenError("not_offer_owner", "You can only offer your own books.")
        if requested.owner_id == actor.id:
            raise InvalidOperationError("own_book_requested", "You cannot request your own book.")

        if not offered.is_available:
            raise InvalidOperationError(
                "book_offered_unavailable", "Your offered book is not available for trade."
            )
        if not requested.is_available:
            raise InvalidOperationError(
                "book_requested_unavailable", "The requested book is not available for trade."
            )

        existing = self.db.execute(
            select(Trade.id).where(
                Trade.requester_id == actor.id,
                Trade.book_requested_id == requested.id,
                Trade.status == TradeStatus.PENDING,
            )
        ).first()
        if existing:
            raise ConflictError("duplicate_pending_trade", "You already have a pending trade for this book.")

        trade = Trade(
            requester_id=actor.id,
            receiver_id=self.books.owner_of(requested.id),
            book_offered_id=offered.id,
            book_requested_id=requested.id,
            message=payload.message.strip(),
            status=TradeStatus.PENDING,
        )
        self.db.add(trade)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError(
                "duplicate_pending_trade", "You already have a pending trade for this book."
            ) from exc

        logger.info(
            "Trade %s proposed by %s: book %s for book %s",
            trade.id,
            actor.id,
            offered.id,
            requested.id,
        )
        return self._get_trade(trade.id)

    def decide(self, trade_id: str, actor: User, decision: TradeDecision) -> Trade:
        trade = self._get_trade(trade_id)
        self._ensure_participant(trade, actor, "update")
        if actor.id != trade.receiver_id:
            raise ForbiddenError("not_receiver", "Only the trade receiver can accept or reject.")
        self._ensure_status(trade, TradeStatus.PENDING, "accepted or rejected")

        if decision == "accepted":
            for book, label in ((trade.book_offered, "offered"), (trade.book_requested, "requested")):
                if book is None or not book.is_available:
                    raise InvalidOperationError(
                        f"book_{label}_unavailable", f"The {label} book is no longer available."
                    )
            if not self.books.lock_for_trade([trade.book_offered_id, trade.book_requested_id]):
                self.db.rollback()
                raise InvalidOperationError(
                    "book_unavailable", "One of the books was traded away before this trade was accepted."
                )
            trade.status = TradeStatus.ACCEPTED
            self._complete_if_confirmed(trade)
        else:
            trade.status = TradeStatus.REJECTED

        self.db.commit()
        logger.info("Trade %s %s by %s", trade.id, decision, actor.id)
        return self._get_trade(trade.id)

    def cancel(self, trade_id: str, actor: User) -> Trade:
        trade = self._get_trade(trade_id)
        self._ensure_participant(trade, actor, "cancel")
        self._ensure_status(trade, TradeStatus.PENDING, "cancelled")

        trade.status = TradeStatus.CANCELLED
        self.db.commit()
        logger.info("Trade %s cancelled by %s", trade.id, actor.id)
        return self._get_trade(trade.id)

    def confirm(self, trade_id: str, actor: User, party: TradeParty) -> Trade:
        trade = self._get_trade(trade_id)
        self._ensure_participant(trade, actor, "confirm")
        expected_id = trade.requester_id if party == "requester" else trade.receiver_id
        if actor.id != expected_id:
            raise ForbiddenError("wrong_party", f"Only the {party} can confirm as {party}.")
        self._ensure_status(trade, TradeStatus.ACCEPTED, "confirmed")

        if party == "requester":
            trade.requester_confirmed = True
        else:
            trade.receiver_confirmed = True
        self._complete_if_confirmed(trade)

        self.db.commit()
        logger.info("Trade %s confirmed by %s (%s)", trade.id, actor.id, party)
        return self._get_trade(trade.id)

    def apply_update(self, trade_id: str, payload: TradeUpdate, actor: User) -> Trade:
        """Dispatch a ``PUT /trades/{id}`` body to the matching transition."""
        if payload.status == "cancelled":
            return self.cancel(trade_id, actor)
        if payload.status is not None:
            return self.decide(trade_id, actor, payload.status)
        if payload.requester_confirmed:
            return self.confirm(trade_id, actor, "requester")
        return self.confirm(trade_id, actor, "receiver")

    def get_trade(self, trade_id: str, actor: User) -> Trade:
        trade = self._get_trade(trade_id)
        if not actor.is_admin:
            self._ensure_participant(trade, actor, "view")
        return trade

    def list_for_user(
        self,
        actor: User,
        *,
        direction: TradeDirection = "both",
        status_filter: Optional[TradeStatus] = None,
    ) -> list[Trade]:
        if direction == "incoming":
            stmt = self._trade_query().where(Trade.receiver_id == actor.id)
        elif direction == "outgoing":
            stmt = self._trade_query().where(Trade.requester_id == actor.id)
        else:
            stmt = self._trade_query().where(
                or_(Trade.requester_id == actor.id, Trade.receiver_id == actor.id)
            )
        if status_filter:
            stmt = stmt.where(Trade.status == status_filter)

        stmt = stmt.order_by(Trade.updated_at.desc(), Trade.created_at.desc())
        return list(self.db.execute(stmt).scalars().unique().all())

    def stats_for_user(self, actor: User) -> TradeStats:
        rows = self.db.execute(
            select(Trade.status, func.count(Trade.id))
            .where(or_(Trade.requester_id == actor.id, Trade.receiver_id == actor.id))
            .where(Trade.status.in_(COUNTED_STATUSES))
            .group_by(Trade.status)
        ).all()
        counts = {status.value: count for status, count in rows}
        return TradeStats(**counts, total=sum(counts.values()))


def get_trade_service(db: Session = Depends(get_session)) -> TradeService:
    return TradeService(db, BookService(db))
