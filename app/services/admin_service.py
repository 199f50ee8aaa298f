from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta, timezone

from fastapi import Depends
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.orm import Session

from app.core.errors import InvalidOperationError, NotFoundError
from app.core.settings import get_session_settings
from app.db.session import get_session
from app.models.book import Book
from app.models.message import Message
from app.models.report import Report, ReportStatus
from app.models.session import Session as SessionModel
from app.models.trade import Trade, TradeStatus
from app.models.user import User
from app.schemas.admin import (
    BookCounts,
    PlatformStats,
    ReportCounts,
    TradeCounts,
    UserActivation,
    UserCounts,
    UserPage,
)
from app.schemas.user import user_to_schema
from app.services.session_service import SessionService

logger = logging.getLogger(__name__)


class AdminService:
    """Administrative moderation of users and platform-wide statistics.

    Callers must have verified the administrator role; routers do that with the
    ``require_admin`` dependency.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def _get_user(self, user_id: str) -> User:
        user = self.session.get(User, user_id)
        if not user:
            raise NotFoundError("user_not_found", "User not found.")
        return user

    def list_users(self, page: int = 1, limit: int = 20) -> UserPage:
        total = self.session.execute(select(func.count(User.id))).scalar_one()
        stmt = (
            select(User)
            .order_by(User.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        users = self.session.execute(stmt).scalars().all()
        return UserPage(
            users=[user_to_schema(user) for user in users],
            page=page,
            pages=math.ceil(total / limit) if total else 0,
            total=total,
        )

    def toggle_user_status(self, user_id: str, actor: User) -> UserActivation:
        user = self._get_user(user_id)
        if user.is_admin:
            raise InvalidOperationError("admin_protected", "Cannot modify admin users.")

        user.is_active = not user.is_active
        if not user.is_active:
            SessionService(self.session, get_session_settings()).revoke_all_for_user(user.id, commit=False)
        self.session.commit()
        logger.info(
            "Admin %s %s user %s",
            actor.id,
            "activated" if user.is_active else "deactivated",
            user.id,
        )
        return UserActivation(
            id=user.id,
            name=user.name,
            email=user.email,
            is_active=user.is_active,
            message="User activated" if user.is_active else "User deactivated",
        )

    def delete_user(self, user_id: str, actor: User) -> None:
        """Remove a user with their sessions, books, trades and trade messages."""
        user = self._get_user(user_id)
        if user.is_admin:
            raise InvalidOperationError("admin_protected", "Cannot delete admin users.")

        trade_ids = select(Trade.id).where(
            or_(Trade.requester_id == user.id, Trade.receiver_id == user.id)
        )
        book_ids = select(Book.id).where(Book.owner_id == user.id)

        self.session.execute(
            delete(Message).where(Message.trade_id.in_(trade_ids)).execution_options(synchronize_session=False)
        )
        self.session.execute(
            delete(Trade)
            .where(or_(Trade.requester_id == user.id, Trade.receiver_id == user.id))
            .execution_options(synchronize_session=False)
        )
        self.session.execute(
            update(Report)
            .where(Report.reported_book_id.in_(book_ids))
            .values(reported_book_id=None)
            .execution_options(synchronize_session=False)
        )
        self.session.execute(
            update(Report)
            .where(Report.reported_user_id == user.id)
            .values(reported_user_id=None)
            .execution_options(synchronize_session=False)
        )
        self.session.execute(
            delete(Report).where(Report.reporter_id == user.id).execution_options(synchronize_session=False)
        )
        self.session.execute(
            delete(Book).where(Book.owner_id == user.id).execution_options(synchronize_session=False)
        )
        self.session.execute(
            delete(SessionModel).where(SessionModel.user_id == user.id).execution_options(synchronize_session=False)
        )
        self.session.delete(user)
        self.session.commit()
        logger.info("Admin %s deleted user %s", actor.id, user_id)

    def platform_stats(self) -> PlatformStats:
        def count(stmt) -> int:
            return self.session.execute(stmt).scalar_one()

        week_ago = datetime.now(timezone.utc) - timedelta(days=7)
        trades_by_status = {
            status.value: total
            for status, total in self.session.execute(
                select(Trade.status, func.count(Trade.id)).group_by(Trade.status)
            ).all()
        }
        books_by_genre = {
            genre.value: total
            for genre, total in self.session.execute(
                select(Book.genre, func.count(Book.id))
                .group_by(Book.genre)
                .order_by(func.count(Book.id).desc())
                .limit(10)
            ).all()
        }

        return PlatformStats(
            users=UserCounts(
                total=count(select(func.count(User.id))),
                active=count(select(func.count(User.id)).where(User.is_active.is_(True))),
                new_this_week=count(select(func.count(User.id)).where(User.created_at >= week_ago)),
            ),
            books=BookCounts(
                total=count(select(func.count(Book.id))),
                available=count(select(func.count(Book.id)).where(Book.is_available.is_(True))),
            ),
            trades=TradeCounts(
                total=sum(trades_by_status.values()),
                completed=trades_by_status.get(TradeStatus.COMPLETED.value, 0),
                pending=trades_by_status.get(TradeStatus.PENDING.value, 0),
                by_status=trades_by_status,
            ),
            reports=ReportCounts(
                pending=count(select(func.count(Report.id)).where(Report.status == ReportStatus.PENDING)),
            ),
            books_by_genre=books_by_genre,
        )


def get_admin_service(session: Session = Depends(get_session)) -> AdminService:
    return AdminService(session=session)
