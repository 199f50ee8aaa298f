from __future__ import annotations

import logging
import math
from typing import Iterable, Optional

from fastapi import Depends
from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session, joinedload

from app.core.errors import ForbiddenError, NotFoundError
from app.db.session import get_session
from app.models.book import Book, BookCondition, BookGenre
from app.models.trade import Trade
from app.models.user import User, utcnow
from app.schemas.book import BookCreate, BookUpdate

logger = logging.getLogger(__name__)


class BookService:
    """Book registry: listings, ownership checks and the availability flag."""

    def __init__(self, db: Session):
        self.db = db

    def _ensure_owner(self, book: Book, actor: User, action: str) -> None:
        if book.owner_id != actor.id:
            raise ForbiddenError("not_book_owner", f"Not authorized to {action} this book.")

    def create_book(self, payload: BookCreate, owner: User) -> Book:
        book = Book(owner_id=owner.id, **payload.model_dump())
        self.db.add(book)
        self.db.commit()
        self.db.refresh(book)
        logger.info("User %s listed book %s", owner.id, book.id)
        return book

    def find_book(self, book_id: str) -> Optional[Book]:
        return self.db.get(Book, book_id)

    def get_book(self, book_id: str) -> Book:
        book = self.find_book(book_id)
        if not book:
            raise NotFoundError("book_not_found", "Book not found.")
        return book

    def owner_of(self, book_id: str) -> str:
        return self.get_book(book_id).owner_id

    def record_view(self, book_id: str) -> Book:
        """Count one view of a listing. Not idempotent: every call increments."""
        result = self.db.execute(
            update(Book)
            .where(Book.id == book_id)
            .values(views=Book.views + 1, updated_at=Book.updated_at)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise NotFoundError("book_not_found", "Book not found.")
        self.db.commit()
        book = self.get_book(book_id)
        self.db.refresh(book)
        return book

    def update_book(self, book_id: str, payload: BookUpdate, actor: User) -> Book:
        book = self.get_book(book_id)
        self._ensure_owner(book, actor, "update")

        update_data = payload.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            if value is None and field != "isbn":
                continue
            setattr(book, field, value)

        self.db.commit()
        self.db.refresh(book)
        return book

    def set_availability(self, book_id: str, value: bool, actor: Optional[User] = None) -> Book:
        """Set ``is_available`` directly.

        With an ``actor`` this is the owner's manual toggle; without one it is the
        trade engine's privileged path.
        """
        book = self.get_book(book_id)
        if actor is not None:
            self._ensure_owner(book, actor, "update")
        book.is_available = value
        self.db.commit()
        self.db.refresh(book)
        return book

    def lock_for_trade(self, book_ids: Iterable[str]) -> bool:
        """Flip every listed book from available to unavailable in one statement.

        Returns False when any of them was already unavailable; the caller owns the
        transaction and must roll back in that case. Nothing is committed here.
        """
        ids = set(book_ids)
        result = self.db.execute(
            update(Book)
            .where(Book.id.in_(ids), Book.is_available.is_(True))
            .values(is_available=False, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != len(ids):
            return False
        for book_id in ids:
            self.db.expire(self.db.get(Book, book_id), ["is_available", "updated_at"])
        return True

    def delete_book(self, book_id: str, actor: User) -> None:
        book = self.get_book(book_id)
        if book.owner_id != actor.id and not actor.is_admin:
            raise ForbiddenError("not_book_owner", "Not authorized to delete this book.")

        self.detach_from_trades([book.id])
        self.db.delete(book)
        self.db.commit()
        logger.info("Book %s deleted by %s", book_id, actor.id)

    def detach_from_trades(self, book_ids: list[str]) -> None:
        """Null trade references to books about to be removed; trade history stays."""
        if not book_ids:
            return
        self.db.execute(
            update(Trade)
            .where(Trade.book_offered_id.in_(book_ids))
            .values(book_offered_id=None)
            .execution_options(synchronize_session=False)
        )
        self.db.execute(
            update(Trade)
            .where(Trade.book_requested_id.in_(book_ids))
            .values(book_requested_id=None)
            .execution_options(synchronize_session=False)
        )

    def list_by_owner(self, owner_id: str) -> list[Book]:
        stmt = (
            select(Book)
            .options(joinedload(Book.owner))
            .where(Book.owner_id == owner_id)
            .order_by(Book.created_at.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_mine(self, actor: User) -> list[Book]:
        return self.list_by_owner(actor.id)

    def browse(
        self,
        *,
        page: int = 1,
        limit: int = 12,
        genre: Optional[BookGenre] = None,
        condition: Optional[BookCondition] = None,
        search: Optional[str] = None,
    ) -> tuple[list[Book], int, int]:
        """Return ``(books, total, pages)`` for available listings, newest first."""
        filters = [Book.is_available.is_(True)]
        if genre:
            filters.append(Book.genre == genre)
        if condition:
            filters.append(Book.condition == condition)
        term = search.strip() if search else ""
        if term:
            filters.append(
                or_(
                    Book.title.icontains(term, autoescape=True),
                    Book.author.icontains(term, autoescape=True),
                    Book.description.icontains(term, autoescape=True),
                )
            )

        total = self.db.execute(select(func.count(Book.id)).where(*filters)).scalar_one()
        stmt = (
            select(Book)
            .options(joinedload(Book.owner))
            .where(*filters)
            .order_by(Book.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        books = list(self.db.execute(stmt).scalars().all())
        return books, total, math.ceil(total / limit) if total else 0


def get_book_service(db: Session = Depends(get_session)) -> BookService:
    return BookService(db)
