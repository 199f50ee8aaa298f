from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from app.crud.user import get_user_by_email
from app.services.book_service import BookService

from conftest import create_book, create_user


@pytest.fixture()
def seeded(db_session: Session) -> Session:
    owner = create_user(db_session, email="reader@example.com", name="Example Reader")
    create_book(db_session, owner, title="Dune", description="Desert planet")
    create_book(db_session, owner, title="Emma", author="Jane Austen")
    return db_session


def test_get_user_by_email_returns_expected_user(seeded: Session):
    user = get_user_by_email("reader@example.com", seeded)
    assert user is not None
    assert user.email == "reader@example.com"


def test_get_user_by_email_rejects_sql_injection_attempt(seeded: Session):
    with pytest.raises(ValueError):
        get_user_by_email("' OR 1=1; --", seeded)


def test_browse_search_treats_input_as_literal(seeded: Session):
    service = BookService(seeded)

    books, total, _ = service.browse(search="' OR 1=1; --")
    assert books == []
    assert total == 0

    books, total, _ = service.browse(search="desert")
    assert [book.title for book in books] == ["Dune"]
    assert total == 1


def test_browse_search_escapes_like_wildcards(seeded: Session):
    service = BookService(seeded)

    for term in ("%", "_", "D%e", "Emm_", "\\"):
        books, total, _ = service.browse(search=term)
        assert books == []
        assert total == 0

    owner = create_user(seeded, email="shelf@example.com")
    create_book(seeded, owner, title="100% Cotton")

    books, total, _ = service.browse(search="100%")
    assert [book.title for book in books] == ["100% Cotton"]
    assert total == 1
