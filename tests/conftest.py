from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from dataclasses import dataclass  # noqa: E402
from typing import Callable, Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.settings import SessionSettings, get_session_settings  # noqa: E402
from app.db.session import get_session  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Base, Book, BookCondition, BookGenre, User, UserRole  # noqa: E402
from app.security.hash import hash_password  # noqa: E402

DEFAULT_PASSWORD = "Password123"


@dataclass
class SignedInUser:
    """A seeded user together with the bearer headers that authenticate them."""

    user: User
    headers: dict[str, str]

    @property
    def id(self) -> str:
        return self.user.id


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


@pytest.fixture()
def db_session(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def session_settings() -> SessionSettings:
    return SessionSettings(
        idle_timeout_minutes=30,
        absolute_timeout_hours=24,
        cookie_name="session_id",
        cookie_secure=False,
        cookie_samesite="lax",
        cookie_domain=None,
        cookie_path="/",
        cookie_max_age_seconds=None,
        send_idle_remaining_header=True,
    )


@pytest.fixture()
def client(session_factory, session_settings) -> TestClient:
    def _override_get_session() -> Session:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_session] = _override_get_session
    get_session_settings.cache_clear()
    app.dependency_overrides[get_session_settings] = lambda: session_settings

    with TestClient(app) as test_client:
        setattr(test_client, "session_settings", session_settings)
        yield test_client

    app.dependency_overrides.clear()
    get_session_settings.cache_clear()


def create_user(
    session: Session,
    *,
    email: str,
    name: str = "Example User",
    password: str = DEFAULT_PASSWORD,
    role: UserRole = UserRole.USER,
    is_active: bool = True,
) -> User:
    user = User(
        email=email,
        name=name,
        password_hash=hash_password(password),
        role=role,
        is_active=is_active,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def create_book(
    session: Session,
    owner: User,
    *,
    title: str = "Dune",
    author: str = "Frank Herbert",
    genre: BookGenre = BookGenre.SCIENCE_FICTION,
    condition: BookCondition = BookCondition.GOOD,
    description: str = "",
    is_available: bool = True,
) -> Book:
    book = Book(
        owner_id=owner.id,
        title=title,
        author=author,
        genre=genre,
        condition=condition,
        description=description,
        is_available=is_available,
        looking_for=[],
    )
    session.add(book)
    session.commit()
    session.refresh(book)
    return book


def bearer_headers(client: TestClient, email: str, password: str = DEFAULT_PASSWORD) -> dict[str, str]:
    response = client.post("/auth/signin", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}


@pytest.fixture()
def user_factory(client, session_factory) -> Callable[..., SignedInUser]:
    """Seed a user and sign them in, returning a :class:`SignedInUser`."""

    def _make(email: str, name: str = "Example User", role: UserRole = UserRole.USER) -> SignedInUser:
        with session_factory() as db:
            user = create_user(db, email=email, name=name, role=role)
        return SignedInUser(user=user, headers=bearer_headers(client, email))

    return _make


@pytest.fixture()
def book_factory(session_factory) -> Callable[..., Book]:
    def _make(owner: SignedInUser | User, title: Optional[str] = None, **kwargs) -> Book:
        owner_user = owner.user if isinstance(owner, SignedInUser) else owner
        with session_factory() as db:
            return create_book(db, owner_user, title=title or "Dune", **kwargs)

    return _make
