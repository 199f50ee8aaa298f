from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.models import Book, BookGenre, Message, Report, Session as SessionModel, Trade, User, UserRole


@pytest.fixture()
def admin(user_factory):
    return user_factory("admin@example.com", name="Admin", role=UserRole.ADMIN)


def test_admin_routes_reject_regular_users(client: TestClient, user_factory):
    alice = user_factory("alice@example.com")

    for method, path in (
        ("get", "/admin/users"),
        ("get", "/admin/stats"),
        ("get", "/admin/reports"),
        ("put", f"/admin/users/{alice.id}/toggle"),
        ("delete", f"/admin/users/{alice.id}"),
    ):
        response = getattr(client, method)(path, headers=alice.headers)
        assert response.status_code == 403, path
        assert response.json()["detail"]["code"] == "forbidden"


def test_list_users_paginates_newest_first(client: TestClient, user_factory, admin):
    user_factory("first@example.com", name="First")
    user_factory("second@example.com", name="Second")

    page = client.get("/admin/users", params={"limit": 2}, headers=admin.headers).json()
    assert page["total"] == 3
    assert page["pages"] == 2
    assert [user["name"] for user in page["users"]] == ["Second", "First"]


def test_toggle_user_status_revokes_sessions(client: TestClient, user_factory, admin, session_factory):
    alice = user_factory("alice@example.com")

    response = client.put(f"/admin/users/{alice.id}/toggle", headers=admin.headers)
    assert response.status_code == 200
    assert response.json()["isActive"] is False
    assert response.json()["message"] == "User deactivated"

    with session_factory() as db:
        active = (
            db.query(SessionModel)
            .filter(SessionModel.user_id == alice.id, SessionModel.revoked.is_(False))
            .count()
        )
        assert active == 0

    me = client.get("/auth/me", headers=alice.headers)
    assert me.status_code == 401
    assert me.json()["detail"]["code"] == "account_deactivated"

    signin = client.post("/auth/signin", json={"email": "alice@example.com", "password": "Password123"})
    assert signin.status_code == 401

    reactivated = client.put(f"/admin/users/{alice.id}/toggle", headers=admin.headers)
    assert reactivated.json()["isActive"] is True


def test_admins_cannot_be_toggled_or_deleted(client: TestClient, user_factory, admin):
    other_admin = user_factory("boss@example.com", role=UserRole.ADMIN)

    toggle = client.put(f"/admin/users/{other_admin.id}/toggle", headers=admin.headers)
    assert toggle.status_code == 400
    assert toggle.json()["detail"]["code"] == "admin_protected"

    delete = client.delete(f"/admin/users/{other_admin.id}", headers=admin.headers)
    assert delete.status_code == 400


def test_delete_user_removes_their_trades_and_messages(
    client: TestClient, user_factory, book_factory, admin, session_factory
):
    alice = user_factory("alice@example.com")
    bob = user_factory("bob@example.com")
    offered = book_factory(alice, title="Alice's")
    requested = book_factory(bob, title="Bob's")
    trade_id = client.post(
        "/trades",
        json={"bookOffered": offered.id, "bookRequested": requested.id},
        headers=alice.headers,
    ).json()["id"]
    client.post("/messages", json={"tradeId": trade_id, "content": "Hi"}, headers=alice.headers)
    client.post("/reports", json={"reportedUser": bob.id, "reason": "spam"}, headers=alice.headers)
    client.post("/reports", json={"reportedBook": offered.id, "reason": "fraud"}, headers=bob.headers)

    response = client.delete(f"/admin/users/{alice.id}", headers=admin.headers)
    assert response.status_code == 204

    with session_factory() as db:
        assert db.get(User, alice.id) is None
        assert db.get(Trade, trade_id) is None
        assert db.query(Message).count() == 0
        assert db.query(Book).filter(Book.owner_id == alice.id).count() == 0
        assert db.query(SessionModel).filter(SessionModel.user_id == alice.id).count() == 0
        assert db.get(Book, requested.id) is not None
        remaining = db.query(Report).all()
        assert len(remaining) == 1
        assert remaining[0].reported_book_id is None

    assert client.delete(f"/admin/users/{alice.id}", headers=admin.headers).status_code == 404


def test_platform_stats(client: TestClient, user_factory, book_factory, admin):
    alice = user_factory("alice@example.com")
    bob = user_factory("bob@example.com")
    offered = book_factory(alice, title="Offered", genre=BookGenre.FANTASY)
    requested = book_factory(bob, title="Requested", genre=BookGenre.FANTASY)
    book_factory(bob, title="Elsewhere", genre=BookGenre.POETRY)
    trade_id = client.post(
        "/trades",
        json={"bookOffered": offered.id, "bookRequested": requested.id},
        headers=alice.headers,
    ).json()["id"]
    client.put(f"/trades/{trade_id}", json={"status": "accepted"}, headers=bob.headers)
    client.post("/reports", json={"reportedUser": bob.id, "reason": "spam"}, headers=alice.headers)

    stats = client.get("/admin/stats", headers=admin.headers).json()
    assert stats["users"]["total"] == 3
    assert stats["users"]["active"] == 3
    assert stats["users"]["newThisWeek"] == 3
    assert stats["books"] == {"total": 3, "available": 1}
    assert stats["trades"]["total"] == 1
    assert stats["trades"]["byStatus"] == {"accepted": 1}
    assert stats["reports"]["pending"] == 1
    assert stats["booksByGenre"] == {"Fantasy": 2, "Poetry": 1}
