from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.models import Book, UserRole


@pytest.fixture()
def swap(client: TestClient, user_factory, book_factory):
    """Alice owns X, Bob owns Y; both available."""
    alice = user_factory("alice@example.com", name="Alice")
    bob = user_factory("bob@example.com", name="Bob")
    book_x = book_factory(alice, title="Book X")
    book_y = book_factory(bob, title="Book Y")
    return alice, bob, book_x, book_y


def _propose(client: TestClient, headers, offered: str, requested: str, message: str = "Swap?"):
    return client.post(
        "/trades",
        json={"bookOffered": offered, "bookRequested": requested, "message": message},
        headers=headers,
    )


def _book(client: TestClient, book_id: str) -> dict:
    return client.get(f"/books/{book_id}").json()


def test_full_trade_lifecycle(client: TestClient, swap):
    alice, bob, book_x, book_y = swap

    proposed = _propose(client, alice.headers, book_x.id, book_y.id)
    assert proposed.status_code == 201
    trade = proposed.json()
    assert trade["status"] == "pending"
    assert trade["requesterId"] == alice.id
    assert trade["receiverId"] == bob.id
    assert trade["bookOffered"]["ownerId"] == alice.id
    assert trade["bookRequested"]["ownerId"] == bob.id
    assert trade["requesterConfirmed"] is False
    assert trade["completedAt"] is None

    accepted = client.put(f"/trades/{trade['id']}", json={"status": "accepted"}, headers=bob.headers)
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "accepted"
    assert _book(client, book_x.id)["isAvailable"] is False
    assert _book(client, book_y.id)["isAvailable"] is False

    first = client.put(f"/trades/{trade['id']}", json={"requesterConfirmed": True}, headers=alice.headers)
    assert first.status_code == 200
    assert first.json()["status"] == "accepted"
    assert first.json()["requesterConfirmed"] is True

    second = client.put(f"/trades/{trade['id']}", json={"receiverConfirmed": True}, headers=bob.headers)
    assert second.status_code == 200
    body = second.json()
    assert body["status"] == "completed"
    assert body["completedAt"] is not None
    for stamp in (body["completedAt"], body["createdAt"], body["updatedAt"]):
        assert stamp.endswith(("Z", "+00:00"))

    # completion does not release the books
    assert _book(client, book_x.id)["isAvailable"] is False


def test_confirmations_complete_in_either_order(client: TestClient, swap):
    alice, bob, book_x, book_y = swap
    trade_id = _propose(client, alice.headers, book_x.id, book_y.id).json()["id"]
    client.put(f"/trades/{trade_id}", json={"status": "accepted"}, headers=bob.headers)

    receiver_first = client.put(f"/trades/{trade_id}", json={"receiverConfirmed": True}, headers=bob.headers)
    assert receiver_first.json()["status"] == "accepted"

    requester_second = client.put(f"/trades/{trade_id}", json={"requesterConfirmed": True}, headers=alice.headers)
    assert requester_second.json()["status"] == "completed"


def test_propose_against_own_book_is_invalid(client: TestClient, user_factory, book_factory):
    alice = user_factory("alice@example.com")
    mine = book_factory(alice, title="Mine")
    also_mine = book_factory(alice, title="Also mine")

    response = _propose(client, alice.headers, mine.id, also_mine.id)
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "own_book_requested"


def test_propose_validation_order(client: TestClient, swap, book_factory):
    alice, bob, book_x, book_y = swap

    missing = _propose(client, alice.headers, "missing", book_y.id)
    assert missing.status_code == 404
    assert missing.json()["detail"]["code"] == "book_offered_not_found"

    missing_requested = _propose(client, alice.headers, book_x.id, "missing")
    assert missing_requested.json()["detail"]["code"] == "book_requested_not_found"

    not_owner = _propose(client, alice.headers, book_y.id, book_x.id)
    assert not_owner.status_code == 403
    assert not_owner.json()["detail"]["code"] == "not_offer_owner"

    shelved = book_factory(bob, title="Shelved", is_available=False)
    unavailable = _propose(client, alice.headers, book_x.id, shelved.id)
    assert unavailable.status_code == 400
    assert unavailable.json()["detail"]["code"] == "book_requested_unavailable"


def test_duplicate_pending_trade_conflicts_until_resolved(client: TestClient, swap):
    alice, bob, book_x, book_y = swap
    first = _propose(client, alice.headers, book_x.id, book_y.id).json()

    duplicate = _propose(client, alice.headers, book_x.id, book_y.id)
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"]["code"] == "duplicate_pending_trade"

    rejected = client.put(f"/trades/{first['id']}", json={"status": "rejected"}, headers=bob.headers)
    assert rejected.json()["status"] == "rejected"

    again = _propose(client, alice.headers, book_x.id, book_y.id)
    assert again.status_code == 201

    cancelled = client.put(f"/trades/{again.json()['id']}", json={"status": "cancelled"}, headers=alice.headers)
    assert cancelled.json()["status"] == "cancelled"
    assert _propose(client, alice.headers, book_x.id, book_y.id).status_code == 201


def test_only_receiver_may_decide(client: TestClient, swap, user_factory):
    alice, bob, book_x, book_y = swap
    carol = user_factory("carol@example.com")
    trade_id = _propose(client, alice.headers, book_x.id, book_y.id).json()["id"]

    by_requester = client.put(f"/trades/{trade_id}", json={"status": "accepted"}, headers=alice.headers)
    assert by_requester.status_code == 403
    assert by_requester.json()["detail"]["code"] == "not_receiver"

    by_stranger = client.put(f"/trades/{trade_id}", json={"status": "rejected"}, headers=carol.headers)
    assert by_stranger.status_code == 403
    assert by_stranger.json()["detail"]["code"] == "not_participant"


def test_second_accept_fails_without_touching_books(client: TestClient, swap):
    alice, bob, book_x, book_y = swap
    trade_id = _propose(client, alice.headers, book_x.id, book_y.id).json()["id"]

    assert client.put(f"/trades/{trade_id}", json={"status": "accepted"}, headers=bob.headers).status_code == 200
    again = client.put(f"/trades/{trade_id}", json={"status": "accepted"}, headers=bob.headers)
    assert again.status_code == 400
    assert again.json()["detail"]["code"] == "trade_not_pending"
    assert _book(client, book_y.id)["isAvailable"] is False


def test_reject_leaves_books_available(client: TestClient, swap):
    alice, bob, book_x, book_y = swap
    trade_id = _propose(client, alice.headers, book_x.id, book_y.id).json()["id"]

    client.put(f"/trades/{trade_id}", json={"status": "rejected"}, headers=bob.headers)

    assert _book(client, book_x.id)["isAvailable"] is True
    assert _book(client, book_y.id)["isAvailable"] is True


def test_accepted_trade_cannot_be_cancelled(client: TestClient, swap):
    alice, bob, book_x, book_y = swap
    trade_id = _propose(client, alice.headers, book_x.id, book_y.id).json()["id"]
    client.put(f"/trades/{trade_id}", json={"status": "accepted"}, headers=bob.headers)

    response = client.put(f"/trades/{trade_id}", json={"status": "cancelled"}, headers=alice.headers)
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "trade_not_pending"


def test_confirm_requires_matching_role_and_accepted_status(client: TestClient, swap):
    alice, bob, book_x, book_y = swap
    trade_id = _propose(client, alice.headers, book_x.id, book_y.id).json()["id"]

    too_early = client.put(f"/trades/{trade_id}", json={"requesterConfirmed": True}, headers=alice.headers)
    assert too_early.status_code == 400
    assert too_early.json()["detail"]["code"] == "trade_not_accepted"

    client.put(f"/trades/{trade_id}", json={"status": "accepted"}, headers=bob.headers)
    wrong_role = client.put(f"/trades/{trade_id}", json={"receiverConfirmed": True}, headers=alice.headers)
    assert wrong_role.status_code == 403
    assert wrong_role.json()["detail"]["code"] == "wrong_party"


def test_update_body_must_name_one_action(client: TestClient, swap):
    alice, bob, book_x, book_y = swap
    trade_id = _propose(client, alice.headers, book_x.id, book_y.id).json()["id"]

    both = client.put(
        f"/trades/{trade_id}",
        json={"status": "accepted", "receiverConfirmed": True},
        headers=bob.headers,
    )
    assert both.status_code == 422
    assert client.put(f"/trades/{trade_id}", json={}, headers=bob.headers).status_code == 422
    assert client.put(f"/trades/{trade_id}", json={"status": "completed"}, headers=bob.headers).status_code == 422
    withdraw = client.put(f"/trades/{trade_id}", json={"receiverConfirmed": False}, headers=bob.headers)
    assert withdraw.status_code == 422


def test_accepting_second_trade_for_locked_book_fails(client: TestClient, swap, user_factory, book_factory):
    alice, bob, book_x, book_y = swap
    carol = user_factory("carol@example.com")
    book_z = book_factory(carol, title="Book Z")

    first = _propose(client, alice.headers, book_x.id, book_y.id).json()["id"]
    second = _propose(client, carol.headers, book_z.id, book_y.id).json()["id"]

    assert client.put(f"/trades/{first}", json={"status": "accepted"}, headers=bob.headers).status_code == 200
    response = client.put(f"/trades/{second}", json={"status": "accepted"}, headers=bob.headers)
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "book_requested_unavailable"

    trade = client.get(f"/trades/{second}", headers=carol.headers).json()
    assert trade["status"] == "pending"
    assert _book(client, book_z.id)["isAvailable"] is True


def test_get_trade_visibility(client: TestClient, swap, user_factory):
    alice, bob, book_x, book_y = swap
    carol = user_factory("carol@example.com")
    admin = user_factory("admin@example.com", role=UserRole.ADMIN)
    trade_id = _propose(client, alice.headers, book_x.id, book_y.id).json()["id"]

    assert client.get(f"/trades/{trade_id}", headers=bob.headers).status_code == 200
    assert client.get(f"/trades/{trade_id}", headers=admin.headers).status_code == 200
    stranger = client.get(f"/trades/{trade_id}", headers=carol.headers)
    assert stranger.status_code == 403
    assert client.get("/trades/missing", headers=alice.headers).status_code == 404


def test_list_trades_by_direction_and_status(client: TestClient, swap, user_factory, book_factory):
    alice, bob, book_x, book_y = swap
    book_w = book_factory(bob, title="Book W")
    book_v = book_factory(alice, title="Book V")

    outgoing = _propose(client, alice.headers, book_x.id, book_y.id).json()["id"]
    incoming = _propose(client, bob.headers, book_w.id, book_v.id).json()["id"]
    client.put(f"/trades/{outgoing}", json={"status": "rejected"}, headers=bob.headers)

    both = client.get("/trades", headers=alice.headers).json()
    assert [trade["id"] for trade in both] == [outgoing, incoming]

    only_incoming = client.get("/trades", params={"type": "incoming"}, headers=alice.headers).json()
    assert [trade["id"] for trade in only_incoming] == [incoming]

    only_outgoing = client.get("/trades", params={"type": "outgoing"}, headers=alice.headers).json()
    assert [trade["id"] for trade in only_outgoing] == [outgoing]

    rejected = client.get("/trades", params={"status": "rejected"}, headers=alice.headers).json()
    assert [trade["id"] for trade in rejected] == [outgoing]


def test_trade_stats(client: TestClient, swap, book_factory):
    alice, bob, book_x, book_y = swap
    book_w = book_factory(bob, title="Book W")

    first = _propose(client, alice.headers, book_x.id, book_y.id).json()["id"]
    _propose(client, alice.headers, book_x.id, book_w.id)
    client.put(f"/trades/{first}", json={"status": "rejected"}, headers=bob.headers)

    stats = client.get("/trades/stats", headers=alice.headers).json()
    assert stats == {"pending": 1, "accepted": 0, "completed": 0, "rejected": 1, "total": 2}


def test_trades_require_authentication(client: TestClient):
    assert client.get("/trades").status_code == 401
    assert client.post("/trades", json={"bookOffered": "a", "bookRequested": "b"}).status_code == 401


def test_propose_rejects_unknown_fields(client: TestClient, swap):
    alice, _, book_x, book_y = swap
    response = client.post(
        "/trades",
        json={"bookOffered": book_x.id, "bookRequested": book_y.id, "status": "completed"},
        headers=alice.headers,
    )
    assert response.status_code == 422


def test_books_snapshot_unchanged_after_failed_propose(client: TestClient, swap, session_factory):
    alice, _, book_x, book_y = swap
    _propose(client, alice.headers, book_y.id, book_x.id)

    with session_factory() as db:
        assert db.get(Book, book_x.id).is_available is True
        assert db.get(Book, book_y.id).is_available is True
