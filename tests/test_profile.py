from __future__ import annotations

from fastapi.testclient import TestClient


def test_read_and_update_own_profile(client: TestClient, user_factory):
    alice = user_factory("alice@example.com", name="Alice")

    me = client.get("/users/me", headers=alice.headers)
    assert me.status_code == 200
    assert me.json()["email"] == "alice@example.com"

    updated = client.patch(
        "/users/me",
        json={"bio": "Sci-fi collector", "location": "Lisbon", "avatar": "https://img.example/a.png"},
        headers=alice.headers,
    )
    assert updated.status_code == 200
    body = updated.json()
    assert body["name"] == "Alice"
    assert body["bio"] == "Sci-fi collector"
    assert body["avatar"] == "https://img.example/a.png"


def test_profile_update_rejects_unknown_fields(client: TestClient, user_factory):
    alice = user_factory("alice@example.com")

    response = client.patch("/users/me", json={"role": "admin"}, headers=alice.headers)
    assert response.status_code == 422


def test_public_profile_hides_private_fields(client: TestClient, user_factory):
    alice = user_factory("alice@example.com", name="Alice")
    bob = user_factory("bob@example.com")

    response = client.get(f"/users/{alice.id}", headers=bob.headers)
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Alice"
    assert "email" not in body
    assert "role" not in body

    missing = client.get("/users/missing")
    assert missing.status_code == 404
    assert missing.json()["detail"]["code"] == "user_not_found"
