from __future__ import annotations

from fastapi.testclient import TestClient

from app.security.hash import hash_password, verify_password


def test_password_hashing_roundtrip():
    password = "s3cureP@ss!"
    hashed = hash_password(password)

    assert hashed != password
    assert verify_password(password, hashed)


def test_signup_and_duplicate_email(client: TestClient):
    payload = {
        "email": "user@example.com",
        "name": "Example User",
        "password": "Str0ngPassword!",
        "role": "admin",
    }
    response = client.post("/auth/signup", json=payload)
    assert response.status_code == 201
    body = response.json()
    assert body["role"] == "user"
    assert body["isActive"] is True
    assert "password" not in body
    assert "password_hash" not in body

    duplicate = client.post("/auth/signup", json=payload)
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"]["code"] == "user_exists"


def test_signin_wrong_password(client: TestClient):
    payload = {
        "email": "test@example.com",
        "name": "Tester",
        "password": "CorrectPass1!",
    }
    client.post("/auth/signup", json=payload)

    response = client.post(
        "/auth/signin",
        json={"email": payload["email"], "password": "WrongPass1!"},
    )
    assert response.status_code == 401
    assert response.json()["detail"]["code"] == "invalid_credentials"


def test_signup_rejects_weak_password(client: TestClient):
    payload = {
        "email": "weak@example.com",
        "name": "Weak User",
        "password": "weakpass",
    }
    response = client.post("/auth/signup", json=payload)
    assert response.status_code == 422


def test_signup_rejects_blank_name(client: TestClient):
    payload = {
        "email": "blank@example.com",
        "name": "   ",
        "password": "Password123",
    }
    response = client.post("/auth/signup", json=payload)
    assert response.status_code == 422


def test_signin_sets_cookie_and_authorizes_me(client: TestClient):
    payload = {
        "email": "decode@example.com",
        "name": "Decoder",
        "password": "DecodePass1!",
    }
    client.post("/auth/signup", json=payload)

    response = client.post(
        "/auth/signin",
        json={"email": payload["email"], "password": payload["password"]},
    )
    assert response.status_code == 200
    body = response.json()

    assert body["user"]["email"] == payload["email"]
    assert body["tokenType"] == "bearer"
    assert body["expiresIn"] > 0
    assert response.cookies.get(client.session_settings.cookie_name)

    me_response = client.get("/auth/me")
    assert me_response.status_code == 200
    assert me_response.json()["email"] == payload["email"]


def test_bearer_token_authorizes_me_without_cookie(client: TestClient):
    payload = {
        "email": "bearer@example.com",
        "name": "Bearer",
        "password": "BearerPass1",
    }
    client.post("/auth/signup", json=payload)
    token = client.post(
        "/auth/signin",
        json={"email": payload["email"], "password": payload["password"]},
    ).json()["accessToken"]
    client.cookies.clear()

    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["name"] == "Bearer"


def test_invalid_bearer_token_is_rejected(client: TestClient):
    response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["detail"]["code"] == "invalid_token"


def test_me_requires_session_cookie(client: TestClient):
    response = client.get("/auth/me")
    assert response.status_code == 401
    assert response.json()["detail"]["code"] == "not_authenticated"


def test_signout_clears_session(client: TestClient):
    payload = {
        "email": "leaving@example.com",
        "name": "Leaving",
        "password": "LeavePass1",
    }
    client.post("/auth/signup", json=payload)
    client.post("/auth/signin", json={"email": payload["email"], "password": payload["password"]})

    response = client.post("/auth/signout")
    assert response.status_code == 204

    me_response = client.get("/auth/me")
    assert me_response.status_code == 401
