"""
Tests for registration, login and session handling.
"""

from datetime import timedelta

from jose import jwt

from coursedesk.core import auth, redis_db
from coursedesk.tests.conftest import register


def test_register_returns_session(client, fake_redis):
    user = register(client, "Ada Teacher", "teacher")

    assert user.role == "teacher"
    assert fake_redis.get(redis_db.session_key(user.token)) == user.id

    response = client.get("/api/v1/auth/me", headers=user.headers)
    assert response.status_code == 200
    body = response.json()
    assert body["email"] == "ada.teacher@school.edu"
    assert "hashedPassword" not in body
    assert "password" not in body


def test_duplicate_email_conflicts(client):
    register(client, "Ada Teacher", "teacher", email="ada@school.edu")
    response = client.post("/api/v1/auth/register", json={
        "name": "Ada Again", "email": "ada@school.edu", "password": "password123", "role": "student",
    })
    assert response.status_code == 409


def test_register_validation(client):
    response = client.post("/api/v1/auth/register", json={
        "name": "Bad", "email": "not-an-email", "password": "short", "role": "admin",
    })
    assert response.status_code == 400
    body = response.json()
    assert body["detail"] == "Validation error"
    assert {tuple(e["loc"])[-1] for e in body["errors"]} >= {"email", "password", "role"}


def test_login(client):
    register(client, "Sam Student", "student", email="sam@school.edu", password="correct-horse")

    ok = client.post("/api/v1/auth/login", json={"email": "sam@school.edu", "password": "correct-horse"})
    assert ok.status_code == 200
    assert ok.json()["user"]["role"] == "student"

    bad = client.post("/api/v1/auth/login", json={"email": "sam@school.edu", "password": "wrong-horse"})
    assert bad.status_code == 401

    unknown = client.post("/api/v1/auth/login", json={"email": "nobody@school.edu", "password": "x"})
    assert unknown.status_code == 401


def test_logout_invalidates_session(client):
    user = register(client, "Sam Student", "student")

    assert client.post("/api/v1/auth/logout", headers=user.headers).status_code == 200
    assert client.get("/api/v1/auth/me", headers=user.headers).status_code == 401


def test_token_without_session_is_rejected(client):
    user = register(client, "Sam Student", "student")
    # Valid signature, but never stored as a session
    forged = auth.create_access_token(subject=user.id, expires_delta=timedelta(minutes=5))

    response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {forged}"})
    assert response.status_code == 401


def test_garbage_token_is_rejected(client):
    response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_password_hashing():
    hashed = auth.get_password_hash("password123")
    assert hashed != "password123"
    assert auth.verify_password("password123", hashed)
    assert not auth.verify_password("password124", hashed)


def test_decode_access_token():
    token = auth.create_access_token(subject="user-1")
    assert auth.decode_access_token(token) == "user-1"
    foreign = jwt.encode({"sub": "user-1"}, "some-other-key", algorithm="HS256")
    assert auth.decode_access_token(foreign) is None
    expired = auth.create_access_token(subject="user-1", expires_delta=timedelta(minutes=-1))
    assert auth.decode_access_token(expired) is None
