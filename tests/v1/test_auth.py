"""Tests for signup, signin and token handling."""

from fastapi import status
from jose import jwt

from lumina_stage.core.settings import settings
from lumina_stage.models.user import STATUS_BANNED
from tests.factories import TEST_PASSWORD, auth_headers


def test_signup_creates_account(client) -> None:
    r = client.post(
        "/api/v1/auth/signup",
        json={"full_name": "  Ada Writer ", "email": "Ada@Example.COM", "password": "longenough"},
    )
    assert r.status_code == status.HTTP_201_CREATED
    data = r.json()
    assert data["full_name"] == "Ada Writer"
    assert data["email"] == "ada@example.com"
    assert data["role"] == "USER"
    assert "password_hash" not in data


def test_signup_rejects_duplicate_email(client, test_user) -> None:
    r = client.post(
        "/api/v1/auth/signup",
        json={"full_name": "Copy", "email": test_user.email.upper(), "password": "longenough"},
    )
    assert r.status_code == status.HTTP_409_CONFLICT


def test_signup_validates_input(client) -> None:
    r = client.post(
        "/api/v1/auth/signup",
        json={"full_name": "Short", "email": "not-an-email", "password": "tiny"},
    )
    assert r.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_signin_issues_token(client, test_user) -> None:
    r = client.post(
        "/api/v1/auth/signin",
        json={"email": test_user.email, "password": TEST_PASSWORD},
    )
    assert r.status_code == status.HTTP_200_OK
    token = r.json()["access_token"]
    claims = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    assert claims["sub"] == str(test_user.id)

    r = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["user"]["id"] == test_user.id


def test_signin_rejects_bad_password(client, test_user) -> None:
    r = client.post(
        "/api/v1/auth/signin",
        json={"email": test_user.email, "password": "wrong password"},
    )
    assert r.status_code == status.HTTP_401_UNAUTHORIZED


def test_banned_accounts_cannot_sign_in_or_use_tokens(client, db_session, test_user) -> None:
    test_user.status = STATUS_BANNED
    db_session.flush()

    r = client.post(
        "/api/v1/auth/signin",
        json={"email": test_user.email, "password": TEST_PASSWORD},
    )
    assert r.status_code == status.HTTP_403_FORBIDDEN

    r = client.get("/api/v1/users/me", headers=auth_headers(test_user))
    assert r.status_code == status.HTTP_403_FORBIDDEN


def test_invalid_token_is_rejected(client) -> None:
    r = client.get("/api/v1/users/me", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == status.HTTP_401_UNAUTHORIZED


def test_missing_token_is_rejected(client) -> None:
    r = client.get("/api/v1/users/me")
    assert r.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)


def test_health_and_root(client) -> None:
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/").json()["docs"] == "/docs"
