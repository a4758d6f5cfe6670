"""Tests for the admin console."""

from datetime import timedelta

from fastapi import status
from sqlalchemy import func, select

from lumina_stage.db.time import utcnow
from lumina_stage.models import Announcement, Blog, User
from tests.factories import make_blog


def test_admin_routes_require_admin(client, auth_token) -> None:
    r = client.get("/api/v1/admin/", headers=auth_token)
    assert r.status_code == status.HTTP_403_FORBIDDEN
    r = client.post("/api/v1/admin/announcements", json={"message": "Hi"}, headers=auth_token)
    assert r.status_code == status.HTTP_403_FORBIDDEN


def test_dashboard(client, db_session, test_user, test_blog, admin_auth_token) -> None:
    r = client.get("/api/v1/admin/", headers=admin_auth_token)
    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    assert data["stats"] == {"users": 2, "blogs": 1, "comments": 0}
    assert [blog["id"] for blog in data["blogs"]] == [test_blog.id]
    assert data["announcement"] is None

    r = client.get("/api/v1/admin/", params={"search": "test u"}, headers=admin_auth_token)
    assert [user["id"] for user in r.json()["users"]] == [test_user.id]


def test_toggle_role(client, test_user, admin_user, admin_auth_token) -> None:
    r = client.post(f"/api/v1/admin/users/{test_user.id}/role", headers=admin_auth_token)
    assert r.json() == {"id": test_user.id, "role": "ADMIN"}
    r = client.post(f"/api/v1/admin/users/{test_user.id}/role", headers=admin_auth_token)
    assert r.json()["role"] == "USER"

    r = client.post(f"/api/v1/admin/users/{admin_user.id}/role", headers=admin_auth_token)
    assert r.status_code == status.HTTP_400_BAD_REQUEST


def test_delete_user(
    client, db_session, test_user, test_blog, admin_user, admin_auth_token
) -> None:
    user_id = test_user.id

    r = client.delete(f"/api/v1/admin/users/{admin_user.id}", headers=admin_auth_token)
    assert r.status_code == status.HTTP_400_BAD_REQUEST

    r = client.delete(f"/api/v1/admin/users/{user_id}", headers=admin_auth_token)
    assert r.status_code == status.HTTP_204_NO_CONTENT
    remaining = select(func.count()).select_from(User).where(User.id == user_id)
    assert db_session.scalar(remaining) == 0
    assert db_session.scalar(select(func.count()).select_from(Blog)) == 0

    r = client.delete("/api/v1/admin/users/999", headers=admin_auth_token)
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_feature_and_remove_blog(client, db_session, test_user, admin_auth_token) -> None:
    blog = make_blog(db_session, test_user)

    r = client.post(f"/api/v1/admin/blogs/{blog.id}/feature", headers=admin_auth_token)
    assert r.json() == {"id": blog.id, "featured": True}
    assert [item["id"] for item in client.get("/api/v1/blogs/featured").json()] == [blog.id]

    r = client.delete(f"/api/v1/admin/blogs/{blog.id}", headers=admin_auth_token)
    assert r.status_code == status.HTTP_204_NO_CONTENT
    assert client.get("/api/v1/blogs/featured").json() == []


def test_announcements_replace_each_other(client, db_session, admin_auth_token) -> None:
    first = client.post(
        "/api/v1/admin/announcements",
        json={"message": "Maintenance tonight", "type": "warning"},
        headers=admin_auth_token,
    )
    assert first.status_code == status.HTTP_201_CREATED
    assert first.json()["expires_at"] is None

    second = client.post(
        "/api/v1/admin/announcements",
        json={"message": "New editor!", "duration_hours": 2},
        headers=admin_auth_token,
    )
    assert second.json()["expires_at"] is not None

    active = client.get("/api/v1/announcements/active").json()
    assert active["message"] == "New editor!"
    assert db_session.scalars(select(Announcement.is_active).order_by(Announcement.id)).all() == [
        False,
        True,
    ]

    second_id = second.json()["id"]
    r = client.delete(f"/api/v1/admin/announcements/{second_id}", headers=admin_auth_token)
    assert r.status_code == status.HTTP_204_NO_CONTENT
    assert client.get("/api/v1/announcements/active").json() is None
    r = client.delete("/api/v1/admin/announcements/999", headers=admin_auth_token)
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_expired_announcements_are_hidden(client, db_session) -> None:
    db_session.add(
        Announcement(message="Old news", expires_at=utcnow() - timedelta(minutes=1))
    )
    db_session.flush()

    assert client.get("/api/v1/announcements/active").json() is None


def test_invalid_announcement_type(client, admin_auth_token) -> None:
    r = client.post(
        "/api/v1/admin/announcements",
        json={"message": "Hi", "type": "shout"},
        headers=admin_auth_token,
    )
    assert r.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
