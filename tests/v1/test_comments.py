"""Tests for comment endpoints."""

from datetime import timedelta

from fastapi import status
from sqlalchemy import select

from lumina_stage.core.settings import settings
from lumina_stage.db.time import utcnow
from lumina_stage.models import Notification
from lumina_stage.models.blog import BLOG_STATUS_PRIVATE
from lumina_stage.models.notification import NOTIFICATION_COMMENT, NOTIFICATION_REPLY
from tests.factories import auth_headers, make_blog, make_comment, make_user


def test_comment_and_reply_build_a_thread(
    client, db_session, test_blog, test_user, other_user, auth_token, other_auth_token
) -> None:
    r = client.post(
        f"/api/v1/blogs/{test_blog.id}/comments",
        json={"content": "  Lovely piece  "},
        headers=other_auth_token,
    )
    assert r.status_code == status.HTTP_201_CREATED
    comment = r.json()
    assert comment["content"] == "Lovely piece"
    assert comment["depth"] == 1
    assert comment["is_author"] is False

    r = client.post(
        f"/api/v1/comments/{comment['id']}/reply",
        json={"content": "Thank you!"},
        headers=auth_token,
    )
    assert r.status_code == status.HTTP_201_CREATED
    reply = r.json()
    assert reply["parent_id"] == comment["id"]
    assert reply["depth"] == 2
    assert reply["is_author"] is True

    thread = client.get(f"/api/v1/blogs/{test_blog.id}/comments").json()
    assert [node["id"] for node in thread] == [comment["id"]]
    assert [node["id"] for node in thread[0]["children"]] == [reply["id"]]

    notes = db_session.execute(select(Notification.user_id, Notification.type)).all()
    assert sorted(notes) == sorted(
        [(test_user.id, NOTIFICATION_COMMENT), (other_user.id, NOTIFICATION_REPLY)]
    )


def test_thread_puts_author_then_pinned_first(
    client, db_session, test_blog, test_user, other_user
) -> None:
    start = utcnow() - timedelta(hours=1)
    by_author = make_comment(db_session, test_blog, test_user, "author", created_at=start)
    pinned = make_comment(
        db_session,
        test_blog,
        other_user,
        "pinned",
        is_pinned=True,
        created_at=start + timedelta(minutes=1),
    )
    newest = make_comment(
        db_session, test_blog, other_user, "newest", created_at=start + timedelta(minutes=2)
    )

    thread = client.get(f"/api/v1/blogs/{test_blog.id}/comments").json()
    assert [node["id"] for node in thread] == [by_author.id, pinned.id, newest.id]


def test_comment_on_missing_blog(client, auth_token) -> None:
    r = client.post("/api/v1/blogs/999/comments", json={"content": "Hi"}, headers=auth_token)
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_comment_cooldown(
    client, monkeypatch, db_session, test_blog, other_user, other_auth_token
) -> None:
    monkeypatch.setattr(settings, "comment_cooldown_seconds", 300)
    make_comment(db_session, test_blog, other_user, "earlier")

    r = client.post(
        f"/api/v1/blogs/{test_blog.id}/comments",
        json={"content": "again"},
        headers=other_auth_token,
    )
    assert r.status_code == status.HTTP_429_TOO_MANY_REQUESTS


def test_comment_moderation(client, test_blog, other_auth_token) -> None:
    r = client.post(
        f"/api/v1/blogs/{test_blog.id}/comments",
        json={"content": "you idiot"},
        headers=other_auth_token,
    )
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert "Local Filter" in r.json()["detail"]


def test_delete_permissions(client, db_session, test_blog, test_comment, admin_user) -> None:
    stranger = make_user(db_session, "Stranger")
    r = client.delete(f"/api/v1/comments/{test_comment.id}", headers=auth_headers(stranger))
    assert r.status_code == status.HTTP_403_FORBIDDEN

    r = client.delete(f"/api/v1/comments/{test_comment.id}", headers=auth_headers(admin_user))
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"removed": True, "tombstoned": False}


def test_blog_author_can_delete_and_tombstone(
    client, db_session, test_blog, test_comment, other_user, auth_token
) -> None:
    make_comment(db_session, test_blog, other_user, "reply", parent=test_comment)

    r = client.delete(f"/api/v1/comments/{test_comment.id}", headers=auth_token)
    assert r.json() == {"removed": False, "tombstoned": True}

    thread = client.get(f"/api/v1/blogs/{test_blog.id}/comments").json()
    assert thread[0]["is_deleted"] is True
    assert thread[0]["content"] == "[This comment was deleted]"
    assert len(thread[0]["children"]) == 1

    r = client.post(
        f"/api/v1/comments/{test_comment.id}/reply",
        json={"content": "late"},
        headers=auth_token,
    )
    assert r.status_code == status.HTTP_400_BAD_REQUEST


def test_pin_is_reserved_for_blog_author(
    client, test_comment, auth_token, other_auth_token
) -> None:
    r = client.post(f"/api/v1/comments/{test_comment.id}/pin", headers=other_auth_token)
    assert r.status_code == status.HTTP_403_FORBIDDEN

    r = client.post(f"/api/v1/comments/{test_comment.id}/pin", headers=auth_token)
    assert r.json() == {"pinned": True}
    r = client.post(f"/api/v1/comments/{test_comment.id}/pin", headers=auth_token)
    assert r.json() == {"pinned": False}


def test_reactions_toggle_and_count(client, test_comment, auth_token, other_auth_token) -> None:
    url = f"/api/v1/comments/{test_comment.id}/react"

    r = client.post(url, json={"emoji": "👍"}, headers=auth_token)
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["reaction"] == "👍"
    assert r.json()["counts"]["👍"] == 1

    client.post(url, json={"emoji": "LIKE"}, headers=other_auth_token)
    r = client.post(url, json={"emoji": "🔥"}, headers=auth_token)
    assert r.json()["reaction"] == "🔥"
    assert r.json()["counts"]["👍"] == 1
    assert r.json()["counts"]["🔥"] == 1

    r = client.post(url, json={"emoji": "🔥"}, headers=auth_token)
    assert r.json()["reaction"] is None
    assert r.json()["counts"]["🔥"] == 0

    thread = client.get(f"/api/v1/blogs/{test_comment.blog_id}/comments").json()
    assert thread[0]["reactions"] == {"👍": 1}


def test_unknown_reaction_is_rejected(client, test_comment, auth_token) -> None:
    r = client.post(
        f"/api/v1/comments/{test_comment.id}/react",
        json={"emoji": "🙃"},
        headers=auth_token,
    )
    assert r.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_private_blog_comments_are_hidden_from_others(
    client, db_session, test_user, other_user, auth_token, other_auth_token
) -> None:
    hidden = make_blog(db_session, test_user, status=BLOG_STATUS_PRIVATE)
    note = make_comment(db_session, hidden, test_user, content="Only for me")
    url = f"/api/v1/blogs/{hidden.id}/comments"

    assert client.get(url).status_code == status.HTTP_404_NOT_FOUND
    r = client.post(url, json={"content": "Sneaking in"}, headers=other_auth_token)
    assert r.status_code == status.HTTP_404_NOT_FOUND
    r = client.post(
        f"/api/v1/comments/{note.id}/reply",
        json={"content": "Sneaking in"},
        headers=other_auth_token,
    )
    assert r.status_code == status.HTTP_404_NOT_FOUND
    r = client.post(
        f"/api/v1/comments/{note.id}/react", json={"emoji": "🔥"}, headers=other_auth_token
    )
    assert r.status_code == status.HTTP_404_NOT_FOUND

    r = client.get(url, headers=auth_token)
    assert [comment["content"] for comment in r.json()] == ["Only for me"]
