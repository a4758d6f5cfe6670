"""Tests for the AI writing assistant endpoints."""

from datetime import timedelta

import pytest
from fastapi import status
from sqlalchemy import select

from lumina_stage.core.settings import settings
from lumina_stage.db.time import utcnow
from lumina_stage.models import User
from lumina_stage.services.ai import AIDisabledError, AIServiceError


def test_generate_blog(client, fake_ai, auth_token) -> None:
    fake_ai.text_reply = "<p>Hello readers.</p>"

    r = client.post(
        "/api/v1/ai/generate-blog",
        json={"title": "Slow mornings", "tone": "Warm"},
        headers=auth_token,
    )
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"content": "<p>Hello readers.</p>"}
    system_prompt, user_prompt = fake_ai.prompts[0]
    assert "Tone: Warm." in system_prompt
    assert '"Slow mornings"' in user_prompt


def test_generate_tags_splits_reply(client, fake_ai, auth_token) -> None:
    fake_ai.text_reply = '"Tech", AI , Future,,'

    r = client.post(
        "/api/v1/ai/generate-tags",
        json={"title": "Robots", "body": "Thoughts on machines"},
        headers=auth_token,
    )
    assert r.json() == {"tags": ["Tech", "AI", "Future"]}


def test_generate_title(client, fake_ai, auth_token) -> None:
    fake_ai.json_reply = ["First idea", "  ", "Second idea"]

    r = client.post("/api/v1/ai/generate-title", json={"body": "Some draft"}, headers=auth_token)
    assert r.json() == {"titles": ["First idea", "Second idea"]}


def test_generate_title_rejects_non_list(client, fake_ai, auth_token) -> None:
    fake_ai.json_reply = {"titles": ["Nested"]}

    r = client.post("/api/v1/ai/generate-title", json={"body": "Some draft"}, headers=auth_token)
    assert r.status_code == status.HTTP_502_BAD_GATEWAY


@pytest.mark.parametrize(
    ("url", "payload"),
    [
        ("/api/v1/ai/generate-blog", {"title": "   "}),
        ("/api/v1/ai/generate-tags", {"title": "", "body": "body only"}),
        ("/api/v1/ai/generate-title", {"body": " "}),
    ],
)
def test_empty_input_is_rejected(client, fake_ai, auth_token, url, payload) -> None:
    r = client.post(url, json=payload, headers=auth_token)
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert fake_ai.prompts == []


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (AIDisabledError("AI service not configured"), status.HTTP_503_SERVICE_UNAVAILABLE),
        (AIServiceError("slow down", status_code=429), status.HTTP_429_TOO_MANY_REQUESTS),
        (AIServiceError("upstream broke", status_code=500), status.HTTP_502_BAD_GATEWAY),
    ],
)
def test_provider_errors_map_to_status(client, fake_ai, auth_token, error, expected) -> None:
    fake_ai.error = error

    r = client.post("/api/v1/ai/generate-blog", json={"title": "Anything"}, headers=auth_token)
    assert r.status_code == expected


def test_empty_reply_is_bad_gateway(client, fake_ai, auth_token) -> None:
    fake_ai.text_reply = ""

    r = client.post("/api/v1/ai/generate-blog", json={"title": "Anything"}, headers=auth_token)
    assert r.status_code == status.HTTP_502_BAD_GATEWAY


def test_requests_stamp_last_ai_request(client, db_session, test_user, auth_token) -> None:
    client.post("/api/v1/ai/generate-blog", json={"title": "Anything"}, headers=auth_token)

    stamped = db_session.scalar(select(User.last_ai_request).where(User.id == test_user.id))
    assert stamped is not None


def test_ai_cooldown(client, db_session, monkeypatch, test_user, auth_token) -> None:
    monkeypatch.setattr(settings, "ai_cooldown_seconds", 60)
    test_user.last_ai_request = utcnow() - timedelta(seconds=10)
    db_session.flush()

    r = client.post("/api/v1/ai/generate-blog", json={"title": "Anything"}, headers=auth_token)
    assert r.status_code == status.HTTP_429_TOO_MANY_REQUESTS


def test_admins_skip_ai_cooldown(
    client, db_session, monkeypatch, admin_user, admin_auth_token
) -> None:
    monkeypatch.setattr(settings, "ai_cooldown_seconds", 60)
    admin_user.last_ai_request = utcnow()
    db_session.flush()

    r = client.post(
        "/api/v1/ai/generate-blog", json={"title": "Anything"}, headers=admin_auth_token
    )
    assert r.status_code == status.HTTP_200_OK


def test_ai_requires_login(client) -> None:
    r = client.post("/api/v1/ai/generate-blog", json={"title": "Anything"})
    assert r.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)
