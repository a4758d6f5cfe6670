"""Tests for the hybrid moderation pipeline."""

import pytest
from sqlalchemy import select

from lumina_stage.models import ModerationLog
from lumina_stage.models.moderation import MODERATION_ACTION_BLOCKED
from lumina_stage.services.ai import AIServiceError
from lumina_stage.services.moderation import (
    SOURCE_AI,
    SOURCE_LOCAL,
    ModerationService,
    find_blocked_words,
    strip_html,
)
from tests.factories import FakeAIClient


class ModeratingAI(FakeAIClient):
    @property
    def moderation_enabled(self) -> bool:
        return True


def test_strip_html_collapses_whitespace() -> None:
    assert strip_html("<p>Hello</p>\n\n<b>world</b>") == "Hello world"


def test_find_blocked_words_matches_whole_words_only() -> None:
    blocked = {"idiot", "shit"}

    assert find_blocked_words("What an IDIOT, honestly", blocked) == ["IDIOT"]
    assert find_blocked_words("idiotic shitake recipes", blocked) == []


def test_local_filter_rejects_with_reason() -> None:
    service = ModerationService(extra_words=["stupid"], ai_enabled=False)

    result = service.check_local("<p>This is <em>stupid</em></p>")

    assert not result.safe
    assert result.reason == 'Contains profane word: "stupid" (Local Filter)'
    assert result.flagged_words == ["stupid"]
    assert result.source == SOURCE_LOCAL


@pytest.mark.parametrize(
    "text",
    [
        "you are stupid",
        "what an idiot",
        "total bullshit",
        "you dumbass",
        "that fucker left",
        "fucking awful",
        "a shitty idea",
    ],
)
def test_builtin_list_covers_common_insults_and_inflections(text: str) -> None:
    service = ModerationService(extra_words=[], ai_enabled=False)

    result = service.check_local(text)

    assert not result.safe
    assert result.source == SOURCE_LOCAL


def test_extra_words_extend_the_builtin_list() -> None:
    service = ModerationService(extra_words=["Grumpkin"], ai_enabled=False)

    assert not service.check_local("what a grumpkin").safe
    assert service.check_local("a pleasant morning").safe


@pytest.mark.asyncio
async def test_empty_text_is_always_safe() -> None:
    service = ModerationService(ai_client=ModeratingAI(), ai_enabled=True)

    assert (await service.moderate("")).safe
    assert (await service.moderate("   ")).safe


@pytest.mark.asyncio
async def test_ai_verdict_rejects_unsafe_text() -> None:
    ai = ModeratingAI()
    ai.json_reply = {"safe": False, "reason": "Harassment"}
    service = ModerationService(ai_client=ai, extra_words=[], ai_enabled=True)

    result = await service.moderate("a" * 3000)

    assert not result.safe
    assert result.reason == "Harassment"
    assert result.source == SOURCE_AI
    assert "a" * 1000 in ai.prompts[0]
    assert "a" * 1001 not in ai.prompts[0]


@pytest.mark.asyncio
async def test_local_hit_skips_ai() -> None:
    ai = ModeratingAI()
    service = ModerationService(ai_client=ai, ai_enabled=True)

    result = await service.moderate("well shit")

    assert not result.safe
    assert ai.prompts == []


@pytest.mark.asyncio
async def test_ai_outage_fails_open() -> None:
    ai = ModeratingAI()
    ai.error = AIServiceError("provider down", status_code=503)
    service = ModerationService(ai_client=ai, extra_words=[], ai_enabled=True)

    assert (await service.moderate("perfectly fine")).safe


@pytest.mark.asyncio
async def test_ai_skipped_without_moderation_key() -> None:
    ai = FakeAIClient()
    ai.json_reply = {"safe": False, "reason": "never asked"}
    service = ModerationService(ai_client=ai, extra_words=[], ai_enabled=True)

    assert (await service.moderate("perfectly fine")).safe
    assert ai.prompts == []


def test_record_rejection_writes_log(db_session, test_user) -> None:
    service = ModerationService(extra_words=["stupid"], ai_enabled=False)
    result = service.check_local("stupid idea")

    service.record_rejection(
        db_session, "stupid idea", result, user_id=test_user.id, ip_address="10.0.0.1"
    )

    entry = db_session.scalars(select(ModerationLog)).one()
    assert entry.user_id == test_user.id
    assert entry.ip_address == "10.0.0.1"
    assert entry.flagged_words == ["stupid"]
    assert entry.action_taken == MODERATION_ACTION_BLOCKED
