"""Hybrid content moderation for user-submitted text."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from lumina_stage.core.settings import settings
from lumina_stage.models import ModerationLog
from lumina_stage.models.moderation import MODERATION_ACTION_BLOCKED
from lumina_stage.services.ai import AIClient, AIServiceError

logger = logging.getLogger(__name__)

SOURCE_LOCAL = "local"
SOURCE_AI = "ai"

AI_MODERATION_MAX_CHARS = 1000

BASE_BLOCKED_WORDS: frozenset[str] = frozenset(
    {
        "arse",
        "arsehole",
        "ass",
        "asshole",
        "assholes",
        "bastard",
        "bastards",
        "bitch",
        "bitches",
        "bitching",
        "bollocks",
        "bullshit",
        "cock",
        "crap",
        "cunt",
        "cunts",
        "damn",
        "dick",
        "dickhead",
        "dicks",
        "dumbass",
        "fag",
        "faggot",
        "fuck",
        "fucked",
        "fucker",
        "fuckers",
        "fuckin",
        "fucking",
        "fucks",
        "goddamn",
        "idiot",
        "idiots",
        "jackass",
        "motherfucker",
        "motherfucking",
        "nigga",
        "nigger",
        "piss",
        "pissed",
        "prick",
        "pussy",
        "retard",
        "shit",
        "shits",
        "shitty",
        "slut",
        "sluts",
        "stupid",
        "twat",
        "wanker",
        "whore",
        "whores",
    }
)

_HTML_TAG = re.compile(r"<[^>]*>")
_WHITESPACE = re.compile(r"\s+")

AI_MODERATION_PROMPT = """Analyze the following text for safety violations.
Categories to check:
- Hate Speech
- Harassment
- Sexual Content
- Dangerous Content / Violence
- Toxicity

Text: "{text}"

Respond with ONLY a JSON object:
{{
    "safe": boolean,
    "reason": "Short explanation if unsafe, otherwise null"
}}
"""


@dataclass(frozen=True)
class ModerationResult:
    """Outcome of a moderation check."""

    safe: bool
    reason: str | None = None
    flagged_words: list[str] = field(default_factory=list)
    source: str | None = None


ALLOWED = ModerationResult(safe=True)


def strip_html(text: str) -> str:
    """Replace tags with spaces and collapse whitespace."""
    return _WHITESPACE.sub(" ", _HTML_TAG.sub(" ", text)).strip()


def find_blocked_words(text: str, blocked: Iterable[str]) -> list[str]:
    """Return the words of ``text`` that appear in ``blocked``, in order of appearance."""
    words = sorted({word.lower() for word in blocked if word}, key=len, reverse=True)
    if not words or not text:
        return []
    pattern = re.compile(
        r"\b(" + "|".join(re.escape(word) for word in words) + r")\b",
        re.IGNORECASE,
    )
    hits: list[str] = []
    for match in pattern.finditer(text):
        if match.group(0) not in hits:
            hits.append(match.group(0))
    return hits


class ModerationService:
    """Local word filter followed by an optional AI safety check."""

    def __init__(
        self,
        ai_client: AIClient | None = None,
        extra_words: Iterable[str] | None = None,
        ai_enabled: bool | None = None,
    ) -> None:
        self.ai_client = ai_client
        extra = settings.moderation_extra_words if extra_words is None else extra_words
        self.blocked_words = BASE_BLOCKED_WORDS | {word.lower() for word in extra}
        self.ai_enabled = settings.moderation_ai_enabled if ai_enabled is None else ai_enabled

    def check_local(self, text: str) -> ModerationResult:
        """Run only the keyword filter."""
        plain = strip_html(text or "")
        if not plain:
            return ALLOWED
        hits = find_blocked_words(plain, self.blocked_words)
        if not hits:
            return ALLOWED
        return ModerationResult(
            safe=False,
            reason=f'Contains profane word: "{hits[0]}" (Local Filter)',
            flagged_words=hits,
            source=SOURCE_LOCAL,
        )

    async def _check_ai(self, text: str) -> ModerationResult:
        client = self.ai_client
        if client is None or not self.ai_enabled or not client.moderation_enabled:
            return ALLOWED

        prompt = AI_MODERATION_PROMPT.format(text=text[:AI_MODERATION_MAX_CHARS])
        try:
            analysis = await client.generate_json(
                prompt,
                api_key=client.config.moderation_api_key,
            )
        except AIServiceError as exc:
            # Outages must not block publishing; the local filter already ran.
            logger.warning("AI moderation unavailable, allowing content: %s", exc)
            return ALLOWED

        if isinstance(analysis, dict) and analysis.get("safe") is False:
            return ModerationResult(
                safe=False,
                reason=analysis.get("reason") or "Content flagged as unsafe by AI.",
                source=SOURCE_AI,
            )
        return ALLOWED

    async def moderate(self, text: str) -> ModerationResult:
        """Check ``text`` with the local filter and then the AI model."""
        if not text or not text.strip():
            return ALLOWED
        local = self.check_local(text)
        if not local.safe:
            return local
        return await self._check_ai(text)

    @staticmethod
    def record_rejection(
        db: Session,
        content: str,
        result: ModerationResult,
        user_id: int | None = None,
        ip_address: str | None = None,
    ) -> ModerationLog:
        """Persist a rejected submission for administrator review."""
        entry = ModerationLog(
            content=content,
            reason=result.reason or "Rejected",
            flagged_words=list(result.flagged_words),
            user_id=user_id,
            ip_address=ip_address,
            action_taken=MODERATION_ACTION_BLOCKED,
        )
        db.add(entry)
        db.commit()
        logger.info("Blocked content from user %s: %s", user_id, entry.reason)
        return entry
