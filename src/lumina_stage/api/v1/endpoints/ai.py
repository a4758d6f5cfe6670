# src/lumina_stage/api/v1/endpoints/ai.py
"""AI writing assistant endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.orm import Session

from lumina_stage.api.v1.dependencies import (
    AIClientDep,
    CurrentUserDep,
    SessionDep,
    enforce_cooldown,
)
from lumina_stage.core.settings import settings
from lumina_stage.db.time import utcnow
from lumina_stage.models import User
from lumina_stage.schemas.ai import (
    GenerateBlogRequest,
    GenerateBlogResponse,
    GenerateTagsRequest,
    GenerateTagsResponse,
    GenerateTitleRequest,
    GenerateTitleResponse,
)
from lumina_stage.services.ai import AIDisabledError, AIServiceError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"])

BLOG_SYSTEM_PROMPT = "\n".join(
    [
        "You are a professional blogger. Craft a complete, publish-ready blog post.",
        "Tone: {tone}.",
        "Requirements:",
        "- Return purely valid HTML structure.",
        "- Break text into short, readable paragraphs (max 3-4 sentences each).",
        "- Wrap EVERY paragraph in <p> tags.",
        "- Use <h2> for main sections and <h3> for subsections.",
        "- Use <ul> and <li> for lists.",
        "- Do NOT use Markdown (no **, ##). Do NOT wrap in ```html``` blocks.",
    ]
)

TITLE_PROMPT = "\n".join(
    [
        "You are a viral blog editor. Generate 5 catchy, engaging blog titles based on the content below.",
        "Context: {context}...",
        "Tone: {tone}",
        "Requirements:",
        "- Return ONLY a raw JSON array of strings",
        "- Titles should be short (under 60 chars)",
        "- No intro/outro text. Just the JSON array.",
    ]
)


def _consume_ai_quota(user: User, db: Session) -> None:
    """Apply the per-user AI cooldown and stamp the request time."""
    enforce_cooldown(user, user.last_ai_request, settings.ai_cooldown_seconds, "using AI")
    user.last_ai_request = utcnow()
    db.commit()


def _ai_http_error(exc: AIServiceError) -> HTTPException:
    if isinstance(exc, AIDisabledError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="AI service not configured",
        )
    if exc.quota_exceeded:
        return HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="AI quota exceeded. Please wait a minute.",
        )
    logger.error("AI request failed: %s", exc)
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


def _require(value: str, detail: str) -> str:
    value = value.strip()
    if not value:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
    return value


@router.post("/generate-blog", response_model=GenerateBlogResponse)
async def generate_blog(
    payload: GenerateBlogRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
    ai_client: AIClientDep,
) -> GenerateBlogResponse:
    """Draft an HTML blog body for a title."""
    title = _require(payload.title, "Please provide a blog title before generating content.")
    _consume_ai_quota(current_user, db)
    prompt = [
        BLOG_SYSTEM_PROMPT.format(tone=payload.tone.strip() or "Professional"),
        (
            f'Blog title: "{title}". Write the full blog content now. Do NOT repeat the '
            "title at the top. Start directly with the introduction."
        ),
    ]
    try:
        content = await ai_client.generate_text(prompt)
    except AIServiceError as exc:
        raise _ai_http_error(exc) from exc

    if not content:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="AI did not return any content. Please try again.",
        )
    return GenerateBlogResponse(content=content)


@router.post("/generate-tags", response_model=GenerateTagsResponse)
async def generate_tags(
    payload: GenerateTagsRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
    ai_client: AIClientDep,
) -> GenerateTagsResponse:
    """Suggest five tags for a draft."""
    title = _require(payload.title, "Title is required for tag generation.")
    _consume_ai_quota(current_user, db)
    context = f' with this content: "{payload.body[:500]}..."' if payload.body else ""
    prompt = (
        f'Generate 5 relevant, comma-separated tags for a blog post titled "{title}"{context}. '
        'Return ONLY the tags, no other text. Example: "Tech, AI, Future, Innovation, Coding"'
    )
    try:
        text = await ai_client.generate_text(prompt)
    except AIServiceError as exc:
        raise _ai_http_error(exc) from exc

    tags = [tag.strip().strip('"') for tag in text.split(",") if tag.strip().strip('"')]
    if not tags:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="AI did not return any tags. Please try again.",
        )
    return GenerateTagsResponse(tags=tags)


@router.post("/generate-title", response_model=GenerateTitleResponse)
async def generate_title(
    payload: GenerateTitleRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
    ai_client: AIClientDep,
) -> GenerateTitleResponse:
    """Suggest five titles for a draft body."""
    body = _require(payload.body, "Story content is required for context.")
    _consume_ai_quota(current_user, db)
    prompt = TITLE_PROMPT.format(context=body[:1000], tone=payload.tone.strip() or "Professional")
    try:
        data = await ai_client.generate_json(prompt)
    except AIServiceError as exc:
        raise _ai_http_error(exc) from exc

    if not isinstance(data, list):
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="AI returned titles in an unexpected format.",
        )
    titles = [str(title).strip() for title in data if str(title).strip()]
    if not titles:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="AI did not return any titles. Please try again.",
        )
    return GenerateTitleResponse(titles=titles)
