"""AI client for content generation, summaries and embeddings.

This module provides the AIClient class that wraps the Gemini REST API. It
includes:

- Lazily created HTTP client shared across requests
- Text generation with optional JSON extraction
- Embedding generation that degrades to an empty vector
- Summaries with a model fallback chain
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from dataclasses import dataclass
from typing import Any

import httpx

from lumina_stage.core.settings import settings

# Configure logger for this module
logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_TOO_MANY_REQUESTS = 429

# Roughly 2048 tokens at ~4 characters per token.
EMBEDDING_MAX_CHARS = 8000
SUMMARY_MAX_CHARS = 5000
SUMMARY_FALLBACK_CHARS = 150
SUMMARY_FALLBACK_HIGHLIGHT = (
    "Could not generate AI highlights at this time. "
    "Please check your API quota or model availability."
)

_CODE_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


class AIServiceError(RuntimeError):
    """Base exception raised for AI service failures."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def quota_exceeded(self) -> bool:
        """Return True when the provider rejected the call for quota reasons."""
        return self.status_code == HTTP_TOO_MANY_REQUESTS


class AIDisabledError(AIServiceError):
    """Raised when AI operations are attempted without an API key."""


@dataclass(frozen=True)
class AIConfig:
    """Immutable configuration for AI operations."""

    api_key: str | None
    embedding_api_key: str | None
    moderation_api_key: str | None
    model: str
    summary_models: tuple[str, ...]
    embedding_model: str
    base_url: str
    timeout_seconds: float


def load_ai_config() -> AIConfig:
    """Build configuration object from global settings."""

    return AIConfig(
        api_key=settings.ai_api_key,
        embedding_api_key=settings.embedding_api_key,
        moderation_api_key=settings.moderation_api_key,
        model=settings.ai_model,
        summary_models=tuple(settings.ai_summary_models),
        embedding_model=settings.ai_embedding_model,
        base_url=settings.ai_base_url,
        timeout_seconds=float(settings.ai_http_timeout_seconds),
    )


def extract_json(text: str) -> Any:
    """Parse JSON out of a model reply, tolerating code fences and chatter."""
    cleaned = _CODE_FENCE.sub("", text).strip()
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    for pattern in (_JSON_OBJECT, _JSON_ARRAY):
        match = pattern.search(cleaned)
        if match:
            try:
                return json.loads(match.group(0))
            except json.JSONDecodeError:
                continue
    raise AIServiceError("No JSON found in AI response")


class AIClient:
    """HTTP client wrapper for the generative AI provider."""

    def __init__(self, config: AIConfig | None = None) -> None:
        self.config = config or load_ai_config()
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return bool(self.config.api_key)

    @property
    def embeddings_enabled(self) -> bool:
        return bool(self.config.embedding_api_key)

    @property
    def moderation_enabled(self) -> bool:
        return bool(self.config.moderation_api_key)

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.config.base_url,
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                )
        return self._client

    async def _post(self, path: str, payload: dict[str, Any], api_key: str | None) -> dict[str, Any]:
        if not api_key:
            raise AIDisabledError("AI service not configured")

        client = await self._ensure_client()
        try:
            response = await client.post(
                path,
                json=payload,
                headers={"x-goog-api-key": api_key},
            )
        except httpx.HTTPError as exc:
            raise AIServiceError(f"AI request failed: {exc}") from exc

        if response.status_code != HTTP_OK:
            message = f"AI provider responded with {response.status_code}"
            try:
                error = response.json().get("error", {})
                if isinstance(error, dict) and error.get("message"):
                    message = str(error["message"])
            except ValueError:
                pass
            raise AIServiceError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise AIServiceError("AI provider returned invalid JSON") from exc

    async def generate_text(
        self,
        prompt: str | list[str],
        *,
        model: str | None = None,
        api_key: str | None = None,
    ) -> str:
        """Generate text for ``prompt`` and return the concatenated reply."""
        parts = [prompt] if isinstance(prompt, str) else list(prompt)
        payload = {"contents": [{"role": "user", "parts": [{"text": part} for part in parts]}]}
        data = await self._post(
            f"/models/{model or self.config.model}:generateContent",
            payload,
            api_key or self.config.api_key,
        )

        texts: list[str] = []
        for candidate in data.get("candidates") or []:
            content = candidate.get("content") or {}
            for part in content.get("parts") or []:
                text = part.get("text")
                if isinstance(text, str):
                    texts.append(text)
            if texts:
                break
        return "".join(texts).strip()

    async def generate_json(
        self,
        prompt: str | list[str],
        *,
        model: str | None = None,
        api_key: str | None = None,
    ) -> Any:
        """Generate a reply and parse the JSON payload it contains."""
        text = await self.generate_text(prompt, model=model, api_key=api_key)
        return extract_json(text)

    async def embed(self, text: str) -> list[float]:
        """Return an embedding for ``text``, or an empty list if unavailable.

        Embeddings are optional enrichment, so failures are logged rather than
        raised.
        """
        if not self.embeddings_enabled:
            logger.warning("Embedding API key missing; skipping embedding generation")
            return []
        if not text or not isinstance(text, str):
            return []

        model = self.config.embedding_model
        payload = {
            "model": f"models/{model}",
            "content": {"parts": [{"text": text[:EMBEDDING_MAX_CHARS]}]},
        }
        try:
            data = await self._post(
                f"/models/{model}:embedContent",
                payload,
                self.config.embedding_api_key,
            )
        except AIServiceError as exc:
            logger.error("Error generating embedding: %s", exc)
            return []

        values = (data.get("embedding") or {}).get("values") or []
        return [float(value) for value in values]

    async def summarize(self, text: str) -> dict[str, Any]:
        """Summarize ``text`` into a short paragraph and a few highlights."""
        fallback = {
            "summary": text[:SUMMARY_FALLBACK_CHARS] + "...",
            "highlights": [SUMMARY_FALLBACK_HIGHLIGHT],
        }
        if not self.enabled:
            return {"summary": "AI service unavailable.", "highlights": []}

        prompt = (
            "Summarize the following blog post in 2-3 sentences. Also, extract 3-5 key "
            "highlights as brief bullet points.\n"
            'Return the result in JSON format: {"summary": "...", "highlights": ["...", "..."]}.\n\n'
            f"Content: {text[:SUMMARY_MAX_CHARS]}"
        )
        for model in self.config.summary_models:
            try:
                data = await self.generate_json(prompt, model=model)
            except AIServiceError as exc:
                logger.error("Summary model %s failed: %s", model, exc)
                continue
            if isinstance(data, dict) and "summary" in data:
                highlights = data.get("highlights") or []
                return {
                    "summary": str(data["summary"]),
                    "highlights": [str(item) for item in highlights],
                }
            logger.error("Summary model %s returned an unexpected payload", model)
        return fallback

    async def close(self) -> None:
        """Clean up underlying HTTP client resources."""

        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None


class _AIClientSingleton:
    """Singleton wrapper for AIClient."""

    _instance: AIClient | None = None

    @classmethod
    def get_instance(cls) -> AIClient:
        if cls._instance is None:
            cls._instance = AIClient()
        return cls._instance


def get_ai_client() -> AIClient:
    """Return a singleton AI client instance."""
    return _AIClientSingleton.get_instance()
