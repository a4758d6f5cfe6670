# src/lumina_stage/services/__init__.py
"""Business logic services for the Lumina application."""

from .ai import AIClient, AIDisabledError, AIServiceError, get_ai_client
from .moderation import ModerationResult, ModerationService
from .threads import CommentThread, ThreadNode, build_thread

__all__ = [
    "AIClient",
    "AIDisabledError",
    "AIServiceError",
    "get_ai_client",
    "ModerationResult",
    "ModerationService",
    "CommentThread",
    "ThreadNode",
    "build_thread",
]
