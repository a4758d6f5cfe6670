"""Background embedding enrichment for blogs."""

from __future__ import annotations

import logging
from collections.abc import Callable

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lumina_stage.db.session import SessionLocal
from lumina_stage.models import Blog
from lumina_stage.services.ai import AIClient

logger = logging.getLogger(__name__)


async def enrich_blog_embedding(
    blog_id: int,
    text: str,
    client: AIClient,
    session_factory: Callable[[], Session] = SessionLocal,
) -> bool:
    """Compute and store the embedding for ``blog_id``.

    Runs after the response has been sent, so it uses its own session. Returns
    True when an embedding was stored.
    """
    vector = await client.embed(text)
    if not vector:
        logger.warning("No embedding produced for blog %s", blog_id)
        return False

    db = session_factory()
    try:
        result = db.execute(
            update(Blog)
            .where(Blog.id == blog_id)
            .values(embedding=vector)
            .execution_options(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to store embedding for blog %s", blog_id)
        return False
    finally:
        db.close()

    if not result.rowcount:
        logger.warning("Blog %s disappeared before its embedding was stored", blog_id)
        return False
    logger.info("Stored embedding for blog %s (%d dimensions)", blog_id, len(vector))
    return True
