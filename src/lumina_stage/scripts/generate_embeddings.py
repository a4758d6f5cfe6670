"""Backfill embeddings for blogs that were saved without one."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from lumina_stage.db.session import SessionLocal
from lumina_stage.models import Blog
from lumina_stage.services.ai import AIClient, get_ai_client
from lumina_stage.services.blogs import embedding_text

logger = logging.getLogger(__name__)


async def backfill(db: Session, client: AIClient, *, limit: int | None = None) -> int:
    """Embed every blog whose embedding is NULL; return how many were stored."""
    query = select(Blog.id, Blog.title, Blog.body).where(Blog.embedding.is_(None)).order_by(Blog.id)
    if limit is not None:
        query = query.limit(limit)
    rows = db.execute(query).all()
    logger.info("%d blogs need embeddings", len(rows))

    stored = 0
    for blog_id, title, body in rows:
        vector = await client.embed(embedding_text(title, body))
        if not vector:
            logger.warning("No embedding returned for blog %s", blog_id)
            continue
        db.execute(update(Blog).where(Blog.id == blog_id).values(embedding=vector))
        db.commit()
        stored += 1
        logger.info("Embedded blog %s", blog_id)
    return stored


async def _run(limit: int | None) -> int:
    client = get_ai_client()
    if not client.embeddings_enabled:
        logger.error("GOOGLE_EMBEDDING_API_KEY (or GOOGLE_GEMINI_API_KEY) is not set")
        return 1
    db = SessionLocal()
    try:
        stored = await backfill(db, client, limit=limit)
    finally:
        db.close()
        await client.close()
    logger.info("Stored %d embeddings", stored)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate missing blog embeddings")
    parser.add_argument("--limit", type=int, default=None, help="Process at most N blogs")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="[embeddings] %(message)s")
    return asyncio.run(_run(args.limit))


if __name__ == "__main__":
    sys.exit(main())
