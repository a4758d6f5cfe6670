"""Import comment reactions from a JSON export of the old reaction maps.

The export is either an object keyed by comment id or a list of objects with
``id`` (or ``_id``/``comment_id``) and ``reactions`` fields. Each reaction
value may be any of the shapes accepted by ``coerce_legacy_reactions``.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from lumina_stage.db.session import SessionLocal
from lumina_stage.models import Comment, CommentReaction, User
from lumina_stage.services.comments import coerce_legacy_reactions

logger = logging.getLogger(__name__)


def _entries(data: Any) -> Iterable[tuple[Any, Any]]:
    if isinstance(data, Mapping):
        yield from data.items()
    elif isinstance(data, list):
        for item in data:
            if not isinstance(item, Mapping):
                continue
            comment_id = item.get("id", item.get("_id", item.get("comment_id")))
            yield comment_id, item.get("reactions")


def import_reactions(db: Session, data: Any) -> int:
    """Write reaction rows for every usable entry; return the number written."""
    known_users = set(db.scalars(select(User.id)).all())
    written = 0
    for raw_id, raw_reactions in _entries(data):
        try:
            comment_id = int(raw_id)
        except (TypeError, ValueError):
            logger.warning("Skipping entry with unusable comment id %r", raw_id)
            continue
        comment = db.get(Comment, comment_id)
        if comment is None:
            logger.warning("Skipping reactions for missing comment %s", comment_id)
            continue

        existing = {row.user_id: row for row in comment.reaction_rows}
        for user_id, symbol in coerce_legacy_reactions(raw_reactions).items():
            if user_id not in known_users:
                continue
            row = existing.get(user_id)
            if row is None:
                comment.reaction_rows.append(
                    CommentReaction(comment_id=comment.id, user_id=user_id, symbol=symbol)
                )
            else:
                row.symbol = symbol
            written += 1
    db.commit()
    return written


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Import legacy comment reactions")
    parser.add_argument("path", type=Path, help="JSON export to read")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="[reactions] %(message)s")

    try:
        data = json.loads(args.path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.error("Cannot read %s: %s", args.path, exc)
        return 1

    db = SessionLocal()
    try:
        written = import_reactions(db, data)
    finally:
        db.close()
    logger.info("Wrote %d reactions", written)
    return 0


if __name__ == "__main__":
    sys.exit(main())
