"""Comment operations: reactions, pinning and deletion."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from lumina_stage.models import Comment, CommentReaction, ReactionSymbol
from lumina_stage.models.comment import TOMBSTONE_CONTENT

logger = logging.getLogger(__name__)


def parse_symbol(value: Any) -> ReactionSymbol | None:
    """Return the reaction matching ``value`` by emoji or name, else None."""
    if isinstance(value, ReactionSymbol):
        return value
    if not isinstance(value, str):
        return None
    try:
        return ReactionSymbol(value)
    except ValueError:
        pass
    try:
        return ReactionSymbol[value.strip().upper()]
    except KeyError:
        return None


def reaction_counts(db: Session, comment_id: int) -> dict[str, int]:
    """Count reactions per symbol; every symbol is present."""
    counts = {symbol.value: 0 for symbol in ReactionSymbol}
    rows = db.execute(
        select(CommentReaction.symbol, func.count())
        .where(CommentReaction.comment_id == comment_id)
        .group_by(CommentReaction.symbol)
    ).all()
    for symbol, total in rows:
        counts[symbol.value] = total
    return counts


def toggle_reaction(
    db: Session,
    comment: Comment,
    user_id: int,
    symbol: ReactionSymbol,
) -> ReactionSymbol | None:
    """Apply a reaction click and return the user's reaction afterwards.

    Clicking the current reaction removes it; clicking another one replaces it.
    Only the caller's own row is touched.
    """
    existing = next((row for row in comment.reaction_rows if row.user_id == user_id), None)
    if existing is None:
        comment.reaction_rows.append(CommentReaction(user_id=user_id, symbol=symbol))
        current: ReactionSymbol | None = symbol
    elif existing.symbol == symbol:
        comment.reaction_rows.remove(existing)
        current = None
    else:
        existing.symbol = symbol
        current = symbol
    db.commit()
    return current


def has_replies(db: Session, comment_id: int) -> bool:
    return db.scalar(select(Comment.id).where(Comment.parent_id == comment_id).limit(1)) is not None


def delete_comment(db: Session, comment: Comment) -> bool:
    """Remove a comment; returns True if it was hard-deleted.

    Comments with replies are replaced by a tombstone so the thread stays intact.
    """
    if has_replies(db, comment.id):
        comment.content = TOMBSTONE_CONTENT
        comment.is_deleted = True
        comment.is_pinned = False
        comment.reaction_rows.clear()
        db.commit()
        return False

    parent_id = comment.parent_id
    db.delete(comment)
    db.commit()

    # A tombstone whose last reply is gone has nothing left to hold together.
    if parent_id is not None:
        parent = db.get(Comment, parent_id)
        if parent is not None and parent.is_deleted and not has_replies(db, parent.id):
            delete_comment(db, parent)
    return True


def toggle_pin(db: Session, comment: Comment) -> bool:
    """Pin ``comment`` (unpinning every other comment on the blog) or unpin it."""
    if comment.is_pinned:
        comment.is_pinned = False
        db.commit()
        return False

    db.execute(
        update(Comment)
        .where(Comment.blog_id == comment.blog_id, Comment.id != comment.id)
        .values(is_pinned=False)
        .execution_options(synchronize_session="fetch")
    )
    comment.is_pinned = True
    db.commit()
    return True


def _coerce_pair(user_id: Any, value: Any) -> tuple[int, ReactionSymbol] | None:
    symbol = parse_symbol(value)
    if symbol is None:
        return None
    if isinstance(user_id, bool):
        return None
    if isinstance(user_id, int):
        return user_id, symbol
    if isinstance(user_id, str) and user_id.strip().isdigit():
        return int(user_id.strip()), symbol
    return None


def coerce_legacy_reactions(raw: Any) -> dict[int, ReactionSymbol]:
    """Normalize an exported reaction value into ``{user_id: symbol}``.

    Accepts a mapping, a list of ``[user, symbol]`` pairs or a list of
    ``{"user": ..., "emoji": ...}`` objects. Unknown symbols, unusable user ids
    and anything else are dropped; later entries win for a repeated user.
    """
    result: dict[int, ReactionSymbol] = {}
    if isinstance(raw, Mapping):
        items: list[tuple[Any, Any]] = list(raw.items())
    elif isinstance(raw, list | tuple):
        items = []
        for entry in raw:
            if isinstance(entry, Mapping):
                user = entry.get("user", entry.get("user_id", entry.get("userId")))
                symbol = entry.get("emoji", entry.get("symbol", entry.get("reaction")))
                items.append((user, symbol))
            elif isinstance(entry, list | tuple) and len(entry) == 2:
                items.append((entry[0], entry[1]))
    else:
        return result

    for user_id, value in items:
        pair = _coerce_pair(user_id, value)
        if pair is None:
            logger.debug("Dropping legacy reaction %r -> %r", user_id, value)
            continue
        result[pair[0]] = pair[1]
    return result
