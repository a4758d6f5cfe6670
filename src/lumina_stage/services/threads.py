"""Comment thread reconstruction.

A blog's comments are stored flat, each optionally pointing at a parent. This
module rebuilds the reply forest in an arena: one mapping from comment id to
record plus explicit child-id lists, so no node ever holds a reference to its
parent. Comments whose parent cannot be resolved are promoted to roots rather
than dropped, and every level of the tree is ordered author first, then
pinned, then newest.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, Protocol, TypeVar

from lumina_stage.db.time import as_utc


class ThreadRecord(Protocol):
    """Shape of a comment as far as threading is concerned."""

    id: Any
    parent_id: Any
    author_id: Any
    is_pinned: bool
    created_at: datetime | None


RecordT = TypeVar("RecordT", bound=ThreadRecord)


@dataclass
class ThreadNode(Generic[RecordT]):
    """A comment together with its ordered replies."""

    comment: RecordT
    children: list[ThreadNode[RecordT]] = field(default_factory=list)

    def walk(self) -> Iterable[ThreadNode[RecordT]]:
        """Yield this node and all descendants depth-first."""
        yield self
        for child in self.children:
            yield from child.walk()


def _as_key(value: Any) -> Hashable | None:
    if value is None:
        return None
    try:
        hash(value)
    except TypeError:
        return None
    return value


class CommentThread(Generic[RecordT]):
    """Arena holding one blog's comments and their parent/child links."""

    def __init__(self, comments: Iterable[RecordT], post_author_id: Any = None) -> None:
        self.post_author_id = post_author_id
        self._records: dict[Hashable, RecordT] = {}
        self._children: dict[Hashable, list[Hashable]] = {}
        self._parents: dict[Hashable, Hashable] = {}
        self._roots: list[Hashable] = []
        # Records whose own id is unusable still have to appear exactly once.
        self._unkeyed: list[RecordT] = []

        pending: list[tuple[Hashable, RecordT]] = []
        for comment in comments:
            key = _as_key(getattr(comment, "id", None))
            if key is None or key in self._records:
                self._unkeyed.append(comment)
                continue
            self._records[key] = comment
            self._children[key] = []
            pending.append((key, comment))

        for key, comment in pending:
            parent_key = _as_key(getattr(comment, "parent_id", None))
            if (
                parent_key is None
                or parent_key not in self._records
                or self._closes_cycle(key, parent_key)
            ):
                self._roots.append(key)
                continue
            self._parents[key] = parent_key
            self._children[parent_key].append(key)

        self._sort_level(self._roots)
        for child_keys in self._children.values():
            self._sort_level(child_keys)

    def _closes_cycle(self, key: Hashable, parent_key: Hashable) -> bool:
        cursor: Hashable | None = parent_key
        while cursor is not None:
            if cursor == key:
                return True
            cursor = self._parents.get(cursor)
        return False

    def _is_author(self, comment: RecordT) -> bool:
        if self.post_author_id is None:
            return False
        return getattr(comment, "author_id", None) == self.post_author_id

    def _sort_level(self, keys: list[Hashable]) -> None:
        self._sort_records(keys, self._records.__getitem__)

    def _sort_records(self, items: list[Any], resolve: Any) -> None:
        # Two stable passes: recency first, then the author/pinned precedence on top.
        items.sort(key=lambda item: _recency_key(resolve(item)), reverse=True)
        items.sort(
            key=lambda item: (
                not self._is_author(resolve(item)),
                not bool(getattr(resolve(item), "is_pinned", False)),
            )
        )

    @property
    def root_ids(self) -> list[Hashable]:
        """Ordered identifiers of top-level comments."""
        return list(self._roots)

    def children_of(self, comment_id: Hashable) -> list[Hashable]:
        """Ordered identifiers of the direct replies to ``comment_id``."""
        return list(self._children.get(comment_id, []))

    def get(self, comment_id: Hashable) -> RecordT | None:
        """Look up a comment by identifier."""
        return self._records.get(comment_id)

    def __len__(self) -> int:
        return len(self._records) + len(self._unkeyed)

    def _node(self, key: Hashable) -> ThreadNode[RecordT]:
        # Iterative so very deep reply chains cannot exhaust the stack.
        root = ThreadNode(self._records[key])
        stack = [(root, key)]
        while stack:
            node, node_key = stack.pop()
            for child_key in self._children[node_key]:
                child = ThreadNode(self._records[child_key])
                node.children.append(child)
                stack.append((child, child_key))
        return root

    def nodes(self) -> list[ThreadNode[RecordT]]:
        """Materialize the ordered forest."""
        roots = [self._node(key) for key in self._roots]
        if self._unkeyed:
            roots.extend(ThreadNode(comment) for comment in self._unkeyed)
            self._sort_records(roots, lambda node: node.comment)
        return roots


def _recency_key(comment: Any) -> tuple[bool, Any]:
    created_at = getattr(comment, "created_at", None)
    if isinstance(created_at, datetime):
        # SQLite hands back naive values; compare everything as UTC.
        created_at = as_utc(created_at)
    return (created_at is not None, created_at)


def build_thread(
    comments: Sequence[RecordT] | Iterable[RecordT],
    post_author_id: Any = None,
) -> list[ThreadNode[RecordT]]:
    """Build the ordered comment forest for one blog.

    Args:
        comments: Flat comment records belonging to a single blog.
        post_author_id: Identifier of the blog's author; their comments sort first.

    Returns:
        Root nodes in display order, each carrying its ordered replies.
    """
    return CommentThread(comments, post_author_id).nodes()


def count_nodes(roots: Iterable[ThreadNode[Any]]) -> int:
    """Return the number of comments contained in a forest."""
    return sum(1 for root in roots for _ in root.walk())
