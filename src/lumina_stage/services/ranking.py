"""Embedding similarity helpers used for related posts and the personalized feed.

Vectors come from the external embedding service and may be missing for
content that has not been processed yet. None of these helpers raise on a
missing or mismatched vector; they score it as neutral instead.
"""

from __future__ import annotations

import math
from collections.abc import Hashable, Iterable, Sequence
from dataclasses import dataclass

Vector = Sequence[float]


@dataclass(frozen=True)
class ScoredItem:
    """An entity identifier paired with its similarity to the query."""

    key: Hashable
    score: float


def has_vector(vector: Vector | None) -> bool:
    """Return True when ``vector`` is present and non-empty."""
    return bool(vector)


def cosine_similarity(a: Vector | None, b: Vector | None) -> float:
    """Return the cosine of the angle between two vectors.

    Returns 0.0 when either vector is absent or empty, when their lengths
    differ, or when either has zero magnitude.
    """
    if not a or not b or len(a) != len(b):
        return 0.0

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


def centroid(vectors: Sequence[Vector]) -> list[float]:
    """Mean of ``vectors``, taking the first vector's length as the dimension.

    Vectors of any other length are left out rather than padded or truncated.

    Raises:
        ValueError: if ``vectors`` is empty
    """
    if not vectors:
        raise ValueError("centroid of an empty vector list")

    dimension = len(vectors[0])
    usable = [vector for vector in vectors if len(vector) == dimension]
    return [math.fsum(column) / len(usable) for column in zip(*usable)]


def rank(
    query: Vector,
    candidates: Iterable[tuple[Hashable, Vector | None]],
    k: int,
) -> list[ScoredItem]:
    """Score every candidate against ``query`` and keep the best ``k``.

    Ties keep their input order. No minimum score is applied, so weak or
    negative matches fill the list when fewer strong ones exist.
    """
    if k <= 0:
        return []
    scored = [
        ScoredItem(key=key, score=cosine_similarity(query, vector))
        for key, vector in candidates
    ]
    scored.sort(key=lambda item: item.score, reverse=True)
    return scored[:k]
