"""Tests for embedding similarity helpers."""

import math

import pytest

from lumina_stage.services.ranking import ScoredItem, centroid, cosine_similarity, has_vector, rank


@pytest.mark.parametrize(
    ("a", "b", "expected"),
    [
        ([1, 0], [1, 0], 1.0),
        ([1, 0], [0, 1], 0.0),
        ([1, 0], [-1, 0], -1.0),
        ([], [], 0.0),
        ([1, 2], [1, 2, 3], 0.0),
        (None, [1, 0], 0.0),
        ([0, 0], [1, 0], 0.0),
    ],
)
def test_cosine_similarity(a, b, expected) -> None:
    assert math.isclose(cosine_similarity(a, b), expected, abs_tol=1e-9)


def test_centroid_is_elementwise_mean() -> None:
    assert centroid([[2, 2], [4, 4]]) == [3, 3]


def test_centroid_rejects_empty_input() -> None:
    with pytest.raises(ValueError):
        centroid([])


def test_centroid_skips_vectors_of_another_length() -> None:
    assert centroid([[1, 3], [3, 5, 7], [5, 7]]) == [3, 5]


def test_rank_orders_by_score_and_keeps_ties_stable() -> None:
    candidates = [
        ("a", [0, 1]),
        ("b", [1, 0]),
        ("c", [1, 0]),
        ("d", [-1, 0]),
        ("e", None),
    ]

    ranked = rank([1, 0], candidates, k=4)

    assert [item.key for item in ranked] == ["b", "c", "a", "e"]
    assert ranked[0] == ScoredItem(key="b", score=1.0)


def test_rank_includes_negative_matches_when_short() -> None:
    ranked = rank([1, 0], [("only", [-1, 0])], k=3)

    assert ranked == [ScoredItem(key="only", score=-1.0)]


def test_rank_with_non_positive_k() -> None:
    assert rank([1, 0], [("a", [1, 0])], k=0) == []


def test_has_vector() -> None:
    assert has_vector([0.1])
    assert not has_vector([])
    assert not has_vector(None)
