from functools import cmp_to_key

import numpy as np
import pytest

from relevance_engine.documents import Document
from relevance_engine.exceptions import UndefinedRelevanceError
from relevance_engine.ranking import (
    SortOrder,
    rank,
    relevance,
    relevance_scores,
    sort_comparator,
)


def scored(doc_id: str, idftf: float, max_score: float, title: str = "") -> Document:
    return Document(doc_id, fields={"title": title}, idftf=idftf, max_score=max_score)


class TestRelevance:
    @pytest.mark.parametrize(
        "idftf, max_score, expected",
        [
            (4.5, 4.5, 1.0),
            (5.0, 11.0, 0.45),
            (2.75, 9.0, 0.3),
            (1.0, 3.0, 0.33),
            (2.0, 3.0, 0.66),
        ],
    )
    def test_values(self, idftf, max_score, expected):
        assert relevance(scored("a", idftf, max_score)) == pytest.approx(expected)

    def test_at_most_two_decimals(self):
        value = relevance(scored("a", 1.2345, 6.789))
        assert round(value, 2) == value
        assert 0 <= value <= 1.0

    def test_zero_max_score_raises(self):
        with pytest.raises(UndefinedRelevanceError):
            relevance(scored("a", 0.0, 0.0))

    def test_unscored_raises_zero_division(self):
        with pytest.raises(ZeroDivisionError):
            relevance(Document("a"))

    def test_vectorized_matches_scalar(self):
        documents = [scored("a", 5.0, 11.0), scored("b", 1.0, 3.0), scored("c", 4.5, 4.5)]
        expected = [relevance(doc) for doc in documents]
        assert np.allclose(relevance_scores(documents), expected)

    def test_vectorized_empty(self):
        assert relevance_scores([]).shape == (0,)


class TestSortComparator:
    @pytest.fixture
    def documents(self):
        return [
            scored("a", 1.0, 4.0, title="alpha"),
            scored("b", 3.0, 4.0, title="beta"),
            scored("c", 2.0, 4.0, title="gamma"),
        ]

    def test_descending(self, documents):
        ordered = sorted(documents, key=cmp_to_key(sort_comparator("title", SortOrder.DESC)))
        assert [doc.id for doc in ordered] == ["b", "c", "a"]

    def test_ascending(self, documents):
        ordered = sorted(documents, key=cmp_to_key(sort_comparator("title", SortOrder.ASC)))
        assert [doc.id for doc in ordered] == ["a", "c", "b"]

    def test_default_is_descending(self, documents):
        ordered = sorted(documents, key=cmp_to_key(sort_comparator("title")))
        assert [doc.id for doc in ordered] == ["b", "c", "a"]

    def test_unscored_fall_back_to_field(self):
        documents = [
            Document("1", fields={"title": "pear"}),
            Document("2", fields={"title": "apple"}),
            Document("3", fields={"title": "fig"}),
        ]
        ordered = sorted(documents, key=cmp_to_key(sort_comparator("title", SortOrder.DESC)))
        assert [doc.get("title") for doc in ordered] == ["apple", "fig", "pear"]

    def test_mixed_pair_uses_field(self):
        compare = sort_comparator("title")
        left = scored("a", 1.0, 1.0, title="zebra")
        right = Document("b", fields={"title": "ant"})
        assert compare(left, right) > 0
        assert compare(right, left) < 0


class TestRank:
    def test_descending(self):
        documents = [scored("a", 1.0, 4.0), scored("b", 3.0, 4.0), scored("c", 2.0, 4.0)]
        indices, scores = rank(documents)
        assert list(indices) == [1, 2, 0]
        assert list(scores) == pytest.approx([0.75, 0.5, 0.25])

    def test_ascending_and_top_k(self):
        documents = [scored("a", 1.0, 4.0), scored("b", 3.0, 4.0), scored("c", 2.0, 4.0)]
        indices, scores = rank(documents, SortOrder.ASC, top_k=2)
        assert list(indices) == [0, 2]
        assert len(scores) == 2

    def test_ties_keep_input_order(self):
        documents = [scored("a", 1.0, 2.0), scored("b", 2.0, 4.0), scored("c", 3.0, 3.0)]
        indices, _ = rank(documents)
        assert list(indices) == [2, 0, 1]

    def test_negative_top_k(self):
        with pytest.raises(ValueError):
            rank([scored("a", 1.0, 1.0)], top_k=-1)
