import pytest

from relevance_engine.corpus import CorpusIndex, KeywordCounter, build_statistics
from relevance_engine.documents import Document, DocumentCache
from relevance_engine.query import Query


def load(documents: list[Document], selector=("text",)) -> list[Document]:
    return DocumentCache().load(documents, selector)


def make_query(predicate: str = "", tags=()) -> Query:
    query = Query()
    query.set_predicate(predicate)
    query.set_requested_tags(tags)
    return query


class TestKeywordCounter:
    def test_seed(self):
        counter = KeywordCounter(3, "a")
        assert counter.weighted_count == 3
        assert counter.document_frequency == 1
        assert counter.document_ids == {"a"}

    def test_repeated_document_is_ignored(self):
        counter = KeywordCounter(3, "a")
        assert not counter.add_document("a", 5)
        assert counter.weighted_count == 3
        assert counter.add_document("b", 2)
        assert counter.weighted_count == 5
        assert counter.document_frequency == 2


class TestCorpusIndex:
    def test_observe_reports_new_keys(self):
        index = CorpusIndex()
        assert index.observe("k", "a", 2, 2)
        assert not index.observe("k", "b", 9, 1)
        assert index.weighted_count("k") == 3
        assert index.document_frequency("k") == 2
        assert index.weighted_count("missing") is None
        assert index.document_frequency("missing") is None

    def test_strongest_key_first_wins_ties(self):
        index = CorpusIndex()
        index.observe("p", "a", 3, 0)
        index.observe("q", "a", 3, 0)
        index.observe("r", "a", 1, 0)
        assert index.find_strongest_key() == "p"

    def test_strongest_key_picks_maximum(self):
        index = CorpusIndex()
        index.observe("p", "a", 1, 0)
        index.observe("q", "a", 4, 0)
        assert index.find_strongest_key() == "q"

    def test_empty_index_has_no_strongest_key(self):
        assert CorpusIndex().find_strongest_key() is None


class TestBuildStatistics:
    def test_term_channel(self, fruit_documents):
        documents = load(fruit_documents)
        stats = build_statistics(documents, make_query("banana"), ["text"])

        assert stats.document_count == 2
        assert stats.key_count == 1
        assert len(stats.tag_index) == 0
        assert stats.tag_index.strongest_key is None
        assert stats.term_index.strongest_key == "banana"
        # Seeded by a's token count (2), then b's tag cardinality (2).
        assert stats.term_index.weighted_count("banana") == 4
        assert stats.term_index.document_frequency("banana") == 2

    def test_tag_channel(self, fruit_documents):
        documents = load(fruit_documents)
        stats = build_statistics(documents, make_query(tags=["x"]), ["text"])

        assert stats.key_count == 1
        assert len(stats.term_index) == 0
        assert stats.tag_index.strongest_key == "x"
        # Seeded by a's tag cardinality (1), then b's (2).
        assert stats.tag_index.weighted_count("x") == 3
        assert stats.tag_index.document_frequency("x") == 2

    def test_unrequested_tags_are_not_indexed(self, fruit_documents):
        stats = build_statistics(load(fruit_documents), make_query(tags=["x"]), ["text"])
        assert "y" not in stats.tag_index

    def test_increment_uses_current_document_tag_cardinality(self):
        documents = load(
            [
                Document("a", tags=["x"], fields={"text": "apple banana"}),
                Document("c", tags=[], fields={"text": "banana"}),
            ]
        )
        stats = build_statistics(documents, make_query("banana"), ["text"])
        assert stats.term_index.weighted_count("banana") == 2
        assert stats.term_index.document_frequency("banana") == 2

    def test_key_count_spans_both_channels(self, fruit_documents):
        documents = load(fruit_documents)
        stats = build_statistics(documents, make_query("banana cherry", ["x", "y"]), ["text"])
        assert stats.key_count == 4
        assert list(stats.tag_index) == ["x", "y"]
        assert list(stats.term_index) == ["banana", "cherry"]

    def test_term_seed_is_field_token_count(self):
        documents = load(
            [Document("a", tags=["x"], fields={"title": "banana", "text": "apple banana cherry"})],
            selector=("title", "text"),
        )
        stats = build_statistics(documents, make_query("banana"), ["title", "text"])
        # The title field is scanned first; its token list has length 1.
        assert stats.term_index.weighted_count("banana") == 1

    def test_match_fields(self, fruit_documents):
        documents = load(fruit_documents)
        build_statistics(documents, make_query("banana cherry", ["x", "y"]), ["text"])
        a, b = documents

        assert a.matching_term_count == 1
        assert b.matching_term_count == 2
        assert a.matching_stemmed_term_count == 1
        assert b.matching_stemmed_term_count == 2
        assert a.has_all_tags is None
        assert b.has_all_tags is True

    @pytest.mark.parametrize("seed, expected", [(False, 1), (True, 4)])
    def test_stemmed_count_seeding(self, seed, expected):
        documents = load([Document("a", tags=["x"], fields={"text": "banana"})])
        documents[0].matching_stemmed_term_count = 3
        build_statistics(documents, make_query("banana"), ["text"], seed_stemmed_counts=seed)
        assert documents[0].matching_stemmed_term_count == expected
