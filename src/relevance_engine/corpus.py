"""
Corpus statistics over the filtered candidate set.

Two independent indexes are built per evaluation, one for requested tags and
one for query tokens. Each key keeps the distinct documents it occurs in and a
breadth-weighted count:

    weighted_count(k) = seed + sum(|tags(d)| for every later distinct d containing k)

The seed is the tag cardinality of the first document for the tag index, and
the length of the matching field's token list for the term index. Increments
always use the tag cardinality of the document being scanned.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from loguru import logger

from relevance_engine.documents import Document
from relevance_engine.query import Query
from relevance_engine.text import normalize


class KeywordCounter:
    """Distinct document ids and weighted count of one key."""

    __slots__ = ("document_ids", "weighted_count")

    def __init__(self, weighted_count: int, document_id: str):
        self.document_ids: set[str] = {document_id}
        self.weighted_count = weighted_count

    def __repr__(self) -> str:
        return (
            f"KeywordCounter(document_frequency={self.document_frequency}, "
            f"weighted_count={self.weighted_count})"
        )

    @property
    def document_frequency(self) -> int:
        return len(self.document_ids)

    def add_document(self, document_id: str, weight: int) -> bool:
        """Record a new document containing the key. Repeats are ignored."""
        if document_id in self.document_ids:
            return False
        self.document_ids.add(document_id)
        self.weighted_count += weight
        return True


class CorpusIndex:
    """Insertion-ordered mapping of key -> KeywordCounter for one channel."""

    def __init__(self) -> None:
        self._counters: dict[str, KeywordCounter] = {}
        self.strongest_key: str | None = None

    def __len__(self) -> int:
        return len(self._counters)

    def __contains__(self, key: object) -> bool:
        return key in self._counters

    def __iter__(self) -> Iterator[str]:
        return iter(self._counters)

    def get(self, key: str) -> KeywordCounter | None:
        return self._counters.get(key)

    def observe(self, key: str, document_id: str, seed: int, increment: int) -> bool:
        """
        Record an occurrence of ``key`` in a document.

        Args:
            key: Index key
            document_id: Id of the document being scanned
            seed: Weighted count of a newly created key
            increment: Weight added when the key is seen in a new document

        Returns:
            True if the key was not in the index before
        """
        counter = self._counters.get(key)
        if counter is None:
            self._counters[key] = KeywordCounter(seed, document_id)
            return True
        counter.add_document(document_id, increment)
        return False

    def document_frequency(self, key: str) -> int | None:
        counter = self._counters.get(key)
        return counter.document_frequency if counter else None

    def weighted_count(self, key: str) -> int | None:
        counter = self._counters.get(key)
        return counter.weighted_count if counter else None

    def find_strongest_key(self) -> str | None:
        """Key with the highest weighted count; the first key to reach the maximum wins."""
        best = 0
        strongest = None
        for key, counter in self._counters.items():
            if counter.weighted_count > best:
                best = counter.weighted_count
                strongest = key
        return strongest


@dataclass
class CorpusStatistics:
    """
    Per-evaluation statistics of the candidate set.

    Attributes:
        document_count: Number of candidate documents (N)
        key_count: Distinct keys inserted into either index (C)
        tag_index: Requested tags found on candidates
        term_index: Query tokens found in candidate fields
    """

    document_count: int = 0
    key_count: int = 0
    tag_index: CorpusIndex = field(default_factory=CorpusIndex)
    term_index: CorpusIndex = field(default_factory=CorpusIndex)

    def observe(self, index: CorpusIndex, key: str, document_id: str, seed: int, increment: int) -> None:
        if index.observe(key, document_id, seed, increment):
            self.key_count += 1

    def finalize(self) -> None:
        self.tag_index.strongest_key = self.tag_index.find_strongest_key()
        self.term_index.strongest_key = self.term_index.find_strongest_key()


def build_statistics(
    documents: Sequence[Document],
    query: Query,
    selector: Sequence[str],
    seed_stemmed_counts: bool = False,
) -> CorpusStatistics:
    """
    Scan the candidates once and build both channel indexes.

    Also fills the per-document match fields: ``matching_term_count``,
    ``matching_stemmed_term_count`` and ``has_all_tags``.

    Args:
        documents: Candidate documents, mutated in place
        query: Normalized query
        selector: Free-text field names
        seed_stemmed_counts: Add the stemmed match count onto the value the
            document already carries instead of starting from zero

    Returns:
        Finalized CorpusStatistics
    """
    requested_keys = query.requested_keys
    requested = set(requested_keys)
    stats = CorpusStatistics(document_count=len(documents))

    for document in documents:
        doc_keys = document.tag_keys
        cardinality = len(document.tags)
        field_tokens = [normalize(value) for value in document.selector_values(selector)]

        present_keys = set(doc_keys)
        document.matching_term_count = sum(1 for key in requested_keys if key in present_keys)
        stemmed_matches = sum(
            1 for token in query.tokens if any(token in tokens for tokens in field_tokens)
        )
        previous = (document.matching_stemmed_term_count or 0) if seed_stemmed_counts else 0
        document.matching_stemmed_term_count = previous + stemmed_matches
        if document.matching_term_count == len(requested_keys):
            document.has_all_tags = True

        for key in doc_keys:
            if key in requested:
                stats.observe(stats.tag_index, key, document.id, cardinality, cardinality)

        for tokens in field_tokens:
            for token in query.tokens:
                if token in tokens:
                    stats.observe(stats.term_index, token, document.id, len(tokens), cardinality)

    stats.finalize()
    logger.debug(
        f"Corpus statistics: {stats.document_count} candidates, "
        f"{len(stats.tag_index)} tag keys (strongest={stats.tag_index.strongest_key!r}), "
        f"{len(stats.term_index)} term keys (strongest={stats.term_index.strongest_key!r}), "
        f"key_count={stats.key_count}"
    )
    return stats
