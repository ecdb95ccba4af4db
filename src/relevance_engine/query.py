"""
Query normalization and the candidate filter.

A query has two channels: free-text tokens derived from a predicate, and an
explicit list of requested tags. Either channel alone can admit a document.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from relevance_engine.documents import Document, Tag, tag_key
from relevance_engine.text import StopwordRemover, normalize, remove_stopwords, unique_tokens


@dataclass
class Query:
    """
    Normalized query state.

    Attributes:
        predicate: Raw free-text predicate, as last set
        tokens: Deduplicated, stopword-filtered predicate tokens
        requested_tags: Requested tags, stored verbatim
    """

    predicate: str = ""
    tokens: list[str] = field(default_factory=list)
    requested_tags: list[Tag] = field(default_factory=list)
    stopword_remover: StopwordRemover = field(default=remove_stopwords, repr=False, compare=False)

    def set_predicate(self, text: str) -> None:
        self.predicate = text
        filtered = self.stopword_remover(normalize(text))
        self.tokens = unique_tokens(
            token for token in (t.lower().strip() for t in filtered) if token
        )

    def set_requested_tags(self, tags: Sequence[Tag]) -> None:
        self.requested_tags = list(tags)

    def has_query(self) -> bool:
        return bool(self.tokens) or bool(self.requested_tags)

    @property
    def requested_keys(self) -> list[str]:
        return [tag_key(tag) for tag in self.requested_tags]


def matches(document: Document, tokens: Sequence[str], requested_tags: Sequence[Tag]) -> bool:
    """
    Candidate filter.

    Passes everything when both channels are empty. Otherwise a document
    passes when some query token is a substring of some document term, or
    when one of its tags is requested.

    Args:
        document: Document with derived ``terms``
        tokens: Normalized query tokens
        requested_tags: Requested tags

    Returns:
        True if the document is a candidate
    """
    if not tokens and not requested_tags:
        return True

    if tokens and tokens[0] != "":
        if any(token in term for token in tokens for term in document.terms):
            return True

    requested = {tag_key(tag) for tag in requested_tags}
    return any(key in requested for key in document.tag_keys)


def filter_candidates(documents: Sequence[Document], query: Query) -> list[Document]:
    """Documents passing the candidate filter, in corpus order."""
    return [
        document
        for document in documents
        if matches(document, query.tokens, query.requested_tags)
    ]
