"""
Dual-channel IDF-TF scoring.

For a channel index with strongest key s, N candidates and C indexed keys:

    IDF(k)     = [1 / (ln(N / df(k)) + 1)] * [ln(df(s) / df(k)) + 1]
    TFrel(k)   = C / weighted_count(k)
    TF(k, d)   = 0.5 + 0.5 * (1 / local(d)) * (1 / TFrel(k)) * (1 / TFrel(s))
    score(k,d) = IDF(k) * TF(k, d)

Keys absent from the index fall back to neutral statistics (df = N in the
first IDF factor, df = df(s) in the second, weighted_count = C), so they
contribute to the potential mass of a document but never to its matched mass.

Channel composition: the term channel wins whenever it has signal; the tag
channel is the fallback. Documents left without matched mass are dropped.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Union

from loguru import logger

from relevance_engine.corpus import CorpusIndex, CorpusStatistics
from relevance_engine.documents import Document, Tag, tag_key
from relevance_engine.query import Query
from relevance_engine.text import StopwordRemover, label_tokens, remove_stopwords, unique_tokens

TagLabeler = Callable[[Tag], str]
TagDomain = Union[Mapping[Tag, str], TagLabeler, type[Enum]]


# =============================================================================
# Formula
# =============================================================================


class IDFTFFormula:
    """Building blocks of the per-key score."""

    @staticmethod
    def inverse_document_frequency(
        df: int | None,
        document_count: int,
        strongest_df: int,
    ) -> float:
        """IDF damped by corpus size and normalized by the strongest key."""
        damping = 1.0 / (math.log(document_count / (df or document_count)) + 1.0)
        anchor = math.log(strongest_df / (df or strongest_df)) + 1.0
        return damping * anchor

    @staticmethod
    def relative_frequency(weighted_count: int | None, key_count: int) -> float:
        """C / weighted_count, with absent keys falling back to C."""
        return key_count / (weighted_count or key_count)

    @staticmethod
    def term_frequency(
        local_cardinality: int,
        relative: float,
        strongest_relative: float,
    ) -> float:
        """Augmented TF weighted by the key's and the strongest key's breadth."""
        return 0.5 + 0.5 * (1.0 / local_cardinality) * (1.0 / relative) * (1.0 / strongest_relative)


@dataclass
class ChannelScore:
    """Matched and potential mass of one document in one channel."""

    idftf: float = 0.0
    max_score: float = 0.0


class ChannelScorer:
    """
    Scores keys of a document against one channel index.

    Args:
        index: Tag or term index of the current evaluation
        document_count: Number of candidate documents (N)
        key_count: Distinct keys across both indexes (C)
    """

    def __init__(self, index: CorpusIndex, document_count: int, key_count: int):
        self.index = index
        self.document_count = document_count
        self.key_count = key_count

        strongest = index.strongest_key
        if strongest is not None:
            self.strongest_df = index.document_frequency(strongest) or 0
            self.strongest_relative = IDFTFFormula.relative_frequency(
                index.weighted_count(strongest), key_count
            )
        else:
            self.strongest_df = 0
            self.strongest_relative = 1.0

    @property
    def is_empty(self) -> bool:
        return self.index.strongest_key is None

    def score_key(self, key: str, local_cardinality: int) -> float:
        idf = IDFTFFormula.inverse_document_frequency(
            self.index.document_frequency(key), self.document_count, self.strongest_df
        )
        relative = IDFTFFormula.relative_frequency(self.index.weighted_count(key), self.key_count)
        tf = IDFTFFormula.term_frequency(local_cardinality, relative, self.strongest_relative)
        return idf * tf

    def score(self, keys: Iterable[str], local_cardinality: int) -> ChannelScore:
        """
        Accumulate matched and potential mass over ``keys``.

        Every key adds to ``max_score``; only indexed keys add to ``idftf``.
        An empty index or a zero local cardinality yields an empty score.
        """
        result = ChannelScore()
        if self.is_empty or local_cardinality == 0:
            return result
        for key in keys:
            score = self.score_key(key, local_cardinality)
            result.max_score += score
            if key in self.index:
                result.idftf += score
        return result


# =============================================================================
# Channel keys
# =============================================================================


def make_labeler(tag_domain: TagDomain) -> TagLabeler:
    """
    Build ``label(tag)`` from a tag domain.

    A mapping is looked up by tag, then by tag key; an Enum class labels
    members, and raw values of its members, by member name; a callable is
    used as is. Missing labels fall back to the tag key.
    """
    if isinstance(tag_domain, type) and issubclass(tag_domain, Enum):
        enum_domain = tag_domain

        def enum_label(tag: Tag) -> str:
            if isinstance(tag, Enum):
                return tag.name
            try:
                return enum_domain(tag).name
            except ValueError:
                return tag_key(tag)

        return enum_label
    if isinstance(tag_domain, Mapping):
        domain = tag_domain

        def label(tag: Tag) -> str:
            if tag in domain:
                return str(domain[tag])
            return str(domain.get(tag_key(tag), tag_key(tag)))

        return label
    if callable(tag_domain):
        return tag_domain
    raise TypeError(f"Unsupported tag domain: {type(tag_domain).__name__}")


def tag_channel_keys(
    document: Document,
    labeler: TagLabeler,
    stopword_remover: StopwordRemover = remove_stopwords,
) -> list[str]:
    """Document terms, then tag label tokens, then tag keys; deduplicated."""
    label_keys = [
        token for tag in document.tags for token in label_tokens(labeler(tag), stopword_remover)
    ]
    return unique_tokens([*document.terms, *label_keys, *document.tag_keys])


def term_channel_keys(document: Document, query_tokens: Sequence[str]) -> list[str]:
    """Document terms that are query tokens, in document order."""
    wanted = set(query_tokens)
    return unique_tokens(term for term in document.terms if term in wanted)


# =============================================================================
# Document scoring
# =============================================================================


def score_documents(
    documents: Sequence[Document],
    stats: CorpusStatistics,
    query: Query,
    labeler: TagLabeler,
    stopword_remover: StopwordRemover = remove_stopwords,
) -> list[Document]:
    """
    Score candidates in both channels and compose the results.

    The final ``idftf`` is the term-channel mass when nonzero, else the
    tag-channel mass; ``max_score`` follows the same rule independently.
    Documents whose final ``idftf`` is zero are dropped.

    Args:
        documents: Candidates, mutated in place
        stats: Statistics built over the same candidates
        query: Normalized query
        labeler: Tag label lookup
        stopword_remover: Applied to label tokens

    Returns:
        Scored documents with matched mass, in candidate order
    """
    tag_scorer = ChannelScorer(stats.tag_index, stats.document_count, stats.key_count)
    term_scorer = ChannelScorer(stats.term_index, stats.document_count, stats.key_count)

    scored: list[Document] = []
    for document in documents:
        tag_score = tag_scorer.score(
            tag_channel_keys(document, labeler, stopword_remover), len(document.tags)
        )
        term_score = term_scorer.score(
            term_channel_keys(document, query.tokens), len(document.terms)
        )

        document.idftf = term_score.idftf or tag_score.idftf
        document.max_score = term_score.max_score or tag_score.max_score
        if document.idftf:
            scored.append(document)

    logger.debug(f"Scored {len(documents)} candidates, {len(scored)} with matched mass")
    return scored
