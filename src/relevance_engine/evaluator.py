"""
SearchResultEvaluator: the engine facade.

An evaluator owns one corpus and one document cache. It is not thread-safe:
``evaluate()`` rewrites the cache in place, so callers must hold exclusive
access to an instance for the duration of an evaluation.

Usage:
    from relevance_engine import Document, SearchResultEvaluator, SortOrder

    evaluator = SearchResultEvaluator(documents, {"py": "Python"}, selector=["title"])
    evaluator.set_predicate("web framework")
    evaluator.set_requested_tags(["py"])
    results = evaluator.evaluate()
    indices, relevance = evaluator.rank(results, SortOrder.DESC)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from loguru import logger

from relevance_engine.config import EngineConfig, ResetPolicy, as_selector
from relevance_engine.corpus import build_statistics
from relevance_engine.documents import Document, DocumentCache, Tag
from relevance_engine.query import Query, filter_candidates
from relevance_engine.ranking import Comparator, SortOrder, rank, relevance, sort_comparator
from relevance_engine.scoring import TagDomain, make_labeler, score_documents
from relevance_engine.text import StopwordRemover, remove_stopwords

if TYPE_CHECKING:
    import numpy as np
    from numpy.typing import NDArray


class SearchResultEvaluator:
    """
    In-memory relevance ranking over tagged free-text documents.

    Args:
        documents: Initial corpus
        tag_domain: Tag labels, as a mapping, a callable or an Enum class
        selector: Free-text field names; defaults to ``config.selector``
        remove_stopwords: Stopword filter for predicates and tag labels
        config: Engine configuration
    """

    def __init__(
        self,
        documents: Iterable[Document],
        tag_domain: TagDomain,
        selector: str | Sequence[str] | None = None,
        *,
        remove_stopwords: StopwordRemover = remove_stopwords,
        config: EngineConfig | None = None,
    ):
        self.config = config or EngineConfig()
        self.selector: tuple[str, ...] = as_selector(selector) if selector else self.config.selector
        self.labeler = make_labeler(tag_domain)
        self.stopword_remover = remove_stopwords
        self.query = Query(stopword_remover=remove_stopwords)
        self.cache = DocumentCache(self.config.reset_policy)
        self.data: list[Document] = []
        self.set_data(documents)

    def set_data(self, documents: Iterable[Document]) -> None:
        """Replace the corpus and rebuild the cache."""
        self.data = self.cache.load(documents, self.selector)

    def set_selector(self, selector: str | Sequence[str]) -> None:
        """Change the free-text fields and re-derive every document's terms."""
        self.selector = as_selector(selector)
        self.set_data(self.data)

    def set_predicate(self, predicate: str) -> None:
        self.query.set_predicate(predicate)

    def set_requested_tags(self, tags: Sequence[Tag]) -> None:
        self.query.set_requested_tags(tags)

    def has_query(self) -> bool:
        return self.query.has_query()

    def get_cached_by_id(self, document_id: str) -> Document | None:
        """Cached document by id, or None."""
        return self.cache.get(document_id)

    def evaluate(self) -> list[Document]:
        """
        Filter and score the corpus against the current query.

        With an empty query every document is returned unscored. Otherwise
        only candidates with matched mass are returned, in corpus order.
        """
        documents = self.cache.reset_for_evaluation()
        candidates = filter_candidates(documents, self.query)
        logger.debug(
            f"Evaluate: {len(candidates)}/{len(documents)} candidates "
            f"(tokens={self.query.tokens}, tags={self.query.requested_keys})"
        )
        if not self.has_query():
            return candidates

        legacy = self.config.reset_policy is ResetPolicy.LEGACY
        stats = build_statistics(candidates, self.query, self.selector, seed_stemmed_counts=legacy)
        results = score_documents(candidates, stats, self.query, self.labeler, self.stopword_remover)
        if legacy:
            for document in candidates:
                self.cache.store(document)
        return results

    def get_relevance(self, document: Document) -> float:
        return relevance(document, self.config.relevance_scale, self.config.relevance_stabilizer)

    @staticmethod
    def sort_comparator(selector: str, order: SortOrder = SortOrder.DESC) -> Comparator:
        return sort_comparator(selector, order)

    @staticmethod
    def rank(
        documents: Sequence[Document],
        order: SortOrder = SortOrder.DESC,
        top_k: int | None = None,
    ) -> tuple[NDArray[np.int64], NDArray[np.float64]]:
        return rank(documents, order, top_k)
