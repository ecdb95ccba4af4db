"""
In-memory relevance ranking for tagged free-text documents.

Usage:
    from relevance_engine import Document, SearchResultEvaluator

    evaluator = SearchResultEvaluator(
        [Document("a", tags=["x"], fields={"text": "apple banana"})],
        {"x": "Fruit"},
    )
    evaluator.set_predicate("banana")
    results = evaluator.evaluate()
"""

from relevance_engine.config import EngineConfig, ResetPolicy
from relevance_engine.corpus import CorpusIndex, CorpusStatistics, KeywordCounter, build_statistics
from relevance_engine.documents import Document, DocumentCache, tag_key
from relevance_engine.evaluator import SearchResultEvaluator
from relevance_engine.exceptions import (
    ConfigurationError,
    RelevanceEngineError,
    UndefinedRelevanceError,
)
from relevance_engine.query import Query, filter_candidates, matches
from relevance_engine.ranking import SortOrder, rank, relevance, relevance_scores, sort_comparator
from relevance_engine.scoring import ChannelScorer, IDFTFFormula, make_labeler, score_documents
from relevance_engine.text import ENGLISH_STOPWORDS, normalize, remove_stopwords

__all__ = [
    "ChannelScorer",
    "ConfigurationError",
    "CorpusIndex",
    "CorpusStatistics",
    "Document",
    "DocumentCache",
    "ENGLISH_STOPWORDS",
    "EngineConfig",
    "IDFTFFormula",
    "KeywordCounter",
    "Query",
    "RelevanceEngineError",
    "ResetPolicy",
    "SearchResultEvaluator",
    "SortOrder",
    "UndefinedRelevanceError",
    "build_statistics",
    "filter_candidates",
    "make_labeler",
    "matches",
    "normalize",
    "rank",
    "relevance",
    "relevance_scores",
    "remove_stopwords",
    "score_documents",
    "sort_comparator",
    "tag_key",
]
