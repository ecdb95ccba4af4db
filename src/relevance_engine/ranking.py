"""
Relevance normalization and result ordering.

    relevance(d) = floor(ceil((idftf / max_score) * 100 * 333) / 333) / 100

The ceil/floor pair absorbs floating-point noise so that equal ratios render
as the same two-decimal value.

Usage:
    from functools import cmp_to_key
    from relevance_engine.ranking import SortOrder, sort_comparator

    results.sort(key=cmp_to_key(sort_comparator("title", SortOrder.DESC)))
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from relevance_engine.documents import Document
from relevance_engine.exceptions import UndefinedRelevanceError

if TYPE_CHECKING:
    from numpy.typing import NDArray

DEFAULT_SCALE = 100
DEFAULT_STABILIZER = 333

Comparator = Callable[[Document, Document], float]


class SortOrder(Enum):
    ASC = "asc"
    DESC = "desc"


def score_ratio(document: Document) -> float:
    """Matched mass over potential mass."""
    if document.idftf is None or not document.max_score:
        raise UndefinedRelevanceError(document.id, document.max_score)
    return document.idftf / document.max_score


def relevance(
    document: Document,
    scale: int = DEFAULT_SCALE,
    stabilizer: int = DEFAULT_STABILIZER,
) -> float:
    """
    Bounded, rounding-stabilized relevance of a scored document.

    Args:
        document: Document carrying ``idftf`` and ``max_score``
        scale: Decimal scale (100 = two decimals)
        stabilizer: Noise absorption factor

    Returns:
        Relevance with at most ``log10(scale)`` decimals

    Raises:
        UndefinedRelevanceError: If the document is unscored or its
            ``max_score`` is zero.
    """
    ratio = score_ratio(document)
    return math.floor(math.ceil(ratio * scale * stabilizer) / stabilizer) / scale


def relevance_scores(
    documents: Sequence[Document],
    scale: int = DEFAULT_SCALE,
    stabilizer: int = DEFAULT_STABILIZER,
) -> NDArray[np.float64]:
    """Vectorized ``relevance`` over a result set."""
    ratios = np.array([score_ratio(document) for document in documents], dtype=np.float64)
    return np.floor(np.ceil(ratios * scale * stabilizer) / stabilizer) / scale


def sort_comparator(selector: str, order: SortOrder = SortOrder.DESC) -> Comparator:
    """
    Build a comparator for ``functools.cmp_to_key``.

    When both documents are scored they compare by ``idftf / max_score`` in
    the requested order. Otherwise they compare by the string form of the
    selected field, ascending.

    Args:
        selector: Field used when scores are unavailable
        order: Order of the score comparison

    Returns:
        Comparator returning a negative, zero or positive number
    """

    def compare(a: Document, b: Document) -> float:
        if a.is_scored and b.is_scored:
            if order is SortOrder.DESC:
                return score_ratio(b) - score_ratio(a)
            return score_ratio(a) - score_ratio(b)
        left, right = str(a.get(selector)), str(b.get(selector))
        return (left > right) - (left < right)

    return compare


def rank(
    documents: Sequence[Document],
    order: SortOrder = SortOrder.DESC,
    top_k: int | None = None,
) -> tuple[NDArray[np.int64], NDArray[np.float64]]:
    """
    Rank scored documents by relevance.

    Ties keep their input order.

    Args:
        documents: Scored documents, e.g. the result of an evaluation
        order: DESC for most relevant first
        top_k: Optional limit on results

    Returns:
        Tuple of (sorted_indices, sorted_relevance)
    """
    if top_k is not None and top_k < 0:
        raise ValueError("top_k must be non-negative")

    scores = relevance_scores(documents)
    keys = -scores if order is SortOrder.DESC else scores
    sorted_indices = np.argsort(keys, kind="stable").astype(np.int64)
    sorted_scores = scores[sorted_indices]

    if top_k is not None:
        sorted_indices = sorted_indices[:top_k]
        sorted_scores = sorted_scores[:top_k]

    return sorted_indices, sorted_scores
