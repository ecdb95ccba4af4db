"""
Text normalization shared by documents and queries.

Normalization is deliberately crude: strip a fixed punctuation set, lowercase,
split on single spaces and drop empty pieces. There is no morphological
stemming; "stemmed" elsewhere in the package refers to these tokens.

Usage:
    from relevance_engine.text import normalize, remove_stopwords

    normalize("Hello, World!")                 # ["hello", "world"]
    remove_stopwords(["the", "quick", "fox"])  # ["quick", "fox"]
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence

# Backtick, tilde and the common ASCII punctuation, brackets and slashes.
PUNCTUATION_PATTERN = re.compile(r"[`~!@#$%^&*()_|+\-=?;:'\",.<>{}\[\]\\/]")

StopwordRemover = Callable[[Sequence[str]], list[str]]


# =============================================================================
# Stopwords
# =============================================================================

ENGLISH_STOPWORDS: frozenset[str] = frozenset([
    "a", "about", "after", "all", "also", "am", "an", "and", "any", "are",
    "as", "at", "be", "because", "been", "but", "by", "can", "could", "did",
    "do", "does", "for", "from", "had", "has", "have", "he", "her", "here",
    "him", "his", "how", "i", "if", "in", "into", "is", "it", "its", "just",
    "me", "more", "most", "my", "no", "not", "of", "on", "only", "or",
    "other", "our", "out", "over", "s", "she", "should", "so", "some",
    "such", "t", "than", "that", "the", "their", "them", "then", "there",
    "these", "they", "this", "those", "through", "to", "too", "under", "up",
    "us", "very", "was", "we", "were", "what", "when", "where", "which",
    "while", "who", "why", "will", "with", "would", "you", "your",
])


def remove_stopwords(
    tokens: Sequence[str],
    stopwords: frozenset[str] = ENGLISH_STOPWORDS,
) -> list[str]:
    """Drop tokens whose lowercase form is a stopword, preserving order."""
    return [token for token in tokens if token.lower() not in stopwords]


# =============================================================================
# Normalization
# =============================================================================


def strip_punctuation(text: str) -> str:
    """Remove every character of the fixed punctuation set."""
    return PUNCTUATION_PATTERN.sub("", text)


def normalize(text: str) -> list[str]:
    """
    Tokenize text into normalized tokens.

    Punctuation is stripped first, then the text is trimmed, lowercased and
    split on single spaces. Pieces are trimmed again and empty pieces dropped,
    so runs of spaces never produce empty tokens. Duplicates are kept.

    Args:
        text: Raw text

    Returns:
        Tokens in order of appearance
    """
    pieces = strip_punctuation(text).strip().lower().split(" ")
    return [piece.strip() for piece in pieces if piece.strip()]


def unique_tokens(tokens: Iterable[str]) -> list[str]:
    """Deduplicate tokens keeping the first occurrence order."""
    return list(dict.fromkeys(tokens))


def tokenize_fields(values: Iterable[str]) -> list[str]:
    """Union of the normalized tokens of several fields, first occurrence wins."""
    return unique_tokens(token for value in values for token in normalize(value))


def label_tokens(label: str, stopword_remover: StopwordRemover = remove_stopwords) -> list[str]:
    """Tokens of a human-readable tag label, lowercased and stopword-filtered."""
    pieces = label.lower().strip().split(" ")
    return [piece for piece in stopword_remover(pieces) if piece]


__all__ = [
    "ENGLISH_STOPWORDS",
    "PUNCTUATION_PATTERN",
    "StopwordRemover",
    "label_tokens",
    "normalize",
    "remove_stopwords",
    "strip_punctuation",
    "tokenize_fields",
    "unique_tokens",
]
