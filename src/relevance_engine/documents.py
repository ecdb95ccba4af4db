"""
Documents and the per-engine document cache.

A Document carries its identity, its tags, the free-text selector fields and
the derived ``terms``. The transient scoring fields are filled in by an
evaluation and stay ``None`` otherwise.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Hashable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from loguru import logger

from relevance_engine.config import ResetPolicy
from relevance_engine.text import tokenize_fields

Tag = Hashable

TRANSIENT_FIELDS: tuple[str, ...] = (
    "idftf",
    "max_score",
    "matching_term_count",
    "matching_stemmed_term_count",
    "has_all_tags",
)

# Fields cleared by the legacy reset policy; the rest survive between evaluations.
LEGACY_RESET_FIELDS: tuple[str, ...] = ("idftf", "has_all_tags")


def tag_key(tag: Tag) -> str:
    """Stable string key of a tag, shared by the tag index and tag comparisons."""
    if isinstance(tag, Enum):
        return str(tag.value)
    return str(tag)


@dataclass
class Document:
    """
    A tagged free-text document.

    Args:
        id: Unique id within the corpus
        tags: Tag values, unique per document
        fields: Free-text fields, addressed by the selector
        terms: Unique normalized tokens of the selector fields (derived on load)
    """

    id: str
    tags: list[Tag] = field(default_factory=list)
    fields: dict[str, Any] = field(default_factory=dict)
    terms: list[str] = field(default_factory=list)

    # Transient, per evaluation
    idftf: float | None = None
    max_score: float | None = None
    matching_term_count: int | None = None
    matching_stemmed_term_count: int | None = None
    has_all_tags: bool | None = None

    def get(self, name: str) -> Any:
        """Resolve a document attribute or, failing that, a selector field."""
        if name in _ATTRIBUTE_NAMES and name != "fields":
            return getattr(self, name)
        return self.fields.get(name)

    def selector_values(self, selector: Sequence[str]) -> list[str]:
        """String form of every selector field; missing fields read as empty."""
        values = []
        for name in selector:
            value = self.get(name)
            values.append("" if value is None else str(value))
        return values

    @property
    def tag_keys(self) -> list[str]:
        return [tag_key(tag) for tag in self.tags]

    @property
    def is_scored(self) -> bool:
        return self.idftf is not None

    def copy(self, clear: Iterable[str] = ()) -> "Document":
        """Independent copy, with the named transient fields reset to None."""
        changes: dict[str, Any] = {name: None for name in clear}
        return dataclasses.replace(
            self,
            tags=list(self.tags),
            fields=dict(self.fields),
            terms=list(self.terms),
            **changes,
        )


_ATTRIBUTE_NAMES = frozenset(f.name for f in dataclasses.fields(Document))


def reset_fields(policy: ResetPolicy) -> tuple[str, ...]:
    """Transient fields cleared at the start of an evaluation under ``policy``."""
    if policy is ResetPolicy.LEGACY:
        return LEGACY_RESET_FIELDS
    return TRANSIENT_FIELDS


class DocumentCache:
    """
    Id-keyed store of baseline documents.

    The cache is rebuilt wholesale by ``load`` and refreshed by
    ``reset_for_evaluation``. Scored documents handed out by an earlier
    evaluation are never updated afterwards; callers must not hold on to them
    across evaluations.
    """

    def __init__(self, reset_policy: ResetPolicy = ResetPolicy.CLEAR):
        self.reset_policy = reset_policy
        self._entries: dict[str, Document] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._entries

    def load(self, documents: Iterable[Document], selector: Sequence[str]) -> list[Document]:
        """
        Replace the cached corpus.

        Every document is stripped of its transient fields and its ``terms``
        are derived from the selector fields. A repeated id overwrites the
        earlier entry.

        Args:
            documents: Documents to load
            selector: Names of the free-text fields to tokenize

        Returns:
            The baseline documents, in load order
        """
        entries: dict[str, Document] = {}
        for document in documents:
            baseline = document.copy(clear=TRANSIENT_FIELDS)
            baseline.terms = tokenize_fields(baseline.selector_values(selector))
            if baseline.id in entries:
                logger.warning(f"Duplicate document id {baseline.id!r}: replacing cached entry")
            entries[baseline.id] = baseline
        self._entries = entries
        logger.debug(f"Document cache loaded: {len(entries)} documents")
        return [document.copy() for document in entries.values()]

    def get(self, document_id: str) -> Document | None:
        return self._entries.get(document_id)

    def reset_for_evaluation(self) -> list[Document]:
        """
        Clear transient fields ahead of an evaluation.

        The cache entry of every document is replaced by a cleared copy, and
        a second, independent copy is returned for the evaluation to mutate.
        """
        clear = reset_fields(self.reset_policy)
        fresh: list[Document] = []
        for document_id, document in self._entries.items():
            cleared = document.copy(clear=clear)
            self._entries[document_id] = cleared
            fresh.append(cleared.copy())
        return fresh

    def store(self, document: Document) -> None:
        """Write a scored document back; only the legacy policy does this."""
        self._entries[document.id] = document.copy()
