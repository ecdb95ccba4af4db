"""Custom exceptions for the relevance engine."""


class RelevanceEngineError(Exception):
    """Base exception for all relevance engine errors."""

    pass


class ConfigurationError(RelevanceEngineError, ValueError):
    """Configuration value is invalid."""

    pass


class UndefinedRelevanceError(RelevanceEngineError, ZeroDivisionError):
    """Relevance requested for a document without a usable score.

    Raised when a document has no scores (it was never ranked) or when its
    potential mass is zero. Results of a non-empty query never carry such
    documents, so this signals ranking an unfiltered result set.
    """

    def __init__(self, document_id: str, max_score: float | None):
        """Initialize exception with the offending document.

        Args:
            document_id: Id of the document that could not be ranked.
            max_score: The document's potential mass, if any.
        """
        self.document_id = document_id
        self.max_score = max_score
        super().__init__(
            f"Relevance is undefined for document {document_id!r} (max_score={max_score!r})"
        )
