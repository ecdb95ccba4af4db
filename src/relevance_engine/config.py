"""Configuration management for the relevance engine."""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from relevance_engine.exceptions import ConfigurationError


class ResetPolicy(str, Enum):
    """How transient scoring fields are cleared at the start of an evaluation.

    CLEAR resets every transient field, so each evaluation starts from the
    loaded baseline.

    LEGACY only clears ``idftf`` and ``has_all_tags``. Scored documents are
    written back to the cache, so ``max_score`` and the match counts survive
    into the next evaluation and ``matching_stemmed_term_count`` accumulates
    across calls.
    """

    CLEAR = "clear"
    LEGACY = "legacy"


@dataclass
class EngineConfig:
    """Engine configuration.

    Attributes:
        selector: Names of the free-text fields tokenized into ``terms``.
        reset_policy: Transient field reset behavior between evaluations.
        relevance_scale: Decimal scale of the relevance value (100 = two decimals).
        relevance_stabilizer: Factor used to absorb floating-point noise before
            flooring the relevance value.
    """

    selector: tuple[str, ...] = ("text",)
    reset_policy: ResetPolicy = ResetPolicy.CLEAR
    relevance_scale: int = 100
    relevance_stabilizer: int = 333

    def __post_init__(self) -> None:
        self.selector = as_selector(self.selector)
        self.reset_policy = parse_reset_policy(self.reset_policy)
        if self.relevance_scale <= 0 or self.relevance_stabilizer <= 0:
            raise ConfigurationError("relevance_scale and relevance_stabilizer must be positive")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Load configuration from environment variables."""
        config = cls()

        if (selector := os.environ.get("RELEVANCE_SELECTOR")) is not None:
            fields = tuple(name.strip() for name in selector.split(",") if name.strip())
            if not fields:
                raise ConfigurationError("RELEVANCE_SELECTOR must name at least one field")
            config.selector = fields

        if policy := os.environ.get("RELEVANCE_RESET_POLICY"):
            config.reset_policy = parse_reset_policy(policy)

        return config


def parse_reset_policy(value: ResetPolicy | str) -> ResetPolicy:
    """Coerce a policy name into a ResetPolicy."""
    if isinstance(value, ResetPolicy):
        return value
    try:
        return ResetPolicy(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(policy.value for policy in ResetPolicy)
        raise ConfigurationError(f"Unknown reset policy {value!r} (expected one of: {choices})") from None


def as_selector(selector: str | Iterable[str]) -> tuple[str, ...]:
    """Field names as a tuple; a bare string names a single field."""
    if isinstance(selector, str):
        return (selector,)
    return tuple(selector)
