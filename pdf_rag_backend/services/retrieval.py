"""
Relevance gate applied to similarity-search matches.

Scores are cosine similarities (higher is closer). Two cutoff policies exist:

``dynamic``
    keep matches scoring at least ``relative_ratio`` times the top score;
``fixed``
    keep matches scoring at least ``fixed_threshold``.

With either policy, nothing is returned (and no answer generated) when the
top score is below ``min_score`` or fewer than ``min_chunks`` matches survive.
At most ``max_chunks`` of the best matches are kept.
"""

from dataclasses import dataclass

from pdf_rag_backend.core.config import Settings
from pdf_rag_backend.core.errors import ConfigurationError

POLICIES = ("dynamic", "fixed")


@dataclass(frozen=True)
class RelevancePolicy:
    policy: str = "dynamic"
    min_score: float = 0.3
    relative_ratio: float = 0.7
    fixed_threshold: float = 0.7
    min_chunks: int = 2
    max_chunks: int = 6

    def __post_init__(self):
        if self.policy not in POLICIES:
            raise ConfigurationError(
                f"Unknown RELEVANCE_POLICY \"{self.policy}\"; expected one of {', '.join(POLICIES)}"
            )
        if self.min_chunks > self.max_chunks:
            raise ConfigurationError("MIN_CONTEXT_CHUNKS cannot exceed MAX_CONTEXT_CHUNKS")

    @classmethod
    def from_settings(cls, settings: Settings) -> "RelevancePolicy":
        return cls(
            policy=settings.RELEVANCE_POLICY,
            min_score=settings.MIN_RELEVANCE_SCORE,
            relative_ratio=settings.RELATIVE_RELEVANCE_RATIO,
            fixed_threshold=settings.FIXED_RELEVANCE_THRESHOLD,
            min_chunks=settings.MIN_CONTEXT_CHUNKS,
            max_chunks=settings.MAX_CONTEXT_CHUNKS,
        )

    def cutoff(self, top_score: float) -> float:
        if self.policy == "fixed":
            return self.fixed_threshold
        return top_score * self.relative_ratio


def select_relevant(matches: list[dict], policy: RelevancePolicy) -> list[dict]:
    """Return the matches to ground an answer on, best first; [] means "not found"."""
    if not matches:
        return []

    ranked = sorted(matches, key=lambda m: m["score"], reverse=True)
    top_score = ranked[0]["score"]
    if top_score < policy.min_score:
        return []

    cutoff = policy.cutoff(top_score)
    kept = [m for m in ranked if m["score"] >= cutoff]
    if len(kept) < policy.min_chunks:
        return []
    return kept[:policy.max_chunks]
