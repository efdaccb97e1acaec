"""Metrics collection for the ranker module."""

from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class RankerMetrics:
    """Metrics for ranker operations.

    Attributes:
        rank_calls_total: Number of rank passes.
        articles_ranked_total: Articles scored across all passes.
        seen_penalized_total: Scored articles that were already seen.
        diversify_fallbacks_total: Picks where no candidate avoided a long run.
        score_values: Recent scores for percentile calculation.
        scoring_duration_ms: Duration of the last scoring pass.
    """

    rank_calls_total: int = 0
    articles_ranked_total: int = 0
    seen_penalized_total: int = 0
    diversify_fallbacks_total: int = 0
    score_values: list[float] = field(default_factory=list)
    scoring_duration_ms: float = 0.0

    _instance: ClassVar["RankerMetrics | None"] = None

    MAX_SCORE_SAMPLES: ClassVar[int] = 1000

    @classmethod
    def get_instance(cls) -> "RankerMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_rank(self, count: int, seen: int, duration_ms: float) -> None:
        """Record a scoring pass.

        Args:
            count: Number of articles scored.
            seen: How many of them were already seen.
            duration_ms: Duration in milliseconds.
        """
        self.rank_calls_total += 1
        self.articles_ranked_total += count
        self.seen_penalized_total += seen
        self.scoring_duration_ms = duration_ms

    def record_score(self, score: float) -> None:
        """Record a score for percentile calculation.

        Args:
            score: Score value.
        """
        self.score_values.append(score)
        if len(self.score_values) > self.MAX_SCORE_SAMPLES:
            del self.score_values[0]

    def record_diversify_fallback(self) -> None:
        """Record a diversifier pick that had to repeat a category."""
        self.diversify_fallbacks_total += 1

    def get_score_percentiles(self) -> dict[str, float]:
        """Calculate score percentiles (p50/p90/p99).

        Returns:
            Dictionary with p50, p90, p99 values.
        """
        if not self.score_values:
            return {"p50": 0.0, "p90": 0.0, "p99": 0.0}

        sorted_scores = sorted(self.score_values)
        n = len(sorted_scores)

        def percentile(p: float) -> float:
            idx = int(p * n / 100)
            return sorted_scores[min(idx, n - 1)]

        return {
            "p50": percentile(50),
            "p90": percentile(90),
            "p99": percentile(99),
        }

    def to_dict(self) -> dict[str, object]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "rank_calls_total": self.rank_calls_total,
            "articles_ranked_total": self.articles_ranked_total,
            "seen_penalized_total": self.seen_penalized_total,
            "diversify_fallbacks_total": self.diversify_fallbacks_total,
            "scoring_duration_ms": self.scoring_duration_ms,
            "score_percentiles": self.get_score_percentiles(),
        }
