"""Metrics collection for the article cache."""

from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class CacheMetrics:
    """Metrics for article cache operations.

    Attributes:
        hits_total: Lookups that returned a fresh list.
        misses_total: Lookups with no list for the language.
        expired_total: Lookups that found a stale list.
        added_total: Projections added by merges.
        evicted_tail_total: Projections dropped by the per-language cap.
        evicted_budget_total: Projections dropped by the byte budget.
        duplicates_removed_total: Duplicate projections removed.
        added_by_language: Projections added per language.
    """

    hits_total: int = 0
    misses_total: int = 0
    expired_total: int = 0
    added_total: int = 0
    evicted_tail_total: int = 0
    evicted_budget_total: int = 0
    duplicates_removed_total: int = 0
    added_by_language: dict[str, int] = field(default_factory=dict)

    _instance: ClassVar["CacheMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "CacheMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_hit(self) -> None:
        """Record a fresh lookup."""
        self.hits_total += 1

    def record_miss(self) -> None:
        """Record a lookup for a language with no list."""
        self.misses_total += 1

    def record_expired(self) -> None:
        """Record a lookup that found a stale list."""
        self.expired_total += 1

    def record_merge(
        self, lang: str, added: int, evicted_tail: int, evicted_budget: int
    ) -> None:
        """Record the outcome of a merge.

        Args:
            lang: Language merged into.
            added: Projections added.
            evicted_tail: Projections dropped by the per-language cap.
            evicted_budget: Projections dropped by the byte budget.
        """
        self.added_total += added
        self.evicted_tail_total += evicted_tail
        self.evicted_budget_total += evicted_budget
        self.added_by_language[lang] = self.added_by_language.get(lang, 0) + added

    def record_duplicates_removed(self, count: int) -> None:
        """Record removed duplicates.

        Args:
            count: Number of duplicates removed.
        """
        self.duplicates_removed_total += count

    def to_dict(self) -> dict[str, object]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "cache_hits_total": self.hits_total,
            "cache_misses_total": self.misses_total,
            "cache_expired_total": self.expired_total,
            "cache_added_total": self.added_total,
            "cache_evicted_tail_total": self.evicted_tail_total,
            "cache_evicted_budget_total": self.evicted_budget_total,
            "cache_duplicates_removed_total": self.duplicates_removed_total,
            "cache_added_by_language": self.added_by_language,
        }
