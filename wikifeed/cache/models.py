"""Data models for the article cache."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CacheMergeResult:
    """Outcome of merging articles into a language list.

    Attributes:
        added: Projections newly added.
        evicted_tail: Projections dropped from the tail by the per-language cap.
        evicted_budget: Projections dropped by byte-budget eviction, across
            all languages.
        persisted: Whether the cache and its timestamps reached the store.
    """

    added: int = 0
    evicted_tail: int = 0
    evicted_budget: int = 0
    persisted: bool = True
