"""Per-language article cache."""

from wikifeed.cache.cache import ArticleCache
from wikifeed.cache.metrics import CacheMetrics
from wikifeed.cache.models import CacheMergeResult


__all__ = [
    "ArticleCache",
    "CacheMergeResult",
    "CacheMetrics",
]
