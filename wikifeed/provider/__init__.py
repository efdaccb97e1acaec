"""Wikipedia provider: fetching, filtering, and categorizing articles."""

from wikifeed.provider.errors import ProviderError, ProviderErrorClass
from wikifeed.provider.rate_limiter import AsyncTokenBucket
from wikifeed.provider.text import (
    detect_category,
    extract_tags,
    first_sentences,
    is_interesting,
    truncate_hook,
    wiki_categories,
)
from wikifeed.provider.wikipedia import WikipediaProvider


__all__ = [
    "AsyncTokenBucket",
    "ProviderError",
    "ProviderErrorClass",
    "WikipediaProvider",
    "detect_category",
    "extract_tags",
    "first_sentences",
    "is_interesting",
    "truncate_hook",
    "wiki_categories",
]
