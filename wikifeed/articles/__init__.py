"""Article data model shared by the cache, ledger, ranker, and provider."""

from wikifeed.articles.categories import Category, category_emoji
from wikifeed.articles.models import (
    Article,
    ArticleProjection,
    ArticleSource,
    SavedArticle,
)


__all__ = [
    "Article",
    "ArticleProjection",
    "ArticleSource",
    "Category",
    "SavedArticle",
    "category_emoji",
]
