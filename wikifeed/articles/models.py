"""Article models and their reduced projections."""

from datetime import datetime
from typing import Annotated, Any

from pydantic import Field, field_validator

from wikifeed.articles.categories import DEFAULT_EMOJI, Category
from wikifeed.data_model import StrictBaseModel


MAX_HOOK_LENGTH = 280


class ArticleSource(StrictBaseModel):
    """Where an article came from.

    Attributes:
        title: Wikipedia page title.
        url: Desktop page URL.
        lang: Wikipedia language code.
    """

    title: Annotated[str, Field(min_length=1)]
    url: str | None = None
    lang: Annotated[str, Field(min_length=2, max_length=12)]


class Article(StrictBaseModel):
    """A normalized article ready for ranking.

    Identity is ``id``; two articles with the same id are the same article
    even if other fields differ.

    Attributes:
        id: Stable id, unique per source, language, and page.
        hook: Display snippet.
        emoji: Display emoji of the category.
        category: Coarse topic.
        tags: Up to three free-text keywords.
        wiki_categories: Free-text classifier labels.
        thumbnail: Optional thumbnail URL.
        source: Origin page, absent for synthetic items.
        is_related: Whether a related-article expansion produced it.
    """

    id: Annotated[str, Field(min_length=1)]
    hook: Annotated[str, Field(min_length=1, max_length=MAX_HOOK_LENGTH)]
    emoji: str = DEFAULT_EMOJI
    category: Category = Category.CULTURE
    tags: list[str] = Field(default_factory=list, max_length=3)
    wiki_categories: list[str] = Field(default_factory=list)
    thumbnail: str | None = None
    source: ArticleSource | None = None
    is_related: bool = False

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, v: Any) -> Category:
        """Coerce stored or legacy names to Category."""
        return Category.coerce(v)

    def to_projection(self) -> "ArticleProjection":
        """Reduce to the cached form (drops tags and wiki categories)."""
        return ArticleProjection(
            id=self.id,
            hook=self.hook,
            emoji=self.emoji,
            category=self.category,
            thumbnail=self.thumbnail,
            source=self.source,
        )

    def to_saved(self, saved_at: datetime) -> "SavedArticle":
        """Snapshot for the saved list.

        Args:
            saved_at: When the article was saved.
        """
        return SavedArticle(
            id=self.id,
            hook=self.hook,
            emoji=self.emoji,
            category=self.category,
            source=self.source,
            saved_at=saved_at,
        )


class ArticleProjection(StrictBaseModel):
    """Reduced article copy kept in the per-language cache."""

    id: Annotated[str, Field(min_length=1)]
    hook: Annotated[str, Field(min_length=1)]
    emoji: str = DEFAULT_EMOJI
    category: Category = Category.CULTURE
    thumbnail: str | None = None
    source: ArticleSource | None = None

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, v: Any) -> Category:
        """Coerce stored or legacy names to Category."""
        return Category.coerce(v)

    def to_article(self) -> Article:
        """Promote back to an Article with empty tag lists."""
        return Article(
            id=self.id,
            hook=self.hook[:MAX_HOOK_LENGTH],
            emoji=self.emoji,
            category=self.category,
            thumbnail=self.thumbnail,
            source=self.source,
        )


class SavedArticle(StrictBaseModel):
    """Snapshot of an article in the saved list, independent of the cache."""

    id: Annotated[str, Field(min_length=1)]
    hook: Annotated[str, Field(min_length=1)]
    emoji: str = DEFAULT_EMOJI
    category: Category = Category.CULTURE
    source: ArticleSource | None = None
    saved_at: datetime

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, v: Any) -> Category:
        """Coerce stored or legacy names to Category."""
        return Category.coerce(v)
