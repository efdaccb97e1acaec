"""Data models for the article ranker."""

from dataclasses import dataclass

from wikifeed.articles import Article


@dataclass(frozen=True)
class ScoreComponents:
    """Breakdown of an article's score into components.

    Attributes:
        exploration_score: Uniform random term for discovery.
        category_score: Weighted decayed category preference.
        tag_score: Weighted sum of decayed tag preferences.
        wiki_category_score: Weighted sum of decayed wiki category preferences.
        related_score: Bonus for related-article expansions.
        session_penalty: Penalty for categories viewed in the last few cards.
        seen_penalty: Penalty for articles already shown.
        total_score: Sum of bonuses minus penalties.
    """

    exploration_score: float
    category_score: float
    tag_score: float
    wiki_category_score: float
    related_score: float = 0.0
    session_penalty: float = 0.0
    seen_penalty: float = 0.0
    total_score: float = 0.0

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary for serialization.

        Returns:
            Dictionary of component name to value.
        """
        return {
            "exploration_score": self.exploration_score,
            "category_score": self.category_score,
            "tag_score": self.tag_score,
            "wiki_category_score": self.wiki_category_score,
            "related_score": self.related_score,
            "session_penalty": self.session_penalty,
            "seen_penalty": self.seen_penalty,
            "total_score": self.total_score,
        }


@dataclass
class ScoredArticle:
    """An article with its computed score.

    Attributes:
        article: The scored article.
        components: Score breakdown by component.
    """

    article: Article
    components: ScoreComponents

    @property
    def score(self) -> float:
        """Get the total score."""
        return self.components.total_score
