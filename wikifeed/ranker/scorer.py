"""Scoring of articles against decayed reader preferences."""

import random
from collections.abc import Container, Mapping

import structlog

from wikifeed.articles import Article
from wikifeed.config.schemas import ScoringConfig
from wikifeed.ranker.models import ScoreComponents, ScoredArticle
from wikifeed.ranker.session import SessionWindow


logger = structlog.get_logger()


class ArticleScorer:
    """Computes a heuristic score for each article.

    Scoring formula:
        score = exploration + category + tags + wiki_categories + related
              - session_penalty - seen_penalty

    Where:
        - exploration: uniform draw in [0, randomness]
        - category: category_weight * w(category)
        - tags: tag_weight * sum of w(tag)
        - wiki_categories: wiki_category_weight * sum of w(label)
        - related: related_boost for related-article expansions
        - session_penalty: session_repeat_penalty per occurrence of the
          category among the last ``session_lookback`` viewed categories
        - seen_penalty: flat penalty for already-seen articles

    ``w`` is the decayed preference weight, 0 for unknown keys.
    """

    def __init__(
        self,
        config: ScoringConfig | None = None,
        session: SessionWindow | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the scorer.

        Args:
            config: Scoring weights.
            session: Session window for the repeat penalty.
            rng: Random source for the exploration term.
        """
        self._config = config or ScoringConfig()
        self._session = session
        self._rng = rng or random.Random()

    def score(
        self,
        article: Article,
        weights: Mapping[str, float],
        seen: Container[str] = (),
    ) -> ScoredArticle:
        """Score one article.

        Args:
            article: Article to score.
            weights: Decayed preference weight per category or tag key.
            seen: Ids already shown to the reader.

        Returns:
            The article with its score breakdown.
        """
        recent = (
            self._session.recent(self._config.session_lookback)
            if self._session is not None
            else []
        )
        return self._score(article, weights, seen, recent)

    def score_all(
        self,
        articles: list[Article],
        weights: Mapping[str, float],
        seen: Container[str] = (),
    ) -> list[ScoredArticle]:
        """Score a batch against a single session snapshot.

        Args:
            articles: Articles to score.
            weights: Decayed preference weight per category or tag key.
            seen: Ids already shown to the reader.

        Returns:
            Scored articles in input order.
        """
        recent = (
            self._session.recent(self._config.session_lookback)
            if self._session is not None
            else []
        )
        return [self._score(article, weights, seen, recent) for article in articles]

    def _score(
        self,
        article: Article,
        weights: Mapping[str, float],
        seen: Container[str],
        recent: list[str],
    ) -> ScoredArticle:
        cfg = self._config
        category = article.category.value

        exploration = self._rng.uniform(0.0, cfg.randomness)
        category_score = cfg.category_weight * weights.get(category, 0.0)
        tag_score = cfg.tag_weight * sum(
            weights.get(tag.strip().lower(), 0.0) for tag in article.tags
        )
        wiki_score = cfg.wiki_category_weight * sum(
            weights.get(label.strip().lower(), 0.0)
            for label in article.wiki_categories
        )
        related = cfg.related_boost if article.is_related else 0.0
        session_penalty = cfg.session_repeat_penalty * recent.count(category)
        seen_penalty = cfg.seen_penalty if article.id in seen else 0.0

        total = (
            exploration
            + category_score
            + tag_score
            + wiki_score
            + related
            - session_penalty
            - seen_penalty
        )

        return ScoredArticle(
            article=article,
            components=ScoreComponents(
                exploration_score=exploration,
                category_score=category_score,
                tag_score=tag_score,
                wiki_category_score=wiki_score,
                related_score=related,
                session_penalty=session_penalty,
                seen_penalty=seen_penalty,
                total_score=total,
            ),
        )
