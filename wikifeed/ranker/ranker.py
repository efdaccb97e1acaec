"""Ranking engine: score, sort, and diversify articles."""

import random
import time
from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Protocol

import structlog

from wikifeed.articles import Article, ArticleProjection
from wikifeed.config.schemas import ScoringConfig, SessionConfig
from wikifeed.data_model import Clock, utc_now
from wikifeed.ranker.diversify import diversify
from wikifeed.ranker.metrics import RankerMetrics
from wikifeed.ranker.models import ScoredArticle
from wikifeed.ranker.scorer import ArticleScorer
from wikifeed.ranker.session import SessionWindow


logger = structlog.get_logger()


class PreferenceSource(Protocol):
    """Read side of the interaction ledger used for scoring."""

    def get_weights(self, now: datetime | None = None) -> dict[str, float]:
        """Get decayed preference weight per category or tag key."""
        ...

    def get_seen(self) -> list[str]:
        """Get ids already shown to the reader."""
        ...


class RankingEngine:
    """Orders articles for the reader.

    Flow:
        articles -> score -> stable sort (descending) -> diversify

    The engine owns the session window; hand the same instance to the
    ledger so recorded views feed the session repeat penalty.
    """

    def __init__(
        self,
        preferences: PreferenceSource,
        scoring: ScoringConfig | None = None,
        session_config: SessionConfig | None = None,
        session: SessionWindow | None = None,
        rng: random.Random | None = None,
        clock: Clock = utc_now,
        metrics: RankerMetrics | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            preferences: Source of decayed weights and seen ids.
            scoring: Scoring weights.
            session_config: Session window and diversity settings.
            session: Existing session window; created from
                ``session_config`` when omitted.
            rng: Random source for the exploration term.
            clock: Source of the current time.
            metrics: Optional metrics instance.
        """
        self._preferences = preferences
        self._session_config = session_config or SessionConfig()
        self._clock = clock
        self._session = session or SessionWindow(
            size=self._session_config.window_size,
            inactivity=timedelta(minutes=self._session_config.inactivity_minutes),
            clock=clock,
        )
        self._scorer = ArticleScorer(scoring, self._session, rng)
        self._metrics = metrics or RankerMetrics.get_instance()
        self._log = logger.bind(component="ranker")

    @property
    def session(self) -> SessionWindow:
        """Get the session window."""
        return self._session

    def score(
        self, articles: Sequence[Article | ArticleProjection]
    ) -> list[ScoredArticle]:
        """Score articles against the current preferences.

        Args:
            articles: Articles to score; projections are promoted first.

        Returns:
            Scored articles in input order.
        """
        start = time.perf_counter()
        items = [_as_article(article) for article in articles]
        weights = self._preferences.get_weights(self._clock())
        seen = set(self._preferences.get_seen())

        scored = self._scorer.score_all(items, weights, seen)

        duration_ms = (time.perf_counter() - start) * 1000
        self._metrics.record_rank(
            count=len(scored),
            seen=sum(1 for item in items if item.id in seen),
            duration_ms=duration_ms,
        )
        for item in scored:
            self._metrics.record_score(item.score)
        return scored

    def rank(self, articles: Sequence[Article | ArticleProjection]) -> list[Article]:
        """Sort articles by score, highest first.

        Seen articles always come after unseen ones, whatever their score.
        The sort is stable, so equal scores keep their input order.

        Args:
            articles: Articles to rank.

        Returns:
            Articles in descending score order.
        """
        scored = self.score(articles)
        ordered = sorted(
            scored,
            key=lambda item: (item.components.seen_penalty == 0, item.score),
            reverse=True,
        )
        return [item.article for item in ordered]

    def diversify(self, ranked: list[Article]) -> list[Article]:
        """Limit same-category runs in a ranked list.

        Args:
            ranked: Articles in ranked order.

        Returns:
            A permutation of ``ranked``.
        """
        return diversify(
            ranked,
            max_consecutive=self._session_config.max_consecutive,
            on_fallback=self._metrics.record_diversify_fallback,
        )

    def recommend(
        self, articles: Sequence[Article | ArticleProjection]
    ) -> list[Article]:
        """Rank and diversify articles for display.

        Args:
            articles: Candidate articles.

        Returns:
            Articles in display order; empty for empty input.
        """
        if not articles:
            return []

        recommended = self.diversify(self.rank(articles))
        self._log.debug(
            "articles_recommended",
            count=len(recommended),
            head=[article.id for article in recommended[:3]],
        )
        return recommended


def _as_article(item: Article | ArticleProjection) -> Article:
    if isinstance(item, ArticleProjection):
        return item.to_article()
    return item
