"""Article ranking: scoring, session-aware diversification, recommendation."""

from wikifeed.ranker.diversify import diversify
from wikifeed.ranker.metrics import RankerMetrics
from wikifeed.ranker.models import ScoreComponents, ScoredArticle
from wikifeed.ranker.ranker import PreferenceSource, RankingEngine
from wikifeed.ranker.scorer import ArticleScorer
from wikifeed.ranker.session import SessionWindow


__all__ = [
    "ArticleScorer",
    "PreferenceSource",
    "RankerMetrics",
    "RankingEngine",
    "ScoreComponents",
    "ScoredArticle",
    "SessionWindow",
    "diversify",
]
