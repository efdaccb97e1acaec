"""Interaction ledger: likes, seen ids, and decaying preference scores."""

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol

import structlog

from wikifeed.articles import Article, SavedArticle
from wikifeed.articles.categories import LEGACY_CATEGORY_ALIASES
from wikifeed.config.schemas import LedgerConfig
from wikifeed.data_model import Clock, to_epoch_ms, utc_now
from wikifeed.ledger.models import InteractionKind, InteractionResult, PreferenceScore
from wikifeed.ledger.saved import SavedItems
from wikifeed.ledger.seen import SeenSet
from wikifeed.store import KeyValueStore, StorageKeys


logger = structlog.get_logger()


class CategorySink(Protocol):
    """Receives the category of every viewed article (the session window)."""

    def push(self, category: str) -> None:
        """Record a viewed category.

        Args:
            category: Category key of the viewed article.
        """
        ...


class InteractionLedger:
    """Tracks per-article state and per-key preference scores.

    Every interaction is written through to the store synchronously. Store
    failures never raise; they are reported through
    ``InteractionResult.persisted`` and the next read reflects the last
    value that was successfully written.

    Preference scores decay only when read. When an interaction touches a
    key, the stored score is first brought to the present (decayed, or
    scaled if legacy) and the delta is added on top, so the persisted pair
    always reads as ``score`` at ``timestamp``.
    """

    def __init__(
        self,
        store: KeyValueStore,
        config: LedgerConfig | None = None,
        session: CategorySink | None = None,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize the ledger.

        Args:
            store: Backing store.
            config: Ledger settings (deltas, decay, seen capacity).
            session: Session window fed by ``record_view``.
            clock: Source of the current time.
        """
        self._store = store
        self._config = config or LedgerConfig()
        self._session = session
        self._clock = clock
        self._saved = SavedItems(store, clock)
        self._log = logger.bind(component="ledger")

    @property
    def saved(self) -> SavedItems:
        """Get the saved-articles list."""
        return self._saved

    # ===== Interactions =====

    def record_like(self, article: Article) -> InteractionResult:
        """Like an article and boost its category, tags, and wiki categories."""
        liked_ok = self._add_like(article.id)
        deltas = self._spread(article, self._config.deltas.like, wiki=True)
        return self._finish(article, InteractionKind.LIKE, deltas, liked_ok)

    def record_unlike(self, article: Article) -> InteractionResult:
        """Remove a like and apply the matching negative deltas."""
        unliked_ok = self._remove_like(article.id)
        deltas = self._spread(article, self._config.deltas.unlike, wiki=True)
        return self._finish(article, InteractionKind.UNLIKE, deltas, unliked_ok)

    def record_save(self, article: Article) -> InteractionResult:
        """Save an article; only its category score changes."""
        saved_ok = self._saved.add(article)
        deltas = {article.category.value: self._config.deltas.save}
        return self._finish(article, InteractionKind.SAVE, deltas, saved_ok)

    def record_unsave(self, article: Article) -> InteractionResult:
        """Unsave an article; only its category score changes."""
        removed_ok = self._saved.remove(article.id)
        deltas = {article.category.value: self._config.deltas.unsave}
        return self._finish(article, InteractionKind.UNSAVE, deltas, removed_ok)

    def record_not_interested(self, article: Article) -> InteractionResult:
        """Penalize an article's category and tags and never show it again."""
        seen_ok = self.mark_seen(article.id)
        d = self._config.deltas
        deltas = self._sum_deltas(
            [(article.category.value, d.not_interested)]
            + [
                (tag, d.not_interested * d.not_interested_tag_factor)
                for tag in self._tag_keys(article)
            ]
        )
        return self._finish(article, InteractionKind.NOT_INTERESTED, deltas, seen_ok)

    def record_view(self, article: Article, duration_ms: float) -> InteractionResult:
        """Record that an article was on screen for ``duration_ms``.

        Marks the article seen, feeds the session window, and applies a
        duration-banded category delta: skip, short read, neutral, or long
        read.
        """
        seen_ok = self.mark_seen(article.id)
        if self._session is not None:
            self._session.push(article.category.value)

        delta = self._view_delta(duration_ms)
        deltas = {article.category.value: delta} if delta else {}
        return self._finish(article, InteractionKind.VIEW, deltas, seen_ok)

    def record_open_source(self, article: Article) -> InteractionResult:
        """Treat opening the source page as strong explicit interest."""
        d = self._config.deltas
        deltas = self._sum_deltas(
            [(article.category.value, d.save)]
            + [(tag, d.long_read) for tag in self._tag_keys(article)]
        )
        return self._finish(article, InteractionKind.OPEN_SOURCE, deltas, True)

    # ===== Weights =====

    def get_weights(self, now: datetime | None = None) -> dict[str, float]:
        """Get time-decayed scores per category or tag key.

        Decay is computed on read and never written back, so repeated reads
        at the same instant return identical values.

        Args:
            now: Time to decay to; defaults to the ledger clock.

        Returns:
            Mapping of key to effective score.
        """
        now_ms = to_epoch_ms(now or self._clock())
        decay = self._config.decay
        return {
            key: entry.decayed(now_ms, decay)
            for key, entry in self._load_scores().items()
        }

    def get_raw_scores(self) -> dict[str, PreferenceScore]:
        """Get persisted scores normalized to ``PreferenceScore``."""
        return self._load_scores()

    # ===== Lookups =====

    def is_seen(self, article_id: str) -> bool:
        """Check whether an article was already shown."""
        return article_id in self._load_seen()

    def is_liked(self, article_id: str) -> bool:
        """Check whether an article is liked."""
        return article_id in self._load_likes()

    def is_saved(self, article_id: str) -> bool:
        """Check whether an article is saved."""
        return self._saved.contains(article_id)

    def get_seen(self) -> list[str]:
        """Get seen ids, oldest first."""
        return self._load_seen().to_list()

    def get_likes(self) -> list[str]:
        """Get liked ids in like order."""
        return self._load_likes()

    def get_saved(self) -> list[SavedArticle]:
        """Get saved snapshots, most recent first."""
        return self._saved.get_all()

    def mark_seen(self, article_id: str) -> bool:
        """Add an id to the seen set.

        Args:
            article_id: Id to mark.

        Returns:
            False only if a needed write failed.
        """
        seen = self._load_seen()
        if not seen.add(article_id):
            return True
        return self._store.set(StorageKeys.SEEN.value, seen.to_list()).ok

    def stats(self) -> dict[str, object]:
        """Summarize ledger state for debugging."""
        return {
            "weights": self.get_weights(),
            "likes": len(self._load_likes()),
            "seen": len(self._load_seen()),
            "saved": len(self._saved.get_all()),
        }

    # ===== Internals =====

    def _view_delta(self, duration_ms: float) -> float:
        d = self._config.deltas
        if duration_ms < d.skip_below_ms:
            return d.skip
        if duration_ms < d.short_read_below_ms:
            return d.short_read
        if duration_ms <= d.long_read_above_ms:
            return 0.0
        return d.long_read

    def _spread(self, article: Article, delta: float, wiki: bool) -> dict[str, float]:
        """Spread a delta over category, tags, and optionally wiki categories."""
        d = self._config.deltas
        pairs = [(article.category.value, delta)]
        pairs += [(tag, delta * d.tag_factor) for tag in self._tag_keys(article)]
        if wiki:
            pairs += [
                (label, delta * d.wiki_category_factor)
                for label in self._wiki_keys(article)
            ]
        return self._sum_deltas(pairs)

    @staticmethod
    def _tag_keys(article: Article) -> list[str]:
        return [tag.strip().lower() for tag in article.tags if tag.strip()]

    @staticmethod
    def _wiki_keys(article: Article) -> list[str]:
        return [
            label.strip().lower() for label in article.wiki_categories if label.strip()
        ]

    @staticmethod
    def _sum_deltas(pairs: Iterable[tuple[str, float]]) -> dict[str, float]:
        deltas: dict[str, float] = {}
        for key, delta in pairs:
            deltas[key] = deltas.get(key, 0.0) + delta
        return deltas

    def _apply_deltas(self, deltas: dict[str, float]) -> bool:
        """Add deltas to the persisted scores.

        Args:
            deltas: Delta per key.

        Returns:
            Whether the scores were persisted.
        """
        if not deltas:
            return True

        now_ms = to_epoch_ms(self._clock())
        decay = self._config.decay
        scores = self._load_scores()

        for key, delta in deltas.items():
            current = scores.get(key)
            base = current.decayed(now_ms, decay) if current else 0.0
            scores[key] = PreferenceScore(score=base + delta, timestamp=now_ms)

        result = self._store.set(
            StorageKeys.CATEGORY_SCORES.value,
            {key: entry.to_stored() for key, entry in scores.items()},
        )
        return result.ok

    def _finish(
        self,
        article: Article,
        kind: InteractionKind,
        deltas: dict[str, float],
        state_ok: bool,
    ) -> InteractionResult:
        scores_ok = self._apply_deltas(deltas)
        persisted = state_ok and scores_ok

        self._log.debug(
            "interaction_recorded",
            article_id=article.id,
            kind=kind.value,
            deltas=deltas,
            persisted=persisted,
        )
        if not persisted:
            self._log.warning(
                "interaction_not_persisted",
                article_id=article.id,
                kind=kind.value,
            )

        return InteractionResult(
            article_id=article.id, kind=kind, deltas=deltas, persisted=persisted
        )

    def _add_like(self, article_id: str) -> bool:
        likes = self._load_likes()
        if article_id in likes:
            return True
        likes.append(article_id)
        return self._store.set(StorageKeys.LIKES.value, likes).ok

    def _remove_like(self, article_id: str) -> bool:
        likes = self._load_likes()
        if article_id not in likes:
            return True
        kept = [liked for liked in likes if liked != article_id]
        return self._store.set(StorageKeys.LIKES.value, kept).ok

    def _load_likes(self) -> list[str]:
        raw = self._store.get(StorageKeys.LIKES.value)
        if not isinstance(raw, list):
            return []
        return [item for item in raw if isinstance(item, str)]

    def _load_seen(self) -> SeenSet:
        raw = self._store.get(StorageKeys.SEEN.value)
        if not isinstance(raw, list):
            raw = []
        ids = [item for item in raw if isinstance(item, str)]
        return SeenSet(ids, capacity=self._config.seen_capacity)

    def _load_scores(self) -> dict[str, PreferenceScore]:
        """Read stored scores, renaming legacy category keys.

        Legacy Turkish category keys are renamed to their current names;
        entries that end up on the same key are merged.
        """
        raw = self._store.get(StorageKeys.CATEGORY_SCORES.value)
        if not isinstance(raw, dict):
            return {}

        scores: dict[str, PreferenceScore] = {}
        for key, value in raw.items():
            entry = PreferenceScore.from_stored(value)
            if entry is None:
                self._log.warning("preference_score_invalid", key=key)
                continue
            name = LEGACY_CATEGORY_ALIASES.get(key, key)
            current = scores.get(name)
            scores[name] = entry if current is None else self._merge(current, entry)
        return scores

    def _merge(
        self, first: PreferenceScore, second: PreferenceScore
    ) -> PreferenceScore:
        if first.is_legacy and second.is_legacy:
            return PreferenceScore(score=first.score + second.score)

        # A legacy entry joining a timestamped one reads at its fixed factor.
        factor = self._config.decay.legacy_factor
        total = sum(
            entry.score * factor if entry.is_legacy else entry.score
            for entry in (first, second)
        )
        timestamp = max(
            entry.timestamp
            for entry in (first, second)
            if entry.timestamp is not None
        )
        return PreferenceScore(score=total, timestamp=timestamp)
