"""Per-language article cache with TTL and byte-budget eviction."""

import json
from collections.abc import Iterable

import structlog
from pydantic import ValidationError

from wikifeed.articles import Article, ArticleProjection
from wikifeed.cache.metrics import CacheMetrics
from wikifeed.cache.models import CacheMergeResult
from wikifeed.config.schemas import CacheConfig
from wikifeed.data_model import Clock, to_epoch_ms, utc_now
from wikifeed.store import KeyValueStore, StorageKeys


logger = structlog.get_logger()

CacheLists = dict[str, list[ArticleProjection]]


class ArticleCache:
    """Bounded per-language lists of article projections.

    Lists are stored newest first under a single key, with the last refresh
    time of each language (epoch milliseconds) under a second key. Within a
    language an id appears at most once; the first write of an id wins.
    """

    def __init__(
        self,
        store: KeyValueStore,
        config: CacheConfig | None = None,
        clock: Clock = utc_now,
        metrics: CacheMetrics | None = None,
    ) -> None:
        """Initialize the cache.

        Args:
            store: Backing store.
            config: Cache settings.
            clock: Source of the current time.
            metrics: Optional metrics instance.
        """
        self._store = store
        self._config = config or CacheConfig()
        self._clock = clock
        self._metrics = metrics or CacheMetrics.get_instance()
        self._log = logger.bind(component="cache")

    @property
    def duration_ms(self) -> float:
        """Get the freshness window in milliseconds."""
        return self._config.duration_minutes * 60 * 1000

    def get_unexpired(self, lang: str) -> list[ArticleProjection] | None:
        """Get a language's list if it is still fresh.

        A list with no recorded refresh time is treated as fresh and stamped
        now.

        Args:
            lang: Language code.

        Returns:
            The cached projections, or None on a miss or when stale.
        """
        lists = self._load_lists()
        if lang not in lists:
            self._metrics.record_miss()
            return None

        now_ms = to_epoch_ms(self._clock())
        timestamps = self._load_timestamps()
        refreshed_at = timestamps.get(lang)

        if refreshed_at is None:
            timestamps[lang] = now_ms
            self._store.set(StorageKeys.CACHE_TIMESTAMPS.value, timestamps)
            self._log.debug("cache_timestamp_backfilled", lang=lang)
        elif now_ms - refreshed_at > self.duration_ms:
            self._metrics.record_expired()
            self._log.debug(
                "cache_expired", lang=lang, age_ms=now_ms - refreshed_at
            )
            return None

        self._metrics.record_hit()
        return lists[lang]

    def get_all(self, lang: str) -> list[ArticleProjection]:
        """Get a language's list regardless of age.

        Args:
            lang: Language code.

        Returns:
            The cached projections, empty if none.
        """
        return self._load_lists().get(lang, [])

    def find(self, article_id: str) -> ArticleProjection | None:
        """Look up a projection by id in any language.

        Args:
            article_id: Id to look up.

        Returns:
            The first matching projection, or None.
        """
        for projections in self._load_lists().values():
            for projection in projections:
                if projection.id == article_id:
                    return projection
        return None

    def merge(
        self,
        lang: str,
        articles: Iterable[Article | ArticleProjection],
    ) -> CacheMergeResult:
        """Merge articles into a language's list.

        New ids are prepended (newest first) and ids already cached are
        ignored. The refresh time is stamped, the list is cut to the
        per-language cap, and if the whole cache is over its byte budget,
        entries are evicted from language tails until it is under the
        target ratio.

        Args:
            lang: Language code.
            articles: Articles or projections to add.

        Returns:
            Counts of added and evicted entries and the persistence outcome.
        """
        lists = self._load_lists()
        existing = lists.get(lang, [])
        known = {projection.id for projection in existing}

        fresh: list[ArticleProjection] = []
        for article in articles:
            projection = (
                article.to_projection() if isinstance(article, Article) else article
            )
            if projection.id in known:
                continue
            known.add(projection.id)
            fresh.append(projection)

        merged = fresh + existing
        cap = self._config.max_per_language
        evicted_tail = max(len(merged) - cap, 0)
        lists[lang] = merged[:cap]

        evicted_budget = self._evict_to_budget(lists)

        timestamps = self._load_timestamps()
        timestamps[lang] = to_epoch_ms(self._clock())

        lists_ok = self._write_lists(lists)
        timestamps_ok = self._store.set(
            StorageKeys.CACHE_TIMESTAMPS.value, timestamps
        ).ok

        self._metrics.record_merge(lang, len(fresh), evicted_tail, evicted_budget)
        self._log.debug(
            "cache_merged",
            lang=lang,
            added=len(fresh),
            size=len(lists[lang]),
            evicted_tail=evicted_tail,
            evicted_budget=evicted_budget,
        )

        return CacheMergeResult(
            added=len(fresh),
            evicted_tail=evicted_tail,
            evicted_budget=evicted_budget,
            persisted=lists_ok and timestamps_ok,
        )

    def remove_duplicate_ids(self) -> int:
        """Drop repeated ids within each language, keeping the first.

        Returns:
            Number of entries removed.
        """
        lists = self._load_lists()
        removed = 0

        for lang, projections in lists.items():
            seen: set[str] = set()
            kept: list[ArticleProjection] = []
            for projection in projections:
                if projection.id in seen:
                    continue
                seen.add(projection.id)
                kept.append(projection)
            removed += len(projections) - len(kept)
            lists[lang] = kept

        if removed:
            self._write_lists(lists)
            self._metrics.record_duplicates_removed(removed)
            self._log.info("cache_duplicates_removed", removed=removed)
        return removed

    def _evict_to_budget(self, lists: CacheLists) -> int:
        """Evict tail entries round-robin while over the byte budget.

        Languages at or below the minimum entry count are never touched.

        Args:
            lists: Cache lists, modified in place.

        Returns:
            Number of entries evicted.
        """
        if self._encoded_size(lists) <= self._config.max_bytes:
            return 0

        target = self._config.max_bytes * self._config.evict_target_ratio
        floor = self._config.min_entries_per_language
        batch = self._config.eviction_batch
        evicted = 0

        while self._encoded_size(lists) > target:
            eligible = [lang for lang, items in lists.items() if len(items) > floor]
            if not eligible:
                self._log.warning(
                    "cache_budget_unreachable",
                    size_bytes=self._encoded_size(lists),
                    max_bytes=self._config.max_bytes,
                )
                break
            for lang in eligible:
                drop = min(batch, len(lists[lang]) - floor)
                lists[lang] = lists[lang][: len(lists[lang]) - drop]
                evicted += drop

        self._log.info("cache_budget_evicted", evicted=evicted)
        return evicted

    @staticmethod
    def _encoded_size(lists: CacheLists) -> int:
        payload = {
            lang: [projection.model_dump(mode="json") for projection in items]
            for lang, items in lists.items()
        }
        encoded = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
        return len(encoded.encode("utf-8"))

    def _load_lists(self) -> CacheLists:
        raw = self._store.get(StorageKeys.CACHE.value)
        if not isinstance(raw, dict):
            return {}

        lists: CacheLists = {}
        for lang, entries in raw.items():
            if not isinstance(entries, list):
                continue
            projections: list[ArticleProjection] = []
            for entry in entries:
                try:
                    projections.append(ArticleProjection.model_validate(entry))
                except ValidationError:
                    self._log.warning("cache_entry_invalid", lang=lang)
            lists[lang] = projections
        return lists

    def _load_timestamps(self) -> dict[str, int]:
        raw = self._store.get(StorageKeys.CACHE_TIMESTAMPS.value)
        if not isinstance(raw, dict):
            return {}
        return {
            lang: int(value)
            for lang, value in raw.items()
            if isinstance(value, int | float) and not isinstance(value, bool)
        }

    def _write_lists(self, lists: CacheLists) -> bool:
        payload = {
            lang: [projection.model_dump(mode="json") for projection in items]
            for lang, items in lists.items()
        }
        return self._store.set(StorageKeys.CACHE.value, payload).ok
