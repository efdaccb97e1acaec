"""Unit tests for the per-language article cache."""

import json
from collections.abc import Generator
from datetime import timedelta

import pytest

from wikifeed.articles import Article, ArticleProjection, Category
from wikifeed.cache import ArticleCache, CacheMetrics
from wikifeed.config.schemas import CacheConfig
from wikifeed.data_model import to_epoch_ms
from wikifeed.store import KeyValueStore, StorageKeys
from tests.helpers.time import FIXED_NOW, FakeClock


def _make_article(article_id: str, hook: str | None = None) -> Article:
    """Create a test Article."""
    return Article(
        id=article_id,
        hook=hook or f"An interesting fact about {article_id}.",
        category=Category.SCIENCE,
        tags=["atoms"],
    )


def _make_projection(article_id: str, hook_length: int = 40) -> ArticleProjection:
    """Create a projection with a hook of the given length."""
    return ArticleProjection(id=article_id, hook="x" * hook_length)


def _cache_size(store: KeyValueStore) -> int:
    """Size of the cache payload as the cache measures it."""
    encoded = json.dumps(
        store.get(StorageKeys.CACHE.value), ensure_ascii=False, separators=(",", ":")
    )
    return len(encoded.encode("utf-8"))


@pytest.fixture
def store() -> Generator[KeyValueStore]:
    """Create a connected in-memory store."""
    with KeyValueStore(":memory:") as store:
        yield store


@pytest.fixture
def clock() -> FakeClock:
    """Create a fixed clock."""
    return FakeClock()


@pytest.fixture
def metrics() -> CacheMetrics:
    """Create an isolated metrics instance."""
    return CacheMetrics()


@pytest.fixture
def cache(
    store: KeyValueStore, clock: FakeClock, metrics: CacheMetrics
) -> ArticleCache:
    """Create a cache with default settings."""
    return ArticleCache(store, clock=clock, metrics=metrics)


class TestMerge:
    """Tests for merging articles into a language list."""

    def test_merge_stores_projections(
        self, cache: ArticleCache, store: KeyValueStore
    ) -> None:
        """Test merged articles are stored without tag lists."""
        result = cache.merge("tr", [_make_article("a"), _make_article("b")])

        assert result.added == 2
        assert result.persisted
        assert [p.id for p in cache.get_all("tr")] == ["a", "b"]
        assert "tags" not in store.get(StorageKeys.CACHE.value)["tr"][0]

    def test_newest_batch_first(self, cache: ArticleCache) -> None:
        """Test a later merge is prepended."""
        cache.merge("tr", [_make_article("a")])
        cache.merge("tr", [_make_article("b")])

        assert [p.id for p in cache.get_all("tr")] == ["b", "a"]

    def test_first_write_wins(self, cache: ArticleCache) -> None:
        """Test re-merging a cached id keeps the original entry."""
        cache.merge("tr", [_make_article("a", "The original hook text.")])

        result = cache.merge("tr", [_make_article("a", "A replacement hook text.")])

        assert result.added == 0
        assert cache.get_all("tr")[0].hook == "The original hook text."

    def test_duplicates_within_batch(self, cache: ArticleCache) -> None:
        """Test a batch with repeated ids adds each id once."""
        result = cache.merge("tr", [_make_article("a"), _make_article("a")])

        assert result.added == 1
        assert len(cache.get_all("tr")) == 1

    def test_languages_are_independent(self, cache: ArticleCache) -> None:
        """Test the same id can be cached in two languages."""
        cache.merge("tr", [_make_article("a")])
        cache.merge("en", [_make_article("a")])

        assert len(cache.get_all("tr")) == 1
        assert len(cache.get_all("en")) == 1

    def test_per_language_cap(self, store: KeyValueStore, clock: FakeClock) -> None:
        """Test lists are cut to the cap, dropping the oldest."""
        cache = ArticleCache(
            store, CacheConfig(max_per_language=3), clock, CacheMetrics()
        )
        cache.merge("tr", [_make_article("old")])

        result = cache.merge("tr", [_make_article(f"n{i}") for i in range(3)])

        assert result.evicted_tail == 1
        assert [p.id for p in cache.get_all("tr")] == ["n0", "n1", "n2"]

    def test_merge_records_metrics(
        self, cache: ArticleCache, metrics: CacheMetrics
    ) -> None:
        """Test merges update the counters."""
        cache.merge("en", [_make_article("a"), _make_article("b")])

        assert metrics.added_total == 2
        assert metrics.added_by_language == {"en": 2}

    def test_merge_stamps_timestamp(
        self, cache: ArticleCache, store: KeyValueStore
    ) -> None:
        """Test merging records the refresh time."""
        cache.merge("tr", [_make_article("a")])

        timestamps = store.get(StorageKeys.CACHE_TIMESTAMPS.value)
        assert timestamps == {"tr": to_epoch_ms(FIXED_NOW)}


class TestFreshness:
    """Tests for TTL handling."""

    def test_miss(self, cache: ArticleCache, metrics: CacheMetrics) -> None:
        """Test an uncached language is a miss."""
        assert cache.get_unexpired("tr") is None
        assert metrics.misses_total == 1

    def test_fresh_hit(self, cache: ArticleCache, metrics: CacheMetrics) -> None:
        """Test a recently merged list is returned."""
        cache.merge("tr", [_make_article("a")])

        cached = cache.get_unexpired("tr")

        assert cached is not None
        assert [p.id for p in cached] == ["a"]
        assert metrics.hits_total == 1

    def test_exactly_at_duration_is_fresh(
        self, cache: ArticleCache, clock: FakeClock
    ) -> None:
        """Test a list exactly as old as the duration is still fresh."""
        cache.merge("tr", [_make_article("a")])

        clock.advance(timedelta(minutes=60))

        assert cache.get_unexpired("tr") is not None

    def test_expired(
        self, cache: ArticleCache, clock: FakeClock, metrics: CacheMetrics
    ) -> None:
        """Test a stale list is not returned but stays available."""
        cache.merge("tr", [_make_article("a")])

        clock.advance(timedelta(minutes=61))

        assert cache.get_unexpired("tr") is None
        assert metrics.expired_total == 1
        assert len(cache.get_all("tr")) == 1

    def test_missing_timestamp_is_backfilled(
        self, cache: ArticleCache, store: KeyValueStore
    ) -> None:
        """Test a list without a refresh time is fresh and gets stamped."""
        store.set(
            StorageKeys.CACHE.value,
            {"tr": [_make_projection("a").model_dump(mode="json")]},
        )

        cached = cache.get_unexpired("tr")

        assert cached is not None
        assert store.get(StorageKeys.CACHE_TIMESTAMPS.value) == {
            "tr": to_epoch_ms(FIXED_NOW)
        }


class TestBudgetEviction:
    """Tests for the serialized size budget."""

    def test_evicts_below_target(self, store: KeyValueStore, clock: FakeClock) -> None:
        """Test an oversized cache is evicted under the target ratio."""
        config = CacheConfig(
            max_bytes=2048, min_entries_per_language=2, eviction_batch=1
        )
        cache = ArticleCache(store, config, clock, CacheMetrics())

        result = cache.merge("tr", [_make_projection(f"p{i}", 200) for i in range(12)])

        assert result.evicted_budget > 0
        assert _cache_size(store) <= 2048 * 0.8
        assert cache.get_all("tr")[0].id == "p0"

    def test_round_robin_across_languages(
        self, store: KeyValueStore, clock: FakeClock
    ) -> None:
        """Test every language above the floor gives up entries."""
        config = CacheConfig(
            max_bytes=4096, min_entries_per_language=3, eviction_batch=2
        )
        cache = ArticleCache(store, config, clock, CacheMetrics())
        cache.merge("en", [_make_projection(f"en{i}", 150) for i in range(10)])

        cache.merge("tr", [_make_projection(f"tr{i}", 150) for i in range(10)])

        sizes = {lang: len(cache.get_all(lang)) for lang in ("en", "tr")}
        assert sizes["en"] < 10
        assert sizes["tr"] < 10
        assert all(size >= 3 for size in sizes.values())
        assert _cache_size(store) <= 4096 * 0.8

    def test_floor_is_respected(self, store: KeyValueStore, clock: FakeClock) -> None:
        """Test small languages are never evicted, even over budget."""
        config = CacheConfig(max_bytes=1024, min_entries_per_language=10)
        cache = ArticleCache(store, config, clock, CacheMetrics())

        result = cache.merge("tr", [_make_projection(f"p{i}", 300) for i in range(10)])

        assert result.evicted_budget == 0
        assert len(cache.get_all("tr")) == 10

    def test_under_budget_untouched(self, cache: ArticleCache) -> None:
        """Test nothing is evicted under the budget."""
        result = cache.merge("tr", [_make_article(f"a{i}") for i in range(20)])

        assert result.evicted_budget == 0
        assert len(cache.get_all("tr")) == 20


class TestMaintenance:
    """Tests for lookups and cleanup."""

    def test_find_across_languages(self, cache: ArticleCache) -> None:
        """Test find searches every language."""
        cache.merge("tr", [_make_article("a")])
        cache.merge("en", [_make_article("b")])

        found = cache.find("b")

        assert found is not None
        assert found.id == "b"
        assert cache.find("missing") is None

    def test_remove_duplicate_ids(
        self, cache: ArticleCache, store: KeyValueStore, metrics: CacheMetrics
    ) -> None:
        """Test repeated ids within a language are collapsed, keeping the first."""
        first = _make_projection("a", 10).model_dump(mode="json")
        second = _make_projection("a", 20).model_dump(mode="json")
        other = _make_projection("b").model_dump(mode="json")
        store.set(
            StorageKeys.CACHE.value,
            {"tr": [first, other, second], "en": [first]},
        )

        removed = cache.remove_duplicate_ids()

        assert removed == 1
        assert [p.id for p in cache.get_all("tr")] == ["a", "b"]
        assert cache.get_all("tr")[0].hook == "x" * 10
        assert len(cache.get_all("en")) == 1
        assert metrics.duplicates_removed_total == 1

    def test_remove_duplicate_ids_noop(self, cache: ArticleCache) -> None:
        """Test a clean cache is left alone."""
        cache.merge("tr", [_make_article("a")])

        assert cache.remove_duplicate_ids() == 0

    def test_invalid_entries_skipped(
        self, cache: ArticleCache, store: KeyValueStore
    ) -> None:
        """Test entries that fail validation are ignored on read."""
        valid = _make_projection("a").model_dump(mode="json")
        store.set(StorageKeys.CACHE.value, {"tr": [{"hook": "no id"}, valid]})

        assert [p.id for p in cache.get_all("tr")] == ["a"]

    def test_legacy_category_names(
        self, cache: ArticleCache, store: KeyValueStore
    ) -> None:
        """Test projections stored with legacy category names are coerced."""
        store.set(
            StorageKeys.CACHE.value,
            {"tr": [{"id": "a", "hook": "Bir tarih olayı.", "category": "tarih"}]},
        )

        assert cache.get_all("tr")[0].category == Category.HISTORY
