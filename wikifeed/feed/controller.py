"""Feed controller: cache-or-fetch loading, interactions, and top-ups."""

import asyncio
import uuid
from collections.abc import Sequence
from typing import Protocol

import structlog

from wikifeed.articles import Article, ArticleProjection
from wikifeed.cache import ArticleCache
from wikifeed.config.schemas import ControllerConfig
from wikifeed.ledger import InteractionLedger, InteractionResult, PreferencesManager
from wikifeed.observability import bind_session_context
from wikifeed.ranker import RankingEngine
from wikifeed.store import KeyValueStore, StorageKeys


logger = structlog.get_logger()


class ArticleProvider(Protocol):
    """Remote source of articles."""

    @property
    def languages(self) -> list[str]:
        """Get the supported language codes."""
        ...

    async def get_random_articles(self, count: int, lang: str = "tr") -> list[Article]:
        """Fetch up to ``count`` random articles."""
        ...

    async def get_on_this_day(self, lang: str = "tr") -> list[Article]:
        """Fetch today's historical events."""
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        ...


async def _no_articles() -> list[Article]:
    return []


class FeedController:
    """Drives the reader's feed.

    Loading prefers unseen cached articles and falls back to the provider,
    retrying a few rounds while every fetched article is a duplicate. Each
    batch goes through the ranking engine before it is appended. A cache
    hit schedules a background top-up that refills the cache.

    Switching language or resetting starts a new generation; loads still in
    flight for an older generation are not appended.
    """

    def __init__(
        self,
        store: KeyValueStore,
        provider: ArticleProvider,
        cache: ArticleCache,
        ledger: InteractionLedger,
        engine: RankingEngine,
        preferences: PreferencesManager,
        config: ControllerConfig | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            store: Store holding every persisted key (used by reset).
            provider: Remote article source.
            cache: Per-language article cache.
            ledger: Interaction ledger.
            engine: Ranking engine.
            preferences: Reader preferences.
            config: Controller settings.
        """
        self._store = store
        self._provider = provider
        self._cache = cache
        self._ledger = ledger
        self._engine = engine
        self._preferences = preferences
        self._config = config or ControllerConfig()

        self._language = preferences.get().language
        self._articles: list[Article] = []
        self._index = 0
        self._generation = 0
        self._loading_generation: int | None = None
        self._in_flight: set[str] = set()
        self._tasks: set[asyncio.Task[None]] = set()
        self._session_id = str(uuid.uuid4())[:8]
        self._log = logger.bind(component="feed")

    # ===== State =====

    @property
    def language(self) -> str:
        """Get the active feed language."""
        return self._language

    @property
    def articles(self) -> list[Article]:
        """Get the loaded feed, in display order."""
        return list(self._articles)

    @property
    def index(self) -> int:
        """Get the cursor position."""
        return self._index

    @property
    def is_loading(self) -> bool:
        """Whether a load for the current generation is running."""
        return self._loading_generation == self._generation

    @property
    def current(self) -> Article | None:
        """Get the article under the cursor."""
        if 0 <= self._index < len(self._articles):
            return self._articles[self._index]
        return None

    @property
    def pending_top_ups(self) -> set[str]:
        """Get languages with a background top-up in flight."""
        return set(self._in_flight)

    # ===== Loading =====

    async def start(self, count: int | None = None) -> list[Article]:
        """Clean the cache and load the first batch.

        Args:
            count: Articles wanted; defaults to the initial count.

        Returns:
            Articles appended to the feed.
        """
        bind_session_context(self._session_id, self._language)
        removed = self._cache.remove_duplicate_ids()
        if removed:
            self._log.info("feed_cache_cleaned", removed=removed)
        return await self.load_articles(count or self._config.initial_count)

    async def load_articles(
        self, count: int | None = None, force_refresh: bool = False
    ) -> list[Article]:
        """Load more articles into the feed.

        Does nothing while a load for the current language is running.

        Args:
            count: Articles wanted; defaults to the initial count.
            force_refresh: Skip the cache and go to the provider.

        Returns:
            Articles appended to the feed by this call.
        """
        generation = self._generation
        if self._loading_generation == generation:
            self._log.debug("feed_load_skipped", reason="already_loading")
            return []

        count = count or self._config.initial_count
        lang = self._language
        self._loading_generation = generation
        appended: list[Article] = []

        try:
            appended = await self._load(lang, count, force_refresh, generation)
        except Exception as e:  # noqa: BLE001
            self._log.error(
                "feed_load_failed",
                lang=lang,
                error=str(e),
                error_type=type(e).__name__,
            )
            if generation == self._generation:
                appended = self._append(self._engine.recommend(self._fallback(lang)))
        finally:
            if self._loading_generation == generation:
                self._loading_generation = None

        self._log.info(
            "feed_loaded",
            lang=lang,
            requested=count,
            appended=len(appended),
            total=len(self._articles),
        )
        return appended

    async def _load(
        self, lang: str, count: int, force_refresh: bool, generation: int
    ) -> list[Article]:
        appended: list[Article] = []

        if not self._articles and not force_refresh:
            cached = self._cache.get_unexpired(lang) or []
            seen = set(self._ledger.get_seen())
            unseen = [item for item in cached if item.id not in seen]

            if len(unseen) >= count:
                appended = self._append(self._engine.recommend(unseen[:count]))
                self._log.debug("feed_cache_hit", lang=lang, unseen=len(unseen))
                self.top_up(count)
                return appended

            if unseen:
                appended = self._append(self._engine.recommend(unseen))
                self._log.debug("feed_cache_partial", lang=lang, unseen=len(unseen))

        fetched = await self._fetch_new(lang, count)

        if fetched:
            self._cache.merge(lang, fetched)
        if generation != self._generation:
            self._log.info("feed_results_abandoned", lang=lang, count=len(fetched))
            return []

        return appended + self._append(self._engine.recommend(fetched))

    async def _fetch_new(self, lang: str, count: int) -> list[Article]:
        """Fetch articles not yet seen, shown, or collected.

        Stops at the first round that yields anything new.
        """
        seen = set(self._ledger.get_seen())
        shown = {article.id for article in self._articles}
        collected: list[Article] = []
        collected_ids: set[str] = set()

        for attempt in range(self._config.max_fetch_rounds):
            if len(collected) >= count:
                break

            with_on_this_day = attempt == 0 and not self._articles
            random_articles, on_this_day = await asyncio.gather(
                self._provider.get_random_articles(count, lang),
                self._provider.get_on_this_day(lang)
                if with_on_this_day
                else _no_articles(),
            )

            candidates = random_articles + on_this_day[
                : self._config.on_this_day_per_load
            ]
            fresh = []
            for article in candidates:
                if article.id in seen or article.id in shown:
                    continue
                if article.id in collected_ids:
                    continue
                collected_ids.add(article.id)
                fresh.append(article)
            collected.extend(fresh)

            self._log.debug(
                "feed_fetch_round",
                lang=lang,
                attempt=attempt + 1,
                unique=len(fresh),
                total=len(collected),
            )
            if fresh:
                break

        return collected[:count]

    def _fallback(self, lang: str) -> list[ArticleProjection]:
        shown = {article.id for article in self._articles}
        return [item for item in self._cache.get_all(lang) if item.id not in shown]

    def _append(self, articles: Sequence[Article]) -> list[Article]:
        shown = {article.id for article in self._articles}
        added = [article for article in articles if article.id not in shown]
        self._articles.extend(added)
        return added

    # ===== Background top-up =====

    def top_up(self, count: int) -> asyncio.Task[None] | None:
        """Schedule a background cache refill for the active language.

        At most one top-up per language runs at a time. Must be called from
        a running event loop.

        Args:
            count: Base count; the refill asks for a multiple of it.

        Returns:
            The scheduled task, or None if one is already in flight.
        """
        lang = self._language
        if lang in self._in_flight:
            self._log.debug("top_up_skipped", lang=lang)
            return None

        self._in_flight.add(lang)
        task = asyncio.get_running_loop().create_task(
            self._top_up(lang, count * self._config.top_up_multiplier)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _top_up(self, lang: str, count: int) -> None:
        try:
            articles = await self._provider.get_random_articles(count, lang)
            known = {item.id for item in self._cache.get_all(lang)}
            unique = [article for article in articles if article.id not in known]
            if unique:
                result = self._cache.merge(lang, unique)
                self._log.info("top_up_cached", lang=lang, added=result.added)
        except Exception as e:  # noqa: BLE001
            self._log.warning("top_up_failed", lang=lang, error=str(e))
        finally:
            self._in_flight.discard(lang)

    async def drain(self) -> None:
        """Wait for every background top-up to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # ===== Navigation =====

    async def advance(self, duration_ms: float) -> Article | None:
        """Move to the next card, recording the view of the current one.

        Loads more articles when the cursor gets close to the end.

        Args:
            duration_ms: How long the current card was on screen.

        Returns:
            The new current article, or None at the end of the feed.
        """
        article = self.current
        if article is not None:
            self.report_view(article, duration_ms)
            self._index += 1

        remaining = len(self._articles) - self._index
        if remaining <= self._config.load_more_threshold:
            await self.load_articles(self._config.more_count)
        return self.current

    # ===== Interactions =====

    def report_view(self, article: Article, duration_ms: float) -> InteractionResult:
        """Record how long an article was on screen."""
        return self._ledger.record_view(article, duration_ms)

    def toggle_like(self, article: Article | None = None) -> InteractionResult | None:
        """Like or unlike an article (the current one by default).

        Returns:
            The recorded interaction, or None with no article.
        """
        article = article or self.current
        if article is None:
            return None
        if self._ledger.is_liked(article.id):
            return self._ledger.record_unlike(article)
        return self._ledger.record_like(article)

    def toggle_save(self, article: Article | None = None) -> InteractionResult | None:
        """Save or unsave an article (the current one by default).

        Returns:
            The recorded interaction, or None with no article.
        """
        article = article or self.current
        if article is None:
            return None
        if self._ledger.is_saved(article.id):
            return self._ledger.record_unsave(article)
        return self._ledger.record_save(article)

    def not_interested(
        self, article: Article | None = None
    ) -> InteractionResult | None:
        """Dismiss an article (the current one by default)."""
        article = article or self.current
        if article is None:
            return None
        return self._ledger.record_not_interested(article)

    def open_source(self, article: Article | None = None) -> str | None:
        """Open an article's source page, recording strong interest.

        Returns:
            The source URL, or None if the article has none.
        """
        article = article or self.current
        if article is None or article.source is None or not article.source.url:
            return None
        self._ledger.record_open_source(article)
        return article.source.url

    # ===== Language and reset =====

    async def switch_language(self, lang: str) -> list[Article]:
        """Switch the feed language and load a fresh feed.

        Args:
            lang: Language code.

        Returns:
            Articles loaded for the new language.

        Raises:
            ValueError: If the provider does not support the language.
        """
        if lang == self._language:
            return []
        if lang not in self._provider.languages:
            msg = f"Unsupported language: {lang}"
            raise ValueError(msg)

        self._preferences.set_language(lang)
        self._log.info("feed_language_switched", old=self._language, new=lang)
        self._language = lang
        self._restart()
        bind_session_context(self._session_id, lang)
        return await self.load_articles(self._config.initial_count)

    async def reset(self) -> list[Article]:
        """Forget everything and load a fresh feed from the provider.

        Clears every persisted key and the session window. The active
        language stays in memory.

        Returns:
            Articles loaded after the reset.
        """
        cleared = self._store.clear_all(key.value for key in StorageKeys)
        self._engine.session.reset()
        self._restart()
        self._log.info("feed_reset", keys_cleared=cleared)
        return await self.load_articles(self._config.initial_count, force_refresh=True)

    def _restart(self) -> None:
        self._generation += 1
        self._articles = []
        self._index = 0

    async def aclose(self) -> None:
        """Wait for background work, then release the provider and store."""
        await self.drain()
        await self._provider.aclose()
        self._store.close()
