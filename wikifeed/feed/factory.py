"""Wiring of the store, ledger, cache, ranker, and provider into a feed."""

from datetime import timedelta

import httpx

from wikifeed.cache import ArticleCache
from wikifeed.config.schemas import WikifeedConfig
from wikifeed.data_model import Clock, utc_now
from wikifeed.feed.controller import FeedController
from wikifeed.ledger import InteractionLedger, PreferencesManager
from wikifeed.provider import WikipediaProvider
from wikifeed.ranker import RankingEngine, SessionWindow
from wikifeed.settings import AppSettings
from wikifeed.store import KeyValueStore


def build_controller(
    settings: AppSettings,
    config: WikifeedConfig | None = None,
    client: httpx.AsyncClient | None = None,
    clock: Clock = utc_now,
) -> FeedController:
    """Build a feed controller over a connected store.

    The session window is created once and shared by the ranking engine
    and the ledger, so recorded views feed the session repeat penalty.

    Args:
        settings: Environment settings (database path, language).
        config: Feed configuration; defaults when omitted.
        client: HTTP client for the provider.
        clock: Source of the current time.

    Returns:
        The controller; call ``aclose()`` when done.
    """
    config = config or WikifeedConfig()

    store = KeyValueStore(
        settings.db_path,
        namespace=config.store.namespace,
        max_bytes=config.store.max_bytes,
    )
    store.connect()

    session = SessionWindow(
        size=config.session.window_size,
        inactivity=timedelta(minutes=config.session.inactivity_minutes),
        clock=clock,
    )
    ledger = InteractionLedger(store, config.ledger, session=session, clock=clock)
    engine = RankingEngine(
        ledger,
        scoring=config.scoring,
        session_config=config.session,
        session=session,
        clock=clock,
    )
    preferences = PreferencesManager(store, default_language=settings.language or "tr")

    return FeedController(
        store=store,
        provider=WikipediaProvider(config.provider, client=client, clock=clock),
        cache=ArticleCache(store, config.cache, clock=clock),
        ledger=ledger,
        engine=engine,
        preferences=preferences,
        config=config.controller,
    )
