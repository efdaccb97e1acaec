"""End-to-end feed flow over a file-backed store and a mocked Wikipedia."""

import asyncio
import itertools
from pathlib import Path

import httpx
import pytest

from wikifeed.cache import ArticleCache
from wikifeed.config import ControllerConfig, ProviderConfig, WikifeedConfig
from wikifeed.feed import FeedController, build_controller
from wikifeed.ledger import InteractionLedger, PreferencesManager
from wikifeed.settings import get_settings
from wikifeed.store import KeyValueStore
from tests.helpers.time import FakeClock


def _wikipedia_handler() -> httpx.MockTransport:
    """Mock the random summary and on-this-day endpoints."""
    pageids = itertools.count(1)

    def handler(request: httpx.Request) -> httpx.Response:
        lang = request.url.host.split(".")[0]
        if request.url.path.endswith("/page/random/summary"):
            pageid = next(pageids)
            return httpx.Response(
                200,
                json={
                    "type": "standard",
                    "pageid": pageid,
                    "title": f"Topic {pageid}",
                    "description": "Species of mammal",
                    "extract": (
                        f"Topic {pageid} has a long and interesting history in "
                        f"{lang} sources. Scholars have studied it for years."
                    ),
                },
            )
        if "/feed/onthisday/events/" in request.url.path:
            return httpx.Response(
                200,
                json={
                    "events": [
                        {
                            "text": "A historic treaty is signed after long talks.",
                            "year": 1900,
                        }
                    ]
                },
            )
        return httpx.Response(404)

    return httpx.MockTransport(handler)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Path of the state database."""
    return tmp_path / "state.sqlite"


@pytest.fixture
def config() -> WikifeedConfig:
    """Feed config with small batches and a fast rate limit."""
    return WikifeedConfig(
        provider=ProviderConfig(max_qps=200.0),
        controller=ControllerConfig(initial_count=5),
    )


def _build(
    db_path: Path, config: WikifeedConfig, client: httpx.AsyncClient, clock: FakeClock
) -> FeedController:
    settings = get_settings().model_copy(update={"db_path": db_path, "language": None})
    return build_controller(settings, config, client=client, clock=clock)


class TestFeedFlow:
    """Tests for a full reading session."""

    def test_session_persists_across_restarts(
        self, db_path: Path, config: WikifeedConfig
    ) -> None:
        """Test likes, views, and cached articles survive a restart."""
        clock = FakeClock()

        async def first_session() -> tuple[list[str], str]:
            async with httpx.AsyncClient(transport=_wikipedia_handler()) as client:
                controller = _build(db_path, config, client, clock)
                loaded = await controller.start()
                current = controller.current
                assert current is not None
                controller.toggle_like()
                await controller.advance(5000)
                await controller.aclose()
                return [article.id for article in loaded], current.id

        loaded_ids, liked_id = asyncio.run(first_session())

        assert len(loaded_ids) == 5
        with KeyValueStore(db_path) as store:
            ledger = InteractionLedger(store)
            assert ledger.get_likes() == [liked_id]
            assert ledger.get_seen() == [liked_id]
            cached = {p.id for p in ArticleCache(store).get_all("tr")}
            assert set(loaded_ids) <= cached

        async def second_session() -> list[str]:
            async with httpx.AsyncClient(transport=_wikipedia_handler()) as client:
                controller = _build(db_path, config, client, clock)
                loaded = await controller.start()
                await controller.aclose()
                return [article.id for article in loaded]

        reloaded_ids = asyncio.run(second_session())

        assert liked_id not in reloaded_ids
        assert set(loaded_ids) - {liked_id} <= set(reloaded_ids)

    def test_language_switch_persists(
        self, db_path: Path, config: WikifeedConfig
    ) -> None:
        """Test switching language loads that language and is remembered."""
        clock = FakeClock()

        async def run() -> list[str]:
            async with httpx.AsyncClient(transport=_wikipedia_handler()) as client:
                controller = _build(db_path, config, client, clock)
                await controller.start()
                loaded = await controller.switch_language("en")
                await controller.aclose()
                return [article.source.lang for article in loaded if article.source]

        langs = asyncio.run(run())

        assert langs
        assert set(langs) == {"en"}
        with KeyValueStore(db_path) as store:
            assert PreferencesManager(store).get().language == "en"
            assert len(ArticleCache(store).get_all("en")) >= 5

    def test_likes_shape_ranking(self, db_path: Path, config: WikifeedConfig) -> None:
        """Test a liked category dominates the next weights."""
        clock = FakeClock()

        async def run() -> None:
            async with httpx.AsyncClient(transport=_wikipedia_handler()) as client:
                controller = _build(db_path, config, client, clock)
                await controller.start()
                controller.toggle_like()
                controller.toggle_save()
                await controller.aclose()

        asyncio.run(run())

        with KeyValueStore(db_path) as store:
            weights = InteractionLedger(store, clock=clock).get_weights()

        assert weights["nature"] == pytest.approx(18.0)
        assert weights["species"] == pytest.approx(5.0)
        assert weights["species of mammal"] == pytest.approx(3.0)
