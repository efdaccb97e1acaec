"""Async client for the Wikipedia REST summary and feed endpoints."""

import asyncio
import hashlib
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from wikifeed.articles import Article, ArticleSource, Category, category_emoji
from wikifeed.config.schemas import ProviderConfig
from wikifeed.data_model import Clock, utc_now
from wikifeed.provider.errors import ProviderError, ProviderErrorClass
from wikifeed.provider.rate_limiter import AsyncTokenBucket
from wikifeed.provider.text import (
    detect_category,
    extract_tags,
    first_sentences,
    is_interesting,
    truncate_hook,
    wiki_categories,
)


logger = structlog.get_logger()

HTTP_STATUS_BAD_REQUEST = 400
ON_THIS_DAY_MIN_TEXT = 30
ON_THIS_DAY_EMOJI = "📅"
ON_THIS_DAY_TAGS = ["history", "today"]


class WikipediaProvider:
    """Fetches and formats Wikipedia articles.

    Every public method degrades to ``None`` or ``[]`` on failure; errors
    are logged as ``provider_request_failed`` and never raised.
    """

    def __init__(
        self,
        config: ProviderConfig | None = None,
        client: httpx.AsyncClient | None = None,
        clock: Clock = utc_now,
        rate_limiter: AsyncTokenBucket | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            config: Provider settings.
            client: HTTP client; one is created (and owned) when omitted.
            clock: Source of the current date for on-this-day lookups.
            rate_limiter: Request rate limiter.
        """
        self._config = config or ProviderConfig()
        self._client = client
        self._owns_client = client is None
        self._clock = clock
        self._limiter = rate_limiter or AsyncTokenBucket(max_qps=self._config.max_qps)
        self._log = logger.bind(component="provider")

    @property
    def languages(self) -> list[str]:
        """Get the languages with a configured endpoint."""
        return sorted(self._config.endpoints)

    async def aclose(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "WikipediaProvider":
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Async context manager exit."""
        await self.aclose()

    async def get_random_articles(self, count: int, lang: str = "tr") -> list[Article]:
        """Fetch random articles, over-fetching and keeping the best.

        Args:
            count: Number of articles wanted.
            lang: Language code.

        Returns:
            Up to ``count`` interesting, distinct articles.
        """
        if count <= 0:
            return []

        fetch_count = count * self._config.overfetch_factor
        results = await asyncio.gather(
            *(self._fetch_random(lang) for _ in range(fetch_count))
        )

        articles: list[Article] = []
        seen_ids: set[str] = set()
        for article in results:
            if article is None or article.id in seen_ids:
                continue
            if len(article.hook) < self._config.min_hook_length:
                continue
            if not is_interesting(article.hook, lang):
                continue
            seen_ids.add(article.id)
            articles.append(article)

        self._log.debug(
            "random_articles_fetched",
            lang=lang,
            requested=fetch_count,
            formatted=sum(1 for article in results if article is not None),
            kept=min(len(articles), count),
        )
        return articles[:count]

    async def get_article(self, title: str, lang: str = "tr") -> Article | None:
        """Fetch one article by page title.

        Args:
            title: Page title.
            lang: Language code.

        Returns:
            The formatted article, or None.
        """
        path = f"/page/summary/{quote(title, safe='')}"
        try:
            data = await self._get_json(lang, path)
        except ProviderError as e:
            self._log.warning("provider_request_failed", lang=lang, **e.to_dict())
            return None
        return self.format_article(data, lang)

    async def get_on_this_day(self, lang: str = "tr") -> list[Article]:
        """Fetch events that happened on today's date.

        Args:
            lang: Language code.

        Returns:
            Up to the configured limit of history articles.
        """
        today = self._clock()
        path = f"/feed/onthisday/events/{today.month:02d}/{today.day:02d}"
        try:
            data = await self._get_json(lang, path)
        except ProviderError as e:
            self._log.warning("provider_request_failed", lang=lang, **e.to_dict())
            return []

        events = data.get("events")
        if not isinstance(events, list):
            return []

        articles: list[Article] = []
        for event in events:
            if len(articles) >= self._config.on_this_day_limit:
                break
            article = self._format_event(event, lang)
            if article is not None:
                articles.append(article)
        return articles

    def format_article(self, data: dict[str, Any], lang: str) -> Article | None:
        """Turn a summary document into an article.

        Disambiguation pages and pages whose first two sentences are shorter
        than the minimum hook length are dropped.

        Args:
            data: Summary JSON document.
            lang: Language code.

        Returns:
            The article, or None if the page is unusable.
        """
        extract = data.get("extract")
        title = data.get("title")
        if not isinstance(extract, str) or not extract.strip():
            return None
        if not isinstance(title, str) or not title:
            return None
        if data.get("type") == "disambiguation":
            return None

        hook = first_sentences(extract, 2)
        if len(hook) < self._config.min_hook_length:
            return None
        hook = truncate_hook(hook, self._config.max_hook_length)

        description = data.get("description")
        if not isinstance(description, str):
            description = None

        category = detect_category(title, description)
        return Article(
            id=self._article_id(data, lang, title),
            hook=hook,
            emoji=category_emoji(category),
            category=category,
            tags=extract_tags(title, description),
            wiki_categories=wiki_categories(description),
            thumbnail=_nested(data, "thumbnail", "source"),
            source=ArticleSource(
                title=title,
                url=_nested(data, "content_urls", "desktop", "page")
                or f"https://{lang}.wikipedia.org/wiki/{quote(title)}",
                lang=lang,
            ),
        )

    async def _fetch_random(self, lang: str) -> Article | None:
        try:
            data = await self._get_json(lang, "/page/random/summary")
        except ProviderError as e:
            self._log.warning("provider_request_failed", lang=lang, **e.to_dict())
            return None
        return self.format_article(data, lang)

    def _format_event(self, event: Any, lang: str) -> Article | None:
        if not isinstance(event, dict):
            return None
        text = event.get("text")
        year = event.get("year")
        if not isinstance(text, str) or len(text) <= ON_THIS_DAY_MIN_TEXT:
            return None
        if not isinstance(year, int) or isinstance(year, bool):
            return None

        digest = hashlib.sha256(text.encode("utf-8")).hexdigest()[:12]
        source = None
        pages = event.get("pages")
        if isinstance(pages, list) and pages and isinstance(pages[0], dict):
            page_title = pages[0].get("title")
            if isinstance(page_title, str) and page_title:
                source = ArticleSource(
                    title=page_title,
                    url=_nested(pages[0], "content_urls", "desktop", "page"),
                    lang=lang,
                )

        return Article(
            id=f"otd-{lang}-{year}-{digest}",
            hook=truncate_hook(f"{year}: {text}", self._config.max_hook_length),
            emoji=ON_THIS_DAY_EMOJI,
            category=Category.HISTORY,
            tags=list(ON_THIS_DAY_TAGS),
            source=source,
        )

    @staticmethod
    def _article_id(data: dict[str, Any], lang: str, title: str) -> str:
        pageid = data.get("pageid")
        if isinstance(pageid, int) and not isinstance(pageid, bool):
            return f"wiki-{lang}-{pageid}"
        digest = hashlib.sha256(title.encode("utf-8")).hexdigest()[:12]
        return f"wiki-{lang}-{digest}"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._config.timeout_seconds,
                headers={
                    "User-Agent": self._config.user_agent,
                    "Accept": "application/json",
                },
                follow_redirects=True,
            )
            self._owns_client = True
        return self._client

    async def _get_json(self, lang: str, path: str) -> dict[str, Any]:
        """GET a path under a language endpoint and decode the JSON body.

        Args:
            lang: Language code.
            path: Path below the REST base URL.

        Returns:
            The decoded JSON object.

        Raises:
            ProviderError: On unknown language, network failure, error
                status, or a body that is not a JSON object.
        """
        base = self._config.endpoints.get(lang)
        if base is None:
            raise ProviderError(
                ProviderErrorClass.UNSUPPORTED_LANGUAGE,
                f"No endpoint configured for language {lang!r}",
            )

        url = f"{base.rstrip('/')}{path}"
        await self._limiter.acquire()

        try:
            response = await self._get_client().get(url)
        except httpx.HTTPError as e:
            raise ProviderError(
                ProviderErrorClass.NETWORK, f"{type(e).__name__}: {e}", url=url
            ) from e

        if response.status_code >= HTTP_STATUS_BAD_REQUEST:
            raise ProviderError(
                ProviderErrorClass.HTTP_STATUS,
                f"HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                ProviderErrorClass.PARSE, f"Invalid JSON: {e}", url=url
            ) from e

        if not isinstance(data, dict):
            raise ProviderError(
                ProviderErrorClass.PARSE, "Expected a JSON object", url=url
            )
        return data


def _nested(data: dict[str, Any], *keys: str) -> str | None:
    """Follow a chain of keys, returning a string leaf or None."""
    current: Any = data
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current if isinstance(current, str) else None
