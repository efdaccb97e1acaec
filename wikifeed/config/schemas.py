"""Configuration schemas for the feed engine."""

from typing import Annotated, Self

from pydantic import Field, model_validator

from wikifeed.data_model import StrictBaseModel


class ScoringConfig(StrictBaseModel):
    """Weights used by the article scorer.

    Attributes:
        randomness: Upper bound of the uniform exploration term.
        category_weight: Multiplier for the decayed category weight.
        tag_weight: Multiplier for each decayed tag weight.
        wiki_category_weight: Multiplier for each decayed wiki category weight.
        related_boost: Flat bonus for articles from a related-article expansion.
        session_repeat_penalty: Penalty per recent session view of the category.
        session_lookback: Number of recent session categories inspected.
        seen_penalty: Flat penalty for articles already seen.
    """

    randomness: Annotated[float, Field(ge=0.0, le=10.0)] = 4.0
    category_weight: Annotated[float, Field(ge=0.0, le=10.0)] = 2.0
    tag_weight: Annotated[float, Field(ge=0.0, le=10.0)] = 1.0
    wiki_category_weight: Annotated[float, Field(ge=0.0, le=10.0)] = 0.5
    related_boost: Annotated[float, Field(ge=0.0, le=50.0)] = 5.0
    session_repeat_penalty: Annotated[float, Field(ge=0.0, le=50.0)] = 3.0
    session_lookback: Annotated[int, Field(ge=0, le=20)] = 3
    seen_penalty: Annotated[float, Field(ge=0.0, le=1000.0)] = 20.0

    @model_validator(mode="after")
    def seen_penalty_dominates_randomness(self) -> Self:
        """Seen articles must sort below unseen twins for any random draw."""
        if self.seen_penalty <= self.randomness:
            msg = "seen_penalty must be greater than randomness"
            raise ValueError(msg)
        return self


class InteractionDeltas(StrictBaseModel):
    """Score deltas applied by interaction events.

    Attributes:
        like: Category delta for a like.
        unlike: Category delta for removing a like.
        save: Category delta for saving an article.
        unsave: Category delta for removing a saved article.
        not_interested: Category delta for an explicit dismissal.
        skip: Delta for views shorter than ``skip_below_ms``.
        short_read: Delta for views shorter than ``short_read_below_ms``.
        long_read: Delta for views longer than ``long_read_above_ms``.
        tag_factor: Share of a like/unlike delta applied to each tag.
        wiki_category_factor: Share of a like/unlike delta applied to each
            wiki category.
        not_interested_tag_factor: Share of the dismissal delta applied to tags.
        skip_below_ms: Upper bound of the skip band.
        short_read_below_ms: Upper bound of the short-read band.
        long_read_above_ms: Lower bound of the long-read band.
    """

    like: Annotated[float, Field(gt=0.0)] = 10.0
    unlike: Annotated[float, Field(lt=0.0)] = -6.0
    save: Annotated[float, Field(gt=0.0)] = 8.0
    unsave: Annotated[float, Field(lt=0.0)] = -4.0
    not_interested: Annotated[float, Field(lt=0.0)] = -15.0
    skip: Annotated[float, Field(lt=0.0)] = -2.0
    short_read: Annotated[float, Field(lt=0.0)] = -0.5
    long_read: Annotated[float, Field(gt=0.0)] = 3.0
    tag_factor: Annotated[float, Field(ge=0.0, le=1.0)] = 0.5
    wiki_category_factor: Annotated[float, Field(ge=0.0, le=1.0)] = 0.3
    not_interested_tag_factor: Annotated[float, Field(ge=0.0, le=1.0)] = 0.5
    skip_below_ms: Annotated[int, Field(ge=0)] = 800
    short_read_below_ms: Annotated[int, Field(ge=0)] = 1500
    long_read_above_ms: Annotated[int, Field(ge=0)] = 3000

    @model_validator(mode="after")
    def view_bands_ordered(self) -> Self:
        """View duration bands must not overlap."""
        if not (
            self.skip_below_ms <= self.short_read_below_ms <= self.long_read_above_ms
        ):
            msg = "view bands must satisfy skip <= short_read <= long_read"
            raise ValueError(msg)
        return self


class DecayConfig(StrictBaseModel):
    """Time decay of preference scores.

    Attributes:
        half_life_days: Age at which a score counts half.
        legacy_factor: Fixed scale for entries stored without a timestamp.
    """

    half_life_days: Annotated[float, Field(gt=0.0, le=365.0)] = 7.0
    legacy_factor: Annotated[float, Field(ge=0.0, le=1.0)] = 0.5

    @property
    def half_life_ms(self) -> float:
        """Half-life in milliseconds."""
        return self.half_life_days * 24 * 60 * 60 * 1000


class SessionConfig(StrictBaseModel):
    """In-memory session window used for diversity.

    Attributes:
        window_size: Number of recent categories remembered.
        inactivity_minutes: Idle gap after which the session restarts.
        max_consecutive: Category run length allowed by the diversifier.
    """

    window_size: Annotated[int, Field(ge=1, le=200)] = 20
    inactivity_minutes: Annotated[float, Field(gt=0.0, le=24 * 60)] = 30.0
    max_consecutive: Annotated[int, Field(ge=1, le=10)] = 2


class LedgerConfig(StrictBaseModel):
    """Interaction ledger settings.

    Attributes:
        seen_capacity: Maximum number of remembered seen ids.
        deltas: Score deltas per interaction.
        decay: Read-time decay settings.
    """

    seen_capacity: Annotated[int, Field(ge=1, le=100_000)] = 500
    deltas: InteractionDeltas = Field(default_factory=InteractionDeltas)
    decay: DecayConfig = Field(default_factory=DecayConfig)


class CacheConfig(StrictBaseModel):
    """Article cache settings.

    Attributes:
        duration_minutes: Age after which a language's cache is stale.
        max_per_language: Entry cap per language list.
        max_bytes: Serialized size budget across all languages.
        evict_target_ratio: Fraction of the budget to evict down to.
        min_entries_per_language: Languages at or below this are never evicted.
        eviction_batch: Entries removed from one language per round.
    """

    duration_minutes: Annotated[float, Field(gt=0.0, le=7 * 24 * 60)] = 60.0
    max_per_language: Annotated[int, Field(ge=1, le=10_000)] = 150
    max_bytes: Annotated[int, Field(ge=1024)] = 2_000_000
    evict_target_ratio: Annotated[float, Field(gt=0.0, le=1.0)] = 0.8
    min_entries_per_language: Annotated[int, Field(ge=0)] = 10
    eviction_batch: Annotated[int, Field(ge=1, le=1000)] = 5


class StoreConfig(StrictBaseModel):
    """Persistent store settings.

    Attributes:
        namespace: Key namespace inside the database.
        max_bytes: Total size budget of stored values in the namespace.
    """

    namespace: Annotated[str, Field(min_length=1, pattern=r"^[a-z0-9_\-]+$")] = (
        "wikifeed"
    )
    max_bytes: Annotated[int, Field(ge=1024)] = 5 * 1024 * 1024


class ProviderConfig(StrictBaseModel):
    """Wikipedia provider settings.

    Attributes:
        endpoints: REST API base URL per language.
        user_agent: User-Agent sent to Wikipedia.
        timeout_seconds: Per-request timeout.
        overfetch_factor: Random summaries requested per wanted article.
        max_qps: Request rate limit.
        min_hook_length: Shortest acceptable hook.
        max_hook_length: Longest hook before truncation.
        on_this_day_limit: Maximum events taken from the on-this-day feed.
    """

    endpoints: dict[str, str] = Field(
        default_factory=lambda: {
            "tr": "https://tr.wikipedia.org/api/rest_v1",
            "en": "https://en.wikipedia.org/api/rest_v1",
        }
    )
    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        "wikifeed/0.1 (personal feed reader)"
    )
    timeout_seconds: Annotated[float, Field(ge=1.0, le=120.0)] = 10.0
    overfetch_factor: Annotated[int, Field(ge=1, le=10)] = 3
    max_qps: Annotated[float, Field(gt=0.0, le=200.0)] = 20.0
    min_hook_length: Annotated[int, Field(ge=1, le=280)] = 50
    max_hook_length: Annotated[int, Field(ge=10, le=280)] = 280
    on_this_day_limit: Annotated[int, Field(ge=0, le=100)] = 10


class ControllerConfig(StrictBaseModel):
    """Feed controller settings.

    Attributes:
        initial_count: Articles loaded on start and after a reset.
        more_count: Articles loaded when the reader nears the end.
        load_more_threshold: Remaining cards that trigger loading more.
        max_fetch_rounds: Fetch-and-filter attempts per load.
        on_this_day_per_load: On-this-day events mixed into a first load.
        top_up_multiplier: Background top-up size relative to the load size.
    """

    initial_count: Annotated[int, Field(ge=1, le=100)] = 10
    more_count: Annotated[int, Field(ge=1, le=100)] = 5
    load_more_threshold: Annotated[int, Field(ge=0, le=50)] = 3
    max_fetch_rounds: Annotated[int, Field(ge=1, le=20)] = 5
    on_this_day_per_load: Annotated[int, Field(ge=0, le=10)] = 2
    top_up_multiplier: Annotated[int, Field(ge=1, le=10)] = 2


class WikifeedConfig(StrictBaseModel):
    """Root configuration of the feed."""

    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    controller: ControllerConfig = Field(default_factory=ControllerConfig)
