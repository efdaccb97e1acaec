"""Data models for the interaction ledger."""

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import Field

from wikifeed.config.schemas import DecayConfig
from wikifeed.data_model import StrictBaseModel
from wikifeed.ledger.decay import decay_multiplier


class InteractionKind(str, Enum):
    """Interaction events reported by the feed."""

    LIKE = "like"
    UNLIKE = "unlike"
    SAVE = "save"
    UNSAVE = "unsave"
    NOT_INTERESTED = "not_interested"
    VIEW = "view"
    OPEN_SOURCE = "open_source"


class PreferenceScore(StrictBaseModel):
    """Raw preference score for one category or tag key.

    ``timestamp`` is None for legacy entries that were persisted as a bare
    number; such entries decay by a fixed factor instead of by age.

    Attributes:
        score: Accumulated raw score (unbounded, may be negative).
        timestamp: Epoch milliseconds of the last update.
    """

    score: float
    timestamp: int | None = None

    @property
    def is_legacy(self) -> bool:
        """Whether the entry was stored without a timestamp."""
        return self.timestamp is None

    @classmethod
    def from_stored(cls, value: Any) -> "PreferenceScore | None":
        """Normalize a persisted value.

        Accepts a bare number (legacy) or a ``{score, timestamp}`` mapping.

        Args:
            value: Value read from the store.

        Returns:
            The normalized entry, or None if the value is unusable.
        """
        if isinstance(value, bool):
            return None
        if isinstance(value, int | float):
            return cls(score=float(value))
        if isinstance(value, dict) and isinstance(value.get("score"), int | float):
            timestamp = value.get("timestamp")
            return cls(
                score=float(value["score"]),
                timestamp=(
                    int(timestamp) if isinstance(timestamp, int | float) else None
                ),
            )
        return None

    def to_stored(self) -> float | dict[str, float | int]:
        """Persisted representation; legacy entries stay bare numbers."""
        if self.timestamp is None:
            return self.score
        return {"score": self.score, "timestamp": self.timestamp}

    def decayed(self, now_ms: int, decay: DecayConfig) -> float:
        """Score after read-time decay.

        Args:
            now_ms: Current time in epoch milliseconds.
            decay: Decay settings.

        Returns:
            The effective score at ``now_ms``.
        """
        if self.timestamp is None:
            return self.score * decay.legacy_factor
        age_ms = now_ms - self.timestamp
        return self.score * decay_multiplier(age_ms, decay.half_life_ms)


class InteractionResult(StrictBaseModel):
    """Outcome of recording an interaction.

    Attributes:
        article_id: Article the interaction concerned.
        kind: Interaction event.
        deltas: Score delta applied per key.
        persisted: Whether every resulting write reached the store.
    """

    article_id: str
    kind: InteractionKind
    deltas: dict[str, float] = Field(default_factory=dict)
    persisted: bool = True


class UserPreferences(StrictBaseModel):
    """Reader preferences.

    Attributes:
        language: Feed language code.
        theme: Display theme.
    """

    language: Annotated[str, Field(min_length=2, max_length=12)] = "tr"
    theme: Literal["dark", "light"] = "dark"
