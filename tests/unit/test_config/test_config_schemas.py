"""Unit tests for configuration schemas."""

import pytest
from pydantic import ValidationError

from wikifeed.config import (
    CacheConfig,
    DecayConfig,
    InteractionDeltas,
    ProviderConfig,
    StoreConfig,
    WikifeedConfig,
)


class TestDefaults:
    """Tests for built-in defaults."""

    def test_interaction_deltas(self) -> None:
        """Test the default interaction deltas."""
        deltas = InteractionDeltas()

        assert (deltas.like, deltas.unlike) == (10.0, -6.0)
        assert (deltas.save, deltas.unsave) == (8.0, -4.0)
        assert deltas.not_interested == -15.0
        assert (deltas.skip, deltas.short_read, deltas.long_read) == (-2.0, -0.5, 3.0)

    def test_decay(self) -> None:
        """Test the default half-life is one week."""
        assert DecayConfig().half_life_ms == 7 * 24 * 60 * 60 * 1000

    def test_cache(self) -> None:
        """Test the default cache limits."""
        config = CacheConfig()

        assert config.duration_minutes == 60.0
        assert config.max_per_language == 150
        assert config.max_bytes == 2_000_000
        assert config.evict_target_ratio == 0.8
        assert config.min_entries_per_language == 10

    def test_root(self) -> None:
        """Test the root config builds from nothing."""
        config = WikifeedConfig()

        assert config.session.max_consecutive == 2
        assert config.controller.max_fetch_rounds == 5
        assert sorted(config.provider.endpoints) == ["en", "tr"]


class TestValidation:
    """Tests for rejected values."""

    def test_positive_deltas_required(self) -> None:
        """Test a like cannot lower scores."""
        with pytest.raises(ValidationError):
            InteractionDeltas(like=-1.0)

    def test_view_bands_ordered(self) -> None:
        """Test overlapping view bands are rejected."""
        with pytest.raises(ValidationError, match="view bands"):
            InteractionDeltas(skip_below_ms=2000, short_read_below_ms=1000)

    def test_half_life_positive(self) -> None:
        """Test a zero half-life is rejected."""
        with pytest.raises(ValidationError):
            DecayConfig(half_life_days=0)

    def test_namespace_pattern(self) -> None:
        """Test namespaces are restricted to safe characters."""
        with pytest.raises(ValidationError):
            StoreConfig(namespace="Wiki Feed!")

    def test_hook_length_bounded(self) -> None:
        """Test hooks cannot exceed the display limit."""
        with pytest.raises(ValidationError):
            ProviderConfig(max_hook_length=500)

    def test_unknown_keys_rejected(self) -> None:
        """Test typos in config keys are caught."""
        with pytest.raises(ValidationError):
            WikifeedConfig.model_validate({"scoring": {"randomnes": 2.0}})

    def test_nested_override(self) -> None:
        """Test nested sections override independently."""
        config = WikifeedConfig.model_validate(
            {"ledger": {"decay": {"half_life_days": 14}}}
        )

        assert config.ledger.decay.half_life_days == 14
        assert config.ledger.deltas.like == 10.0
