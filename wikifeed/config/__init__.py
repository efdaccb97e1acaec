"""Tunable configuration for ranking, caching, and fetching.

All numeric constants of the feed (interaction deltas, decay half-life,
diversity window, cache budgets) are configuration defaults defined here and
can be overridden from a YAML file.
"""

from wikifeed.config.loader import ConfigValidationError, load_config
from wikifeed.config.schemas import (
    CacheConfig,
    ControllerConfig,
    DecayConfig,
    InteractionDeltas,
    LedgerConfig,
    ProviderConfig,
    ScoringConfig,
    SessionConfig,
    StoreConfig,
    WikifeedConfig,
)


__all__ = [
    "CacheConfig",
    "ConfigValidationError",
    "ControllerConfig",
    "DecayConfig",
    "InteractionDeltas",
    "LedgerConfig",
    "ProviderConfig",
    "ScoringConfig",
    "SessionConfig",
    "StoreConfig",
    "WikifeedConfig",
    "load_config",
]
