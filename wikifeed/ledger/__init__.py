"""Interaction ledger: likes, seen ids, saved list, and preference scores."""

from wikifeed.ledger.decay import decay_multiplier
from wikifeed.ledger.ledger import CategorySink, InteractionLedger
from wikifeed.ledger.models import (
    InteractionKind,
    InteractionResult,
    PreferenceScore,
    UserPreferences,
)
from wikifeed.ledger.preferences import PreferencesManager
from wikifeed.ledger.saved import SavedItems
from wikifeed.ledger.seen import SeenSet


__all__ = [
    "CategorySink",
    "InteractionKind",
    "InteractionLedger",
    "InteractionResult",
    "PreferenceScore",
    "PreferencesManager",
    "SavedItems",
    "SeenSet",
    "UserPreferences",
    "decay_multiplier",
]
