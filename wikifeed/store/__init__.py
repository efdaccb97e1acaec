"""Persistent key-value store for feed state.

This module provides durable storage for:
- Likes, seen ids, and per-category preference scores
- Per-language article cache lists and their refresh timestamps
- Saved articles and user preferences
"""

from wikifeed.store.errors import (
    MigrationError,
    QuotaExceededError,
    StoreConnectionError,
    StoreError,
)
from wikifeed.store.keys import StorageKeys
from wikifeed.store.metrics import StoreMetrics
from wikifeed.store.models import StoreErrorClass, StoreResult
from wikifeed.store.store import KeyValueStore


__all__ = [
    # Errors
    "MigrationError",
    "QuotaExceededError",
    "StoreConnectionError",
    "StoreError",
    # Keys
    "StorageKeys",
    # Metrics
    "StoreMetrics",
    # Models
    "StoreErrorClass",
    "StoreResult",
    # Store
    "KeyValueStore",
]
