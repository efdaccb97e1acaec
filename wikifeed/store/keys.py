"""Persisted key layout."""

from enum import Enum


KEY_PREFIX = "wikifeed_"


class StorageKeys(str, Enum):
    """Keys of every value the feed persists.

    - LIKES: array of liked article ids
    - SEEN: bounded array of seen article ids, oldest first
    - PREFERENCES: ``{language, theme}``
    - CATEGORY_SCORES: map of key to float (legacy) or ``{score, timestamp}``
    - CACHE: map of language to array of article projections
    - CACHE_TIMESTAMPS: map of language to epoch-millis of last refresh
    - SAVED: array of saved article snapshots, most recent first
    """

    LIKES = f"{KEY_PREFIX}likes"
    SEEN = f"{KEY_PREFIX}seen"
    PREFERENCES = f"{KEY_PREFIX}prefs"
    CATEGORY_SCORES = f"{KEY_PREFIX}cat_scores"
    CACHE = f"{KEY_PREFIX}cache"
    CACHE_TIMESTAMPS = f"{KEY_PREFIX}cache_timestamps"
    SAVED = f"{KEY_PREFIX}saved"
