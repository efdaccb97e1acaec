"""Reader preferences (language and theme)."""

from typing import Literal

from pydantic import ValidationError

from wikifeed.ledger.models import UserPreferences
from wikifeed.store import KeyValueStore, StorageKeys, StoreResult


class PreferencesManager:
    """Reads and updates persisted reader preferences."""

    def __init__(self, store: KeyValueStore, default_language: str = "tr") -> None:
        """Initialize the manager.

        Args:
            store: Backing store.
            default_language: Language used when nothing is stored.
        """
        self._store = store
        self._default_language = default_language

    def get(self) -> UserPreferences:
        """Get stored preferences, falling back to defaults."""
        defaults = UserPreferences(language=self._default_language)
        raw = self._store.get(StorageKeys.PREFERENCES.value)
        if not isinstance(raw, dict):
            return defaults
        try:
            return UserPreferences.model_validate(defaults.model_dump() | raw)
        except ValidationError:
            return defaults

    def set_language(self, language: str) -> StoreResult:
        """Persist the feed language."""
        return self._update(language=language)

    def set_theme(self, theme: Literal["dark", "light"]) -> StoreResult:
        """Persist the display theme."""
        return self._update(theme=theme)

    def _update(self, **changes: str) -> StoreResult:
        prefs = UserPreferences.model_validate(self.get().model_dump() | changes)
        return self._store.set(StorageKeys.PREFERENCES.value, prefs.model_dump())
