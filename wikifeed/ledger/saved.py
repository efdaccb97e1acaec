"""Saved-articles list."""

import structlog
from pydantic import ValidationError

from wikifeed.articles import Article, SavedArticle
from wikifeed.data_model import Clock, utc_now
from wikifeed.store import KeyValueStore, StorageKeys


logger = structlog.get_logger()


class SavedItems:
    """Most-recent-first list of saved article snapshots.

    Snapshots are copies; removing an item never touches the article cache
    or the seen set.
    """

    def __init__(self, store: KeyValueStore, clock: Clock = utc_now) -> None:
        """Initialize the saved list.

        Args:
            store: Backing store.
            clock: Source of the current time.
        """
        self._store = store
        self._clock = clock
        self._log = logger.bind(component="ledger", subcomponent="saved")

    def get_all(self) -> list[SavedArticle]:
        """Get saved articles, most recent first.

        Entries that no longer validate are skipped.
        """
        raw = self._store.get(StorageKeys.SAVED.value)
        if not isinstance(raw, list):
            return []

        saved: list[SavedArticle] = []
        for entry in raw:
            try:
                saved.append(SavedArticle.model_validate(entry))
            except ValidationError:
                self._log.warning("saved_entry_invalid", entry=entry)
        return saved

    def contains(self, article_id: str) -> bool:
        """Check whether an article is saved."""
        return any(item.id == article_id for item in self.get_all())

    def add(self, article: Article) -> bool:
        """Save a snapshot of an article at the head of the list.

        Saving an article that is already saved changes nothing.

        Args:
            article: Article to save.

        Returns:
            False only if a needed write failed.
        """
        items = self.get_all()
        if any(item.id == article.id for item in items):
            return True
        items.insert(0, article.to_saved(self._clock()))
        return self._write(items)

    def remove(self, article_id: str) -> bool:
        """Remove an article from the list.

        Args:
            article_id: Id to remove.

        Returns:
            False only if a needed write failed.
        """
        items = self.get_all()
        kept = [item for item in items if item.id != article_id]
        if len(kept) == len(items):
            return True
        return self._write(kept)

    def _write(self, items: list[SavedArticle]) -> bool:
        result = self._store.set(
            StorageKeys.SAVED.value,
            [item.model_dump(mode="json") for item in items],
        )
        return result.ok
