"""Bounded insertion-ordered set of seen article ids."""

from collections.abc import Iterable, Iterator


class SeenSet:
    """Bounded ordered set with FIFO eviction.

    The oldest inserted id is dropped first once ``capacity`` is exceeded.
    Adding an id that is already present is a no-op and does not refresh
    its position.
    """

    def __init__(self, ids: Iterable[str] = (), capacity: int = 500) -> None:
        """Initialize the set.

        Args:
            ids: Existing ids, oldest first.
            capacity: Maximum number of ids kept.
        """
        self._capacity = capacity
        self._ids: dict[str, None] = {}
        for article_id in ids:
            self._ids.setdefault(article_id, None)
        self._evict()

    @property
    def capacity(self) -> int:
        """Get the capacity."""
        return self._capacity

    def add(self, article_id: str) -> bool:
        """Insert an id.

        Args:
            article_id: Id to insert.

        Returns:
            True if the id was new.
        """
        if article_id in self._ids:
            return False
        self._ids[article_id] = None
        self._evict()
        return True

    def to_list(self) -> list[str]:
        """Ids oldest first."""
        return list(self._ids)

    def _evict(self) -> None:
        while len(self._ids) > self._capacity:
            del self._ids[next(iter(self._ids))]

    def __contains__(self, article_id: object) -> bool:
        return article_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)
