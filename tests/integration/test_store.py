"""Integration tests for the SQLite key-value store."""

from collections.abc import Generator
from pathlib import Path

import pytest

from wikifeed.store import KeyValueStore, StoreMetrics
from wikifeed.store.migrations import CURRENT_VERSION, MigrationManager


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "nested" / "state.sqlite"


@pytest.fixture
def store(temp_db_path: Path) -> Generator[KeyValueStore]:
    """Create a connected file-backed store."""
    StoreMetrics.reset()
    store = KeyValueStore(temp_db_path)
    store.connect()
    yield store
    store.close()


class TestFileStore:
    """Tests for the file-backed store."""

    def test_connect_creates_database_and_parents(self, temp_db_path: Path) -> None:
        """Test connecting creates the file and its directories."""
        assert not temp_db_path.exists()

        with KeyValueStore(temp_db_path):
            assert temp_db_path.exists()

    def test_wal_mode_enabled(self, store: KeyValueStore) -> None:
        """Test WAL mode is enabled."""
        mode = store._ensure_connected().execute("PRAGMA journal_mode").fetchone()[0]

        assert mode.lower() == "wal"

    def test_values_survive_reopen(self, temp_db_path: Path) -> None:
        """Test written values are durable."""
        with KeyValueStore(temp_db_path) as store:
            store.set("wikifeed_likes", ["wiki-tr-1", "wiki-tr-2"])

        with KeyValueStore(temp_db_path) as store:
            assert store.get("wikifeed_likes") == ["wiki-tr-1", "wiki-tr-2"]

    def test_migrations_recorded(self, store: KeyValueStore) -> None:
        """Test the schema version is at the latest migration."""
        manager = MigrationManager(store._ensure_connected())

        assert manager.get_current_version() == CURRENT_VERSION

    def test_reconnect_applies_no_migrations(self, temp_db_path: Path) -> None:
        """Test migrations are not reapplied on an up-to-date database."""
        with KeyValueStore(temp_db_path):
            pass

        with KeyValueStore(temp_db_path) as store:
            manager = MigrationManager(store._ensure_connected())
            assert manager.apply_migrations() == []

    def test_total_bytes_tracks_writes(self, store: KeyValueStore) -> None:
        """Test the namespace size is the sum of encoded values."""
        store.set("a", "xx")
        store.set("b", [1, 2, 3])

        assert store.total_bytes() == len('"xx"') + len("[1,2,3]")
